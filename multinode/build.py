"""
Build the project's native addon against every installation.

For each installation without a built addon:
1. Put the installation's bin/ first on PATH
2. make clean (the addon must be gone afterwards)
3. make (the addon must exist afterwards)
4. Move the addon into the installation's lib/ directory

``clobber`` removes the relocated addons again.
"""

import shutil
from pathlib import Path

from . import process, toolchain
from .config import Config
from .console import print_section
from .errors import FatalError
from .installation import Installation, iter_installations, require_installed


def relocated_artifact(installation: Installation, artifact: str) -> Path:
    return installation.lib_dir / Path(artifact).name


def build_one(config: Config, installation: Installation, artifact: str) -> None:
    """Build the addon for one installation and move it into its lib/ directory."""
    built = config.root / artifact
    env = toolchain.build_environment(installation)

    returncode = process.run([config.make, "clean"], cwd=config.root, env=env)
    if returncode != 0:
        raise FatalError(f"`{config.make} clean` failed for node {installation} (exit {returncode})")
    if built.exists():
        raise FatalError(f"{built} still exists after `{config.make} clean`")

    returncode = process.run([config.make], cwd=config.root, env=env)
    if returncode != 0:
        raise FatalError(f"`{config.make}` failed for node {installation} (exit {returncode})")
    if not built.exists():
        raise FatalError(f"{built} was not created by `{config.make}` for node {installation}")

    destination = relocated_artifact(installation, artifact)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(built), str(destination))
    print(f"✓ Built: {destination}")


def build(config: Config) -> int:
    """Entry point for the ``build`` command."""
    artifact = toolchain.read_artifact_name(config.root)
    print_section(f"BUILDING {artifact}")

    for installation in iter_installations(config):
        require_installed(installation)
        destination = relocated_artifact(installation, artifact)
        print(f"\n--- node {installation} ---")
        if destination.exists():
            print(f"Already exists: {destination}")
            continue
        build_one(config, installation, artifact)

    return 0


def clobber(config: Config) -> int:
    """Entry point for the ``clobber`` command."""
    artifact = toolchain.read_artifact_name(config.root)

    for installation in iter_installations(config):
        require_installed(installation)
        destination = relocated_artifact(installation, artifact)
        if not destination.exists():
            continue
        try:
            destination.unlink()
        except OSError as e:
            print(f"⚠️  Warning: could not remove {destination}: {e}")
            continue
        print(f"Removed: {destination}")

    return 0
