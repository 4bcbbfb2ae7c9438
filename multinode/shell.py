"""
Interactive shell bound to one installation.

The shell starts with the user's own startup files, then gets the installation's
PATH, NODE_PATH and library paths and a prompt naming the node version and
architecture. Its exit status becomes multinode's exit status.
"""

import os
import shlex
import tempfile
from collections.abc import Mapping
from pathlib import Path

from . import process, toolchain
from .config import Config
from .errors import FatalError
from .installation import Installation, installation_for, require_installed

STARTUP_FILES = (".bash_profile", ".bashrc")
OVERLAY_VARS = ("NODE_PATH", "LD_LIBRARY_PATH", "LD_LIBRARY_PATH_64")


def select_installation(config: Config, version: str, arch: str | None = None) -> Installation:
    """Validate a version/arch selection; ``arch`` defaults to the first configured one."""
    if version not in config.versions:
        raise FatalError(f"Unknown version: {version} (run `multinode versions` to list them)")
    if arch is None:
        arch = config.arches[0]
    elif arch not in config.arches:
        raise FatalError(f"Unknown architecture: {arch} (run `multinode versions` to list them)")
    return installation_for(config, version, arch)


def prompt_for(installation: Installation) -> str:
    return f"[node {installation.version} {installation.arch}] \\w $ "


def render_rcfile(installation: Installation, env: Mapping[str, str], home: Path) -> str:
    """Startup script: user dotfiles first, then the installation overlay."""
    lines = []
    for name in STARTUP_FILES:
        dotfile = shlex.quote(str(home / name))
        lines.append(f"[ -f {dotfile} ] && . {dotfile}")
    lines.append(f'export PATH={shlex.quote(str(installation.bin_dir))}:"$PATH"')
    for var in OVERLAY_VARS:
        lines.append(f"export {var}={shlex.quote(env[var])}")
    lines.append(f"PS1={shlex.quote(prompt_for(installation))}")
    return "\n".join(lines) + "\n"


def env(config: Config, version: str, arch: str | None = None) -> int:
    """Entry point for the ``env`` command. Returns the shell's exit status."""
    installation = require_installed(select_installation(config, version, arch))
    prefix = toolchain.compiler_prefix(config)
    shell_env = toolchain.node_environment(config, installation, prefix)

    with tempfile.NamedTemporaryFile("w", prefix="multinode-", suffix=".rc", delete=False) as rc:
        rc.write(render_rcfile(installation, shell_env, Path.home()))
        rcfile = Path(rc.name)

    print(f"Entering node {installation} shell (exit to return)")
    try:
        return process.run([config.shell, "--rcfile", str(rcfile), "-i"], env=shell_env)
    finally:
        os.unlink(rcfile)
