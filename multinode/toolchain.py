"""
Toolchain introspection and per-installation environments.

The system compiler's configured prefix locates the C++ runtime libraries a native
addon links against; ``package.json`` names the addon that ``make`` produces.
"""

import json
import os
import re
import subprocess
from collections.abc import Mapping
from pathlib import Path

from .config import Config
from .errors import FatalError
from .installation import Installation

ADDON_SUFFIX = ".node"
PACKAGE_DESCRIPTOR = "package.json"

_PREFIX_RE = re.compile(r"--prefix=(\S+)")


def parse_compiler_prefix(text: str) -> str | None:
    """
    Extract the install prefix from ``gcc -v`` style output.

    The relevant line looks like:
        Configured with: ../configure --prefix=/opt/local --with-gnu-as ...

    Returns:
        The prefix, or None if the output does not mention one
    """
    match = _PREFIX_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip("'\"").rstrip("/") or "/"


def compiler_verbose_output(compiler: str) -> str:
    """Run ``{compiler} -v`` and return its combined output."""
    try:
        result = subprocess.run([compiler, "-v"], capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise FatalError(f"Compiler not found: {compiler} (is the toolchain installed?)") from e
    # gcc prints its configuration on stderr
    return result.stderr + result.stdout


def compiler_prefix(config: Config) -> str:
    """Resolve the compiler prefix, raising FatalError when it cannot be found."""
    prefix = parse_compiler_prefix(compiler_verbose_output(config.compiler))
    if not prefix:
        raise FatalError(
            f"Could not determine the install prefix of {config.compiler} (is the toolchain installed?)"
        )
    return prefix


def read_artifact_name(root: Path) -> str:
    """
    Derive the addon file name from the ``main`` field of package.json.

    Args:
        root: Project root containing package.json

    Returns:
        Relative path of the built addon, e.g. ``build/Release/kstat.node``
    """
    descriptor = root / PACKAGE_DESCRIPTOR
    try:
        with open(descriptor, "r") as f:
            package = json.load(f)
    except FileNotFoundError as e:
        raise FatalError(f"{descriptor} not found") from e
    except (OSError, json.JSONDecodeError) as e:
        raise FatalError(f"Cannot read {descriptor}: {e}") from e

    main = package.get("main") if isinstance(package, dict) else None
    if not isinstance(main, str) or not main.strip():
        raise FatalError(f"{descriptor} has no \"main\" field")

    main = main.strip()
    if main.startswith("./"):
        main = main[2:]
    if not main.endswith(ADDON_SUFFIX):
        main += ADDON_SUFFIX
    return main


def prepend_path(entry: Path | str, current: str | None) -> str:
    if not current:
        return str(entry)
    return f"{entry}{os.pathsep}{current}"


def node_environment(
    config: Config,
    installation: Installation,
    prefix: str,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Build the environment for running code against ``installation``.

    Args:
        config: Run configuration
        installation: Installation whose node should be used
        prefix: Compiler prefix from compiler_prefix()
        base: Environment to extend (default: os.environ)

    Returns:
        A new mapping; ``base`` is not modified
    """
    env = dict(os.environ if base is None else base)
    default_lib, lib64 = config.lib_subdirs
    env["PATH"] = prepend_path(installation.bin_dir, env.get("PATH"))
    env["NODE_PATH"] = os.pathsep.join([str(config.root), str(installation.lib_dir)])
    env["LD_LIBRARY_PATH"] = str(Path(prefix) / default_lib)
    env["LD_LIBRARY_PATH_64"] = str(Path(prefix) / lib64)
    return env


def build_environment(installation: Installation, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for ``make``: only PATH is pointed at the installation."""
    env = dict(os.environ if base is None else base)
    env["PATH"] = prepend_path(installation.bin_dir, env.get("PATH"))
    return env
