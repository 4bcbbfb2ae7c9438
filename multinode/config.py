"""
Configuration for multinode.

Defaults live in the module-level constants below. A project can override any of
them with a ``multinode.json`` file in its root directory, for example:

    {
      "versions": ["4.9.1", "6.17.1"],
      "arches": ["x64"],
      "archive_format": "tar.xz"
    }

The resulting Config is built once at startup and never mutated.
"""

import json
import os
import platform
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .errors import FatalError

# ============================================================================
# Defaults
# ============================================================================

DEFAULT_VERSIONS = ("0.10.48", "0.12.18", "4.9.1", "6.17.1")
DEFAULT_ARCHES = ("x86", "x64")

# Official Node.js distribution server
NODEJS_DIST_URL = "https://nodejs.org/dist"

CONFIG_FILENAME = "multinode.json"
ROOT_ENV_VAR = "MULTINODE_ROOT"

# Archive formats published on nodejs.org (tar.zst for repacked mirrors)
ARCHIVE_FORMATS = ("tar.gz", "tar.xz", "tar.zst")

# Library subdirectories of the compiler prefix: default, then 64-bit
DEFAULT_LIB_SUBDIRS = ("lib", "lib/amd64")

DEFAULT_TEST_RUNNER = ("node_modules/.bin/tape",)
DEFAULT_TEST_GLOB = "test/*.test.js"

DEFAULT_SHELL = "/bin/bash"


def get_current_platform() -> str:
    """Map the host OS to the platform name used in Node.js archive names."""
    system = platform.system().lower()
    if system == "windows":
        return "win"
    if system in ("sunos", "solaris"):
        return "sunos"
    return system


@dataclass(frozen=True)
class Config:
    """Immutable run configuration shared by every operation."""

    root: Path
    versions: tuple[str, ...] = DEFAULT_VERSIONS
    arches: tuple[str, ...] = DEFAULT_ARCHES
    platform: str = field(default_factory=get_current_platform)
    base_url: str = NODEJS_DIST_URL
    target_dir: Path | None = None
    archive_format: str = "tar.gz"
    verify_checksums: bool = True
    compiler: str = "gcc"
    make: str = "make"
    test_runner: tuple[str, ...] = DEFAULT_TEST_RUNNER
    test_glob: str = DEFAULT_TEST_GLOB
    lib_subdirs: tuple[str, ...] = DEFAULT_LIB_SUBDIRS
    # The rc file and --rcfile flag are bash-specific; $SHELL is not consulted
    shell: str = DEFAULT_SHELL

    def __post_init__(self) -> None:
        if self.target_dir is None:
            object.__setattr__(self, "target_dir", self.root / "node")
        if not self.versions:
            raise FatalError("No Node.js versions configured")
        if not self.arches:
            raise FatalError("No architectures configured")
        if self.archive_format not in ARCHIVE_FORMATS:
            raise FatalError(
                f"Unsupported archive format: {self.archive_format} (choose from {', '.join(ARCHIVE_FORMATS)})"
            )
        if not self.test_runner:
            raise FatalError("test_runner must name a command")
        if len(self.lib_subdirs) != 2:
            raise FatalError("lib_subdirs must name exactly two directories (default and 64-bit)")


# Keys accepted in multinode.json and the type each must have
_LIST_KEYS = {"versions", "arches", "test_runner", "lib_subdirs"}
_STR_KEYS = {"platform", "base_url", "target_dir", "archive_format", "compiler", "make", "test_glob", "shell"}
_BOOL_KEYS = {"verify_checksums"}


def resolve_root(start: Path | str | None = None) -> Path:
    """
    Resolve the tool root directory.

    Args:
        start: Directory to resolve; defaults to $MULTINODE_ROOT or the working directory

    Returns:
        Canonical absolute path of the root

    Raises:
        FatalError: If the directory cannot be resolved
    """
    if start is None:
        start = os.environ.get(ROOT_ENV_VAR) or os.getcwd()
    try:
        root = Path(start).resolve(strict=True)
    except OSError as e:
        raise FatalError(f"Cannot resolve root directory {start}: {e}") from e
    if not root.is_dir():
        raise FatalError(f"Root is not a directory: {root}")
    return root


def _coerce_overrides(data: dict[str, Any], source: Path, root: Path) -> dict[str, Any]:
    """Validate raw JSON values and convert them to Config field types."""
    known = {f.name for f in fields(Config)} - {"root"}
    overrides: dict[str, Any] = {}

    for key, value in data.items():
        if key not in known:
            raise FatalError(f"Unknown key {key!r} in {source}")
        if key in _LIST_KEYS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise FatalError(f"{key!r} in {source} must be a list of strings")
            overrides[key] = tuple(value)
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise FatalError(f"{key!r} in {source} must be true or false")
            overrides[key] = value
        elif key in _STR_KEYS:
            if not isinstance(value, str):
                raise FatalError(f"{key!r} in {source} must be a string")
            overrides[key] = value

    if "target_dir" in overrides:
        overrides["target_dir"] = root / overrides["target_dir"]
    if "base_url" in overrides:
        overrides["base_url"] = overrides["base_url"].rstrip("/")
    return overrides


def load_config(root: Path) -> Config:
    """Build the Config for ``root``, applying multinode.json when present."""
    config_path = root / CONFIG_FILENAME
    if not config_path.exists():
        return Config(root=root)

    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FatalError(f"Cannot read {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise FatalError(f"{config_path} must contain a JSON object")

    return replace(Config(root=root), **_coerce_overrides(data, config_path, root))
