"""
Installation layout.

An installation is never recorded anywhere: it is the directory
``{target_dir}/node-v{version}-{platform}-{arch}`` and it counts as installed when
that directory holds the node executable.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .config import Config
from .errors import FatalError


@dataclass(frozen=True)
class Installation:
    """One Node.js distribution for a version/platform/architecture triple."""

    version: str
    platform: str
    arch: str
    target_dir: Path

    @property
    def name(self) -> str:
        return f"node-v{self.version}-{self.platform}-{self.arch}"

    @property
    def path(self) -> Path:
        return self.target_dir / self.name

    @property
    def bin_dir(self) -> Path:
        return self.path / "bin"

    @property
    def lib_dir(self) -> Path:
        return self.path / "lib"

    @property
    def executable(self) -> Path:
        node_binary_name = "node.exe" if self.platform == "win" else "node"
        return self.bin_dir / node_binary_name

    def is_installed(self) -> bool:
        return self.path.is_dir() and self.executable.exists()

    def archive_name(self, archive_format: str) -> str:
        return f"{self.name}.{archive_format}"

    def download_url(self, base_url: str, archive_format: str) -> str:
        return f"{base_url}/v{self.version}/{self.archive_name(archive_format)}"

    def __str__(self) -> str:
        return f"{self.version} {self.platform} {self.arch}"


def iter_pairs(config: Config) -> Iterator[tuple[str, str]]:
    """Yield every (version, arch) pair, versions outermost, in configured order."""
    for version in config.versions:
        for arch in config.arches:
            yield version, arch


def installation_for(config: Config, version: str, arch: str) -> Installation:
    return Installation(version, config.platform, arch, config.target_dir)


def iter_installations(config: Config) -> Iterator[Installation]:
    for version, arch in iter_pairs(config):
        yield installation_for(config, version, arch)


def require_installed(installation: Installation) -> Installation:
    """Return ``installation`` or raise FatalError if it has not been set up."""
    if not installation.path.is_dir():
        raise FatalError(f"Installation not found: {installation.path} (run `multinode setup` first)")
    if not installation.executable.exists():
        raise FatalError(
            f"Node executable missing: {installation.executable} (run `multinode setup` first)"
        )
    return installation
