"""
Set up every configured Node.js installation.

For each version/architecture pair:
1. Skip it if its directory already exists
2. Download node-v{version}-{platform}-{arch}.{format} from the dist server
3. Verify it against the release's SHASUMS256.txt (optional)
4. Extract it into the target directory
5. Remove the downloaded archive

The first failure aborts the whole run.
"""

import urllib.error
from pathlib import Path

from . import archive
from .config import Config
from .console import print_section
from .errors import FatalError
from .installation import Installation, iter_installations


def fetch_checksums(config: Config, version: str) -> dict[str, str]:
    """Download and parse SHASUMS256.txt for one release."""
    url = f"{config.base_url}/v{version}/{archive.CHECKSUMS_FILENAME}"
    checksums_path = config.target_dir / f"SHASUMS256-v{version}.txt"
    try:
        archive.download_file(url, checksums_path, show_progress=False)
        text = checksums_path.read_text()
    except (urllib.error.URLError, OSError) as e:
        raise FatalError(f"Failed to download checksums for v{version} from {url}: {e}") from e
    finally:
        checksums_path.unlink(missing_ok=True)
    return archive.parse_checksums(text)


def download_installation(config: Config, installation: Installation) -> Path:
    """Download one installation's archive into the target directory."""
    url = installation.download_url(config.base_url, config.archive_format)
    archive_path = config.target_dir / installation.archive_name(config.archive_format)

    archive.discard_incomplete_download(archive_path)
    if archive_path.exists():
        archive_path.unlink()

    try:
        archive.download_file(url, archive_path)
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise FatalError(f"Failed to download {installation.name} from {url}: {e}") from e

    if not archive_path.exists():
        raise FatalError(f"Download of {installation.name} produced no file at {archive_path}")
    return archive_path


def extract_installation(config: Config, installation: Installation, archive_path: Path) -> None:
    """Extract a downloaded archive and remove it."""
    try:
        archive.extract_archive(archive_path, config.target_dir)
    except FatalError:
        raise
    except Exception as e:
        raise FatalError(f"Failed to extract {archive_path.name}: {e}") from e

    if not installation.path.is_dir():
        raise FatalError(f"Extracting {archive_path.name} did not create {installation.path}")

    archive_path.unlink(missing_ok=True)
    print(f"✓ Installed: {installation.path}")


def setup(config: Config) -> int:
    """Download and extract every missing installation. Returns the exit status."""
    print_section("SETTING UP NODE.JS INSTALLATIONS")
    print(f"Target Dir: {config.target_dir}")
    print(f"Platform:   {config.platform}")

    config.target_dir.mkdir(parents=True, exist_ok=True)

    checksums: dict[str, dict[str, str]] = {}
    for installation in iter_installations(config):
        print(f"\n--- {installation.name} ---")
        if installation.path.exists():
            print(f"Already exists: {installation.path}")
            print("Skipping download...")
            continue

        archive_path = download_installation(config, installation)

        if config.verify_checksums:
            try:
                if installation.version not in checksums:
                    checksums[installation.version] = fetch_checksums(config, installation.version)
                archive.verify_checksum(archive_path, checksums[installation.version])
            except FatalError:
                archive_path.unlink(missing_ok=True)
                raise

        extract_installation(config, installation, archive_path)

    print("\n✓ All installations ready")
    return 0
