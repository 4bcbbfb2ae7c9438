"""
Download, verify and extract Node.js distribution archives.

Supported formats:
- .tar.gz / .tar.xz: official nodejs.org archives (tarfile)
- .tar.zst: repacked mirror archives (zstandard stream reader)
"""

import hashlib
import tarfile
import urllib.request
from pathlib import Path

import zstandard as zstd

from .errors import FatalError

CHECKSUMS_FILENAME = "SHASUMS256.txt"


def download_file(url: str, output_path: Path | str, show_progress: bool = True) -> None:
    """Download a file with progress indication."""
    print(f"Downloading from: {url}")
    print(f"Saving to: {output_path}")

    output_path = Path(output_path)
    breadcrumb_path = breadcrumb_for(output_path)

    # Marks the download as in progress until it completes
    breadcrumb_path.touch()

    def report_progress(block_num: int, block_size: int, total_size: int) -> None:
        if show_progress and total_size > 0:
            downloaded = block_num * block_size
            percent = min(100, (downloaded / total_size) * 100)
            mb_downloaded = downloaded / (1024 * 1024)
            mb_total = total_size / (1024 * 1024)
            print(
                f"\rProgress: {percent:5.1f}% ({mb_downloaded:6.1f} MB / {mb_total:6.1f} MB)",
                end="",
                flush=True,
            )

    try:
        urllib.request.urlretrieve(url, output_path, reporthook=report_progress)
        if show_progress:
            print()
        breadcrumb_path.unlink(missing_ok=True)
    except (KeyboardInterrupt, Exception):
        if output_path.exists():
            output_path.unlink()
        breadcrumb_path.unlink(missing_ok=True)
        raise


def breadcrumb_for(path: Path) -> Path:
    return Path(str(path) + ".downloading")


def discard_incomplete_download(path: Path) -> bool:
    """
    Remove leftovers of an interrupted download.

    Returns:
        True if a breadcrumb was found and cleaned up
    """
    breadcrumb_path = breadcrumb_for(path)
    if not breadcrumb_path.exists():
        return False

    print(f"⚠️  Found incomplete download marker: {breadcrumb_path.name}")
    if path.exists():
        print(f"Removing partial download: {path}")
        path.unlink()
    breadcrumb_path.unlink()
    return True


def get_file_hash(filepath: Path, algorithm: str = "sha256") -> str:
    """Calculate hash of a file."""
    h = hashlib.new(algorithm)
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def parse_checksums(text: str) -> dict[str, str]:
    """Parse SHASUMS256.txt content into a filename -> sha256 mapping."""
    checksums = {}
    for line in text.splitlines():
        parts = line.strip().split()
        if len(parts) >= 2:
            checksums[parts[1]] = parts[0]
    return checksums


def verify_checksum(archive_path: Path, checksums: dict[str, str]) -> bool:
    """
    Verify an archive against a checksum mapping.

    Args:
        archive_path: Downloaded archive
        checksums: Mapping from parse_checksums()

    Returns:
        True if verified, False if the archive is not listed

    Raises:
        FatalError: On checksum mismatch
    """
    archive_name = archive_path.name
    if archive_name not in checksums:
        print(f"⚠️  Warning: Checksum not found for {archive_name}, skipping verification")
        return False

    expected_checksum = checksums[archive_name]
    actual_checksum = get_file_hash(archive_path, "sha256")

    if actual_checksum.lower() != expected_checksum.lower():
        print("✗ Checksum verification FAILED")
        raise FatalError(
            f"Checksum mismatch for {archive_name}!\n"
            f"Expected: {expected_checksum}\n"
            f"Actual:   {actual_checksum}"
        )

    print(f"✓ Checksum verified: {actual_checksum[:16]}...")
    return True


def _is_within(root: Path, path: Path) -> bool:
    target = path.resolve()
    return target == root or root in target.parents


def _check_member(member: tarfile.TarInfo, extract_dir: Path) -> None:
    """Reject a member that would be written, or would link, outside ``extract_dir``."""
    root = extract_dir.resolve()
    if not _is_within(root, root / member.name):
        raise FatalError(f"Refusing to extract {member.name!r} outside {extract_dir}")

    if member.issym():
        # Symlink targets are relative to the link's own directory
        link_target = root / Path(member.name).parent / member.linkname
    elif member.islnk():
        link_target = root / member.linkname
    else:
        return
    if not _is_within(root, link_target):
        raise FatalError(f"Refusing to extract link {member.name!r} -> {member.linkname!r} outside {extract_dir}")


def _check_members(tar: tarfile.TarFile, extract_dir: Path) -> None:
    for member in tar.getmembers():
        _check_member(member, extract_dir)


def extract_archive(archive_path: Path, extract_dir: Path) -> None:
    """Extract a Node.js .tar.gz, .tar.xz or .tar.zst archive into ``extract_dir``."""
    print(f"Extracting: {archive_path.name}")
    print(f"To: {extract_dir}")

    extract_dir.mkdir(parents=True, exist_ok=True)

    name = archive_path.name
    if name.endswith(".tar.zst"):
        with open(archive_path, "rb") as compressed:
            dctx = zstd.ZstdDecompressor()
            with dctx.stream_reader(compressed) as reader, tarfile.open(fileobj=reader, mode="r|") as tar:
                # Streamed archives can't be listed up front
                for member in tar:
                    _check_member(member, extract_dir)
                    tar.extract(member, path=extract_dir, filter="data")
    elif name.endswith(".tar.xz"):
        with tarfile.open(archive_path, "r:xz") as tar:
            _check_members(tar, extract_dir)
            tar.extractall(path=extract_dir, filter="data")
    elif name.endswith(".tar.gz"):
        with tarfile.open(archive_path, "r:gz") as tar:
            _check_members(tar, extract_dir)
            tar.extractall(path=extract_dir, filter="data")
    else:
        raise ValueError(f"Unknown archive format: {name}")
