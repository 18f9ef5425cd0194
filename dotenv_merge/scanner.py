"""Folder scanning and hashing for tree merges."""

import fnmatch
import os
import sys
from pathlib import Path

import xxhash
from tqdm import tqdm

from .models import FileInfo

DEFAULT_PATTERN = "*.env*"


class ScanError:
    """Record of a file that failed to scan."""

    def __init__(self, relative_path: str, error: str):
        self.relative_path = relative_path
        self.error = error


def compute_file_hash(file_path: Path, chunk_size: int = 65536) -> str:
    """Compute hash of a file using xxhash (fast hashing algorithm)."""
    hasher = xxhash.xxh64()
    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def compute_text_hash(text: str) -> str:
    """Hash text the same way compute_file_hash hashes its UTF-8 file."""
    return xxhash.xxh64(text.encode("utf-8")).hexdigest()


def get_file_info(base_path: Path, relative_path: str) -> FileInfo:
    """Get file information including hash and size."""
    abs_path = base_path / relative_path
    stat = os.stat(abs_path)

    return FileInfo(
        relative_path=relative_path,
        absolute_path=str(abs_path),
        hash=compute_file_hash(abs_path),
        size=stat.st_size
    )


def scan_folder(
    folder_path: Path,
    desc: str = "Scanning",
    pattern: str = DEFAULT_PATTERN,
    on_error: str = "skip"
) -> tuple[dict[str, FileInfo], list[ScanError]]:
    """
    Scan a folder for dotenv files.

    Args:
        folder_path: Path to the folder to scan
        desc: Description for the progress bar
        pattern: Glob matched against file names
        on_error: How to handle errors - "skip" to continue, "fail" to raise

    Returns:
        Tuple of (files dict keyed by relative POSIX path, list of scan errors)
    """
    files = {}
    errors = []
    all_files = []

    for root, dirnames, filenames in os.walk(folder_path):
        dirnames.sort()
        for filename in sorted(filenames):
            if not fnmatch.fnmatch(filename, pattern):
                continue
            rel_path = (Path(root) / filename).relative_to(folder_path)
            all_files.append(rel_path.as_posix())

    with tqdm(all_files, desc=desc, unit="file", disable=not all_files) as pbar:
        for rel_path in pbar:
            try:
                files[rel_path] = get_file_info(folder_path, rel_path)
            except OSError as e:
                errors.append(ScanError(rel_path, str(e)))

                if on_error == "fail":
                    print(f"\nError scanning file: {rel_path}", file=sys.stderr)
                    print(f"  {e}", file=sys.stderr)
                    raise

    return files, errors
