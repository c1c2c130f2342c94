"""
Scanner module - Read-only folder scanner.

Lists the files directly inside a folder without descending into
subdirectories and without modifying anything.
"""
import hashlib
import logging
import os
from pathlib import Path
from typing import Iterable, List, Union

from rule_organizer.models import FileInfo

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def compute_md5(file_path: Path, chunk_size: int = 1024 * 1024) -> str:
    """
    Compute MD5 checksum of a file without loading it fully into memory.
    """
    md5 = hashlib.md5()
    with file_path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            md5.update(chunk)
    return md5.hexdigest()


def file_extension(name: str) -> str:
    """
    Lowercased suffix from the last dot of the name, dot included.

    Dotfiles keep their whole name (".gitignore"); names without a dot have
    no extension.
    """
    index = name.rfind(".")
    return name[index:].lower() if index >= 0 else ""


def file_info_from_entry(entry: os.DirEntry, directory: Path) -> FileInfo:
    """Build a FileInfo snapshot from a directory entry."""
    stat = entry.stat()
    return FileInfo(
        name=entry.name,
        extension=file_extension(entry.name),
        size=stat.st_size,
        full_path=str(directory / entry.name),
    )


def scan_folder(directory: PathLike) -> List[FileInfo]:
    """
    Scan the immediate files of a directory (read-only, non-recursive).

    Args:
        directory: Directory to scan

    Returns:
        FileInfo list sorted by name. An unreadable or missing directory
        yields an empty list.
    """
    directory = Path(directory).absolute()
    files: List[FileInfo] = []

    try:
        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Failed to list directory %s: %s", directory, exc)
        return files

    for entry in entries:
        try:
            if entry.is_dir():
                continue
            files.append(file_info_from_entry(entry, directory))
        except OSError as exc:
            logger.warning("Failed to stat file %s: %s", entry.path, exc)
            continue
        logger.debug("Scanned file: %s", entry.path)

    logger.info("Scanned %s files from %s", len(files), directory)
    return files


def scan_folders(directories: Iterable[PathLike]) -> List[FileInfo]:
    """
    Scan several directories and concatenate their results in order.

    Args:
        directories: Directories to scan

    Returns:
        Combined FileInfo list
    """
    all_files: List[FileInfo] = []
    for directory in directories:
        all_files.extend(scan_folder(directory))
    return all_files
