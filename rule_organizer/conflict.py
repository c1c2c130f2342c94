"""
Conflict resolution for occupied destination paths.

The existence check happens once, right before the move. Another process can
still create the destination between the check and the move; that window is
accepted.
"""
import logging
import time
from pathlib import Path
from typing import Optional

from rule_organizer.models import ConflictPolicy

logger = logging.getLogger(__name__)


def renamed_path(destination: Path, now: Optional[int] = None) -> Path:
    """Prefix the file name with the Unix timestamp: '<seconds>_<name>'."""
    seconds = int(time.time()) if now is None else now
    return destination.with_name(f"{seconds}_{destination.name}")


def resolve_conflict(destination: Path, policy: str, now: Optional[int] = None) -> Optional[Path]:
    """
    Decide the final destination when the target path may already exist.

    Args:
        destination: Intended destination path
        policy: 'skip', 'rename' or anything else (overwrite)
        now: Timestamp override for the rename prefix

    Returns:
        Final destination path, or None if the file should be skipped

    Raises:
        FileExistsError: If the renamed path is taken as well
    """
    if not destination.exists():
        return destination

    if policy == ConflictPolicy.SKIP.value:
        logger.info(f"SKIP: destination exists: {destination}")
        return None

    if policy == ConflictPolicy.RENAME.value:
        final = renamed_path(destination, now)
        if final.exists():
            raise FileExistsError(f"Renamed destination already exists: {final}")
        logger.info(f"RENAME: {destination} exists, using {final.name}")
        return final

    logger.info(f"OVERWRITE: replacing {destination}")
    return destination
