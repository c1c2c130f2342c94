"""
Executor module - Move files with a verified copy+delete fallback.

The primary path is an atomic rename within the same volume. When the rename
fails (for example across volumes) the file is stream-copied into a temporary
file next to the destination, the copy is verified, and only then does it
replace the destination and is the source removed.
"""
import logging
import os
import shutil
import tempfile
from pathlib import Path

from rule_organizer.models import MoveResult, MoveStatus
from rule_organizer.scanner import compute_md5

logger = logging.getLogger(__name__)


class MoveExecutor:
    """Performs single-file moves and reports an explicit per-file result."""

    def __init__(self, verify_checksum: bool = True):
        """
        Initialize executor.

        Args:
            verify_checksum: If True, compare MD5 checksums after a fallback copy
                in addition to the size check
        """
        self.verify_checksum = verify_checksum

    def move(self, source: Path, destination: Path) -> MoveResult:
        """
        Move a single file.

        Args:
            source: File to move
            destination: Final path (an existing file there is replaced)

        Returns:
            MoveResult with status MOVED or FAILED
        """
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {destination.parent}: {e}")
            return self._result(source, destination, MoveStatus.FAILED, f"Cannot create directory: {e}")

        try:
            os.replace(source, destination)
            logger.info(f"MOVED: {source} -> {destination}")
            return self._result(source, destination, MoveStatus.MOVED)
        except OSError as e:
            logger.debug(f"Rename failed for {source} ({e}), falling back to copy")

        return self._copy_and_delete(source, destination)

    def _copy_and_delete(self, source: Path, destination: Path) -> MoveResult:
        """Copy to a temporary file, verify, swap it in, then remove the source.

        A file already at the destination is only touched once the copy is
        known to be good.
        """
        try:
            fd, temp_name = tempfile.mkstemp(dir=destination.parent, prefix=f".{destination.name}.", suffix=".part")
            os.close(fd)
        except OSError as e:
            logger.error(f"Cannot create temporary file in {destination.parent}: {e}")
            return self._result(source, destination, MoveStatus.FAILED, f"Copy failed: {e}")
        temp = Path(temp_name)

        try:
            shutil.copyfile(source, temp)
        except OSError as e:
            logger.error(f"Copy failed: {source} -> {destination}: {e}")
            self._discard(temp)
            return self._result(source, destination, MoveStatus.FAILED, f"Copy failed: {e}")

        problem = self._verify_copy(source, temp)
        if problem:
            logger.error(f"Copy verification failed for {source}: {problem}")
            self._discard(temp)
            return self._result(source, destination, MoveStatus.FAILED, problem)

        try:
            os.replace(temp, destination)
        except OSError as e:
            logger.error(f"Failed to put copy in place at {destination}: {e}")
            self._discard(temp)
            return self._result(source, destination, MoveStatus.FAILED, f"Copy failed: {e}")

        try:
            source.unlink()
        except OSError as e:
            logger.warning(f"Copied {source} -> {destination} but could not remove the source: {e}")
            return self._result(source, destination, MoveStatus.MOVED, f"Source not removed: {e}")

        logger.info(f"MOVED (copy): {source} -> {destination}")
        return self._result(source, destination, MoveStatus.MOVED)

    def _verify_copy(self, source: Path, copy: Path) -> str:
        """Return an empty string if the copy matches the source, else a reason."""
        try:
            source_size = source.stat().st_size
            copy_size = copy.stat().st_size
            if source_size != copy_size:
                return f"Size mismatch: {source_size} != {copy_size}"
            if self.verify_checksum and compute_md5(source) != compute_md5(copy):
                return "Checksum mismatch"
        except OSError as e:
            return f"Cannot verify copy: {e}"
        return ""

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove partial copy {path}: {e}")

    @staticmethod
    def _result(source: Path, destination: Path, status: MoveStatus, reason: str = "") -> MoveResult:
        return MoveResult(
            source_path=str(source),
            target_path=str(destination),
            status=status,
            reason=reason,
        )
