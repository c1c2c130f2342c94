"""
Organizer - Entry point that chains the organizing stages together.

Scanner -> RuleMatcher -> conflict resolution -> MoveExecutor -> TransactionLog

Each call runs synchronously to completion. There is no locking around the
history file: two concurrent runs can lose each other's history updates.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from rule_organizer.conflict import resolve_conflict
from rule_organizer.executor import MoveExecutor
from rule_organizer.history import TransactionLog
from rule_organizer.matcher import RuleMatcher
from rule_organizer.models import (
    AppConfig,
    FileInfo,
    MoveOperation,
    MoveResult,
    MoveStatus,
    OrganizeResult,
    Schema,
    Transaction,
    UndoResult,
)
from rule_organizer.scanner import scan_folder, scan_folders
from rule_organizer.storage import AppSettings, SettingsStore
from rule_organizer.undo import UndoEngine

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Organizer:
    """Facade over scanning, organizing, history and undo."""

    def __init__(self, settings: Optional[AppSettings] = None, executor: Optional[MoveExecutor] = None):
        """
        Initialize organizer.

        Args:
            settings: Application settings holding the resolved app directory
            executor: Move executor (default verifies fallback copies by checksum)
        """
        self.settings = settings or AppSettings()
        self.settings.ensure_app_dir()
        self.store = SettingsStore(self.settings)
        self.history = TransactionLog(self.settings.history_path)
        self.undo_engine = UndoEngine(self.history)
        self.executor = executor or MoveExecutor()

    def scan_folder(self, path: PathLike) -> List[FileInfo]:
        return scan_folder(path)

    def scan_multiple_folders(self, paths: Iterable[PathLike]) -> List[FileInfo]:
        return scan_folders(paths)

    def organize_files(
        self,
        paths: Iterable[PathLike],
        schema: Schema,
        conflict_policy: str,
        dry_run: bool = False,
    ) -> OrganizeResult:
        """
        Organize the files directly inside each path.

        Args:
            paths: Directories to organize
            schema: Rules to classify files with
            conflict_policy: 'skip', 'rename' or overwrite (any other value)
            dry_run: If True, only report where files would go

        Returns:
            OrganizeResult with one MoveResult per file and the recorded transaction
        """
        result = OrganizeResult()
        matcher = RuleMatcher(schema.rules)

        if dry_run:
            logger.info("DRY-RUN MODE - No files will be modified")

        for path in paths:
            for file_info in scan_folder(path):
                move_result = self._organize_file(file_info, matcher, conflict_policy, dry_run)
                result.results.append(move_result)
                if move_result.status == MoveStatus.MOVED:
                    result.operations.append(MoveOperation(
                        file_name=file_info.name,
                        old_path=move_result.source_path,
                        new_path=move_result.target_path,
                    ))

        if result.operations:
            try:
                result.transaction = self.history.record(result.operations)
            except OSError as e:
                logger.error(f"Failed to record history: {e}")
                result.errors.append(f"Failed to record history: {e}")

        logger.info(
            f"Organize complete: {result.moved_count} moved, "
            f"{result.skipped_count} skipped, {result.failed_count} failed"
        )
        return result

    def _organize_file(
        self,
        file_info: FileInfo,
        matcher: RuleMatcher,
        conflict_policy: str,
        dry_run: bool,
    ) -> MoveResult:
        source = Path(file_info.full_path)
        destination = matcher.destination_dir(file_info) / file_info.name

        if destination == source:
            logger.info(f"ALREADY IN PLACE: {source}")
            return MoveResult(
                source_path=str(source),
                target_path=str(destination),
                status=MoveStatus.SKIPPED,
                reason="Already in place",
            )

        try:
            final = resolve_conflict(destination, conflict_policy)
        except FileExistsError as e:
            logger.error(f"Cannot move {source}: {e}")
            return MoveResult(
                source_path=str(source),
                target_path=str(destination),
                status=MoveStatus.FAILED,
                reason=str(e),
            )
        if final is None:
            return MoveResult(
                source_path=str(source),
                target_path=str(destination),
                status=MoveStatus.SKIPPED,
                reason="Destination exists",
            )

        if dry_run:
            logger.info(f"DRY-RUN MOVE: {source} -> {final}")
            return MoveResult(source_path=str(source), target_path=str(final), status=MoveStatus.PLANNED)

        return self.executor.move(source, final)

    def get_history(self) -> List[Transaction]:
        return self.history.list()

    def undo_by_id(self, transaction_id: str) -> Optional[UndoResult]:
        return self.undo_engine.undo(transaction_id)

    def load_config(self) -> AppConfig:
        return self.store.load_config()

    def save_config(self, config: AppConfig) -> None:
        self.store.save_config(config)

    def load_schema(self) -> Schema:
        return self.store.load_schema()

    def save_schema(self, schema: Schema) -> None:
        self.store.save_schema(schema)

    def export_schema(self, path: PathLike) -> Path:
        return self.store.export_schema(path)

    def import_schema(self, path: PathLike) -> Schema:
        return self.store.import_schema(path)


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging for the organizer.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
