"""
Undo engine - Reverse a recorded transaction.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from rule_organizer.history import TransactionLog
from rule_organizer.models import MoveResult, MoveStatus, UndoResult

logger = logging.getLogger(__name__)


class UndoEngine:
    """Replays a transaction's moves backwards and drops it from the log."""

    def __init__(self, log: TransactionLog):
        self.log = log

    def undo(self, transaction_id: str) -> Optional[UndoResult]:
        """
        Undo a transaction by id.

        Operations are restored last-moved first. Restoring is a plain rename
        from the new path back to the old one, without a copy fallback and
        without checking either path beforehand; a failing rename is reported
        in the result and the replay continues.

        Args:
            transaction_id: Id of the transaction to undo

        Returns:
            UndoResult, or None if no transaction has that id
        """
        transaction = self.log.find(transaction_id)
        if transaction is None:
            logger.info(f"No transaction with id {transaction_id}, nothing to undo")
            return None

        result = UndoResult(transaction_id=transaction.id)
        for operation in reversed(transaction.operations):
            old_path = Path(operation.old_path)
            try:
                old_path.parent.mkdir(parents=True, exist_ok=True)
                os.rename(operation.new_path, old_path)
            except OSError as exc:
                logger.warning(f"Failed to restore {operation.new_path} -> {old_path}: {exc}")
                result.failed.append(MoveResult(
                    source_path=operation.new_path,
                    target_path=operation.old_path,
                    status=MoveStatus.FAILED,
                    reason=str(exc),
                ))
                continue
            logger.info(f"RESTORED: {operation.new_path} -> {old_path}")
            result.restored.append(operation)

        self.log.remove(transaction.id)
        logger.info(
            f"Undid transaction {transaction.id}: "
            f"{len(result.restored)} restored, {len(result.failed)} failed"
        )
        return result
