"""
Transaction log - Bounded, persisted history of organize runs.

The history file is the single source of truth. Every write is a full
read-modify-write of the JSON array, newest transaction first. Reads are
best-effort: a missing or malformed file is an empty history.
"""
import json
import logging
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from rule_organizer.models import MoveOperation, Transaction

logger = logging.getLogger(__name__)

MAX_HISTORY = 30

_history_adapter = TypeAdapter(List[Transaction])


def new_transaction_id(now: Optional[datetime] = None) -> str:
    """Build a unique id: completion time plus a random suffix."""
    now = now or datetime.now()
    return f"{now:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:8]}"


class TransactionLog:
    """Persistent newest-first list of transactions."""

    def __init__(self, history_path: Path, max_entries: int = MAX_HISTORY):
        """
        Initialize log.

        Args:
            history_path: Path to the history JSON file
            max_entries: Maximum number of transactions kept
        """
        self.history_path = Path(history_path)
        self.max_entries = max_entries

    def list(self) -> List[Transaction]:
        """
        Load the history.

        Returns:
            Transactions newest-first; empty if the file is missing or unreadable
        """
        try:
            data = self.history_path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning(f"Failed to read history {self.history_path}: {exc}")
            return []

        try:
            return _history_adapter.validate_json(data)
        except ValidationError as exc:
            logger.warning(f"Ignoring malformed history {self.history_path}: {exc}")
            return []

    def record(self, operations: Sequence[MoveOperation]) -> Optional[Transaction]:
        """
        Prepend a new transaction built from the given operations.

        Args:
            operations: Moves in the order they were performed

        Returns:
            The recorded Transaction, or None if there was nothing to record

        Raises:
            OSError: If the history file cannot be written
        """
        if not operations:
            return None

        transaction = Transaction(
            id=new_transaction_id(),
            timestamp=int(time.time()),
            operations=list(operations),
        )
        history = [transaction] + self.list()
        self.save(history)
        logger.info(f"Recorded transaction {transaction.id} with {len(operations)} operations")
        return transaction

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Look up a transaction by id."""
        for transaction in self.list():
            if transaction.id == transaction_id:
                return transaction
        return None

    def remove(self, transaction_id: str) -> bool:
        """
        Remove a transaction and persist the shortened history.

        Returns:
            True if the transaction was found and removed
        """
        history = self.list()
        remaining = [t for t in history if t.id != transaction_id]
        if len(remaining) == len(history):
            return False
        self.save(remaining)
        return True

    def save(self, history: List[Transaction]) -> None:
        """Write the history, truncated to the most recent entries."""
        history = history[: self.max_entries]
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        data = [t.model_dump(mode="json", by_alias=True) for t in history]
        with open(self.history_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
