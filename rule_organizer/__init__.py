"""Package initialization."""
__version__ = "0.1.0"

from rule_organizer.models import (
    AppConfig,
    ConflictPolicy,
    FileInfo,
    MoveOperation,
    MoveResult,
    MoveStatus,
    OrganizeResult,
    Rule,
    Schema,
    Transaction,
    UndoResult,
)

__all__ = [
    "AppConfig",
    "ConflictPolicy",
    "FileInfo",
    "MoveOperation",
    "MoveResult",
    "MoveStatus",
    "OrganizeResult",
    "Rule",
    "Schema",
    "Transaction",
    "UndoResult",
]
