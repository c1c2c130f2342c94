"""
Core data models for the rule-driven file organizer.

All models use Pydantic for validation and JSON serialization. Field aliases
carry the camelCase names used by the persisted JSON files.
"""
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

UNCATEGORIZED_DIR = "!Uncategorized"


class ConflictPolicy(str, Enum):
    """Known conflict policies. Unknown values behave like OVERWRITE."""
    SKIP = "skip"
    RENAME = "rename"
    OVERWRITE = "overwrite"


class MoveStatus(str, Enum):
    """Outcome of handling a single file."""
    MOVED = "moved"
    SKIPPED = "skipped"
    FAILED = "failed"
    PLANNED = "planned"


class Rule(BaseModel):
    """Classification rule mapping a glob pattern or extension set to a directory."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", description="Rule identity")
    name: str = Field("", description="Display name")
    extensions: List[str] = Field(default_factory=list, description="Lowercase, dot-prefixed extensions")
    pattern: str = Field("", description="Glob matched against the file name, empty = unset")
    target_dir: str = Field("", alias="targetDir", description="Relative or absolute target directory, empty = rule disabled")

    @field_validator("extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v):
        """Lowercase, dot-prefix and de-duplicate extensions."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set)):
            return v
        normalized = []
        for ext in v:
            ext = str(ext).strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in normalized:
                normalized.append(ext)
        return normalized

    @field_validator("pattern", mode="before")
    @classmethod
    def normalize_pattern(cls, v):
        return "" if v is None else str(v).strip()


class Schema(BaseModel):
    """Ordered rule set as authored."""
    rules: List[Rule] = Field(default_factory=list, description="Rules in authored order")


class AppConfig(BaseModel):
    """User preferences persisted in config.json."""
    model_config = ConfigDict(populate_by_name=True)

    view_mode: str = Field("list", alias="viewMode")
    watch_paths: List[str] = Field(default_factory=list, alias="watchPaths")
    conflict_mode: str = Field(ConflictPolicy.RENAME.value, alias="conflictMode")


class FileInfo(BaseModel):
    """Snapshot of a directory entry taken at scan time (read-only)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., description="File name")
    extension: str = Field(..., description="Lowercased extension including the dot, or empty")
    size: int = Field(..., description="File size in bytes")
    full_path: str = Field(..., alias="fullPath", description="Absolute file path")

    @property
    def parent(self) -> Path:
        return Path(self.full_path).parent


class MoveOperation(BaseModel):
    """Record of one completed relocation."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_name: str = Field(..., alias="fileName")
    old_path: str = Field(..., alias="oldPath")
    new_path: str = Field(..., alias="newPath")


class Transaction(BaseModel):
    """One organize run's batch of moves, undoable as a unit."""
    id: str = Field(..., description="Unique transaction id")
    timestamp: int = Field(..., description="Completion time, seconds since epoch")
    operations: List[MoveOperation] = Field(default_factory=list, description="Moves in the order performed")


class MoveResult(BaseModel):
    """Per-file result of an organize or undo step."""
    source_path: str
    target_path: Optional[str] = None
    status: MoveStatus
    reason: str = ""


class OrganizeResult(BaseModel):
    """Result of an organize run."""
    results: List[MoveResult] = Field(default_factory=list, description="One entry per file seen")
    operations: List[MoveOperation] = Field(default_factory=list, description="Recorded moves")
    transaction: Optional[Transaction] = Field(None, description="Persisted transaction, if any")
    errors: List[str] = Field(default_factory=list, description="Error messages")

    def _count(self, status: MoveStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @computed_field
    @property
    def moved_count(self) -> int:
        return len(self.operations)

    @computed_field
    @property
    def skipped_count(self) -> int:
        return self._count(MoveStatus.SKIPPED)

    @computed_field
    @property
    def failed_count(self) -> int:
        return self._count(MoveStatus.FAILED)


class UndoResult(BaseModel):
    """Result of undoing a transaction."""
    transaction_id: str
    restored: List[MoveOperation] = Field(default_factory=list)
    failed: List[MoveResult] = Field(default_factory=list)
