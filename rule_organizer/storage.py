"""
Storage module - Application directory, config and rule schema persistence.

Config and schema are stored as JSON under a per-user application directory.
Missing or malformed files fall back to built-in defaults.
"""
import json
import logging
import platform
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from rule_organizer.models import AppConfig, Rule, Schema

logger = logging.getLogger(__name__)

APP_DIR_NAME = ".rule_organizer"
CONFIG_FILE = "config.json"
SCHEMA_FILE = "schema.json"
HISTORY_FILE = "history.json"


def default_app_dir() -> Path:
    return Path.home() / APP_DIR_NAME


def system_paths() -> Dict[str, str]:
    """Well-known user folders under the home directory."""
    home = Path.home()
    return {
        name: str(home / name)
        for name in ("Downloads", "Documents", "Pictures", "Videos")
    }


def os_info() -> str:
    return f"{platform.system().lower()} {platform.machine().lower()}"


def default_config() -> AppConfig:
    return AppConfig(
        view_mode="list",
        conflict_mode="rename",
        watch_paths=[system_paths()["Downloads"]],
    )


def default_schema() -> Schema:
    return Schema(rules=[
        Rule(id="1", name="Images", extensions=[".jpg", ".png", ".webp"], target_dir="Pictures"),
        Rule(id="2", name="Docs", extensions=[".pdf", ".docx", ".txt"], target_dir="Documents"),
    ])


def schema_to_bytes(schema: Schema) -> bytes:
    """Serialize a schema to indented JSON."""
    data = schema.model_dump(mode="json", by_alias=True)
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def schema_from_bytes(data: Union[bytes, str]) -> Schema:
    """
    Parse a schema from JSON.

    Raises:
        ValueError: If the data is not a valid schema
    """
    try:
        return Schema.model_validate_json(data)
    except ValidationError as e:
        raise ValueError(f"Invalid rule schema: {e.error_count()} error(s)") from e


class AppSettings(BaseModel):
    """Resolved application directory shared by every component."""
    app_dir: Path = Field(default_factory=default_app_dir, description="Per-user application directory")

    @property
    def config_path(self) -> Path:
        return self.app_dir / CONFIG_FILE

    @property
    def schema_path(self) -> Path:
        return self.app_dir / SCHEMA_FILE

    @property
    def history_path(self) -> Path:
        return self.app_dir / HISTORY_FILE

    def ensure_app_dir(self) -> Path:
        """Create the application directory if needed."""
        self.app_dir.mkdir(parents=True, exist_ok=True)
        return self.app_dir


class SettingsStore:
    """Load and save config.json and schema.json."""

    def __init__(self, settings: Optional[AppSettings] = None):
        """
        Initialize store.

        Args:
            settings: Application settings (default application directory if None)
        """
        self.settings = settings or AppSettings()

    def load_config(self) -> AppConfig:
        """Load config, falling back to defaults when absent or malformed."""
        try:
            return AppConfig.model_validate_json(self.settings.config_path.read_bytes())
        except FileNotFoundError:
            return default_config()
        except (OSError, ValidationError) as e:
            logger.warning(f"Using default config, failed to load {self.settings.config_path}: {e}")
            return default_config()

    def save_config(self, config: AppConfig) -> None:
        self._write_json(self.settings.config_path, config.model_dump(mode="json", by_alias=True))

    def load_schema(self) -> Schema:
        """Load the rule schema, falling back to the built-in rules."""
        try:
            return schema_from_bytes(self.settings.schema_path.read_bytes())
        except FileNotFoundError:
            return default_schema()
        except (OSError, ValueError) as e:
            logger.warning(f"Using default schema, failed to load {self.settings.schema_path}: {e}")
            return default_schema()

    def save_schema(self, schema: Schema) -> None:
        """
        Save the rule schema.

        Raises:
            OSError: If the file cannot be written
        """
        self.settings.ensure_app_dir()
        self.settings.schema_path.write_bytes(schema_to_bytes(schema))
        logger.info(f"Saved {len(schema.rules)} rules to {self.settings.schema_path}")

    def export_schema(self, path: Union[str, Path]) -> Path:
        """Write the active schema to an arbitrary path."""
        path = Path(path)
        path.write_bytes(schema_to_bytes(self.load_schema()))
        logger.info(f"Exported rules to {path}")
        return path

    def import_schema(self, path: Union[str, Path]) -> Schema:
        """
        Read a schema from an arbitrary path.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not a valid schema
        """
        path = Path(path)
        schema = schema_from_bytes(path.read_bytes())
        logger.info(f"Imported {len(schema.rules)} rules from {path}")
        return schema

    def _write_json(self, path: Path, data) -> None:
        self.settings.ensure_app_dir()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
