"""Configuration service for TaskFlow.

ConfigService is the single source of truth for configuration. It handles:

- Loading and saving ``taskflow-config.json`` (loaded once, rewritten on change)
- The relocatable data directory: path validation, moving the SQLite files,
  attachments and backups to a new folder
- Well-known paths inside the data directory
- API credentials for remote storage
"""

from __future__ import annotations

import json
import re
import shutil
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError as PydanticValidationError

from taskflow.models.config_models import AppConfig
from taskflow.models.exceptions import ConfigError
from taskflow.utils.logger import get_logger

CONFIG_FILE_NAME = "taskflow-config.json"
MAIN_DB_NAME = "taskflow.db"
BACKUP_DIR_NAME = "backups"
ATTACHMENTS_DIR_NAME = "attachments"
CREDENTIALS_FILE_NAME = "credentials.json"

# SQLite keeps WAL side files next to the database; they move together.
DATA_FILES = (MAIN_DB_NAME, f"{MAIN_DB_NAME}-wal", f"{MAIN_DB_NAME}-shm")
DATA_DIRS = (ATTACHMENTS_DIR_NAME, BACKUP_DIR_NAME)

MAX_PATH_LENGTH = 260
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")
_INVALID_PATH_CHARS = re.compile(r'[<>:"|?*]')

logger = get_logger("config")


def validate_folder_path(folder_path: str) -> str | None:
    """Check a candidate data directory.

    Returns:
        None when the path is acceptable, otherwise a user-facing error message.
    """
    if not folder_path or not folder_path.strip():
        return "경로가 비어 있습니다."

    # Drive letters are the only place a colon may appear.
    body = _DRIVE_PREFIX.sub("", folder_path.strip(), count=1)
    if _INVALID_PATH_CHARS.search(body):
        return "경로에 사용할 수 없는 문자가 포함되어 있습니다."

    resolved = str(Path(folder_path).expanduser().resolve())
    if len(resolved) > MAX_PATH_LENGTH:
        return f"경로가 너무 깁니다. (최대 {MAX_PATH_LENGTH}자)"

    existing = Path(resolved)
    if existing.exists() and not existing.is_dir():
        return "폴더가 아닌 파일 경로입니다."
    return None


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self, config_dir: str | Path | None = None):
        """Initialize the config service.

        Args:
            config_dir: Directory holding the config file. Defaults to the
                platform config dir.
        """
        self.config_dir = Path(config_dir) if config_dir else Path(user_config_dir("taskflow"))
        self.config_path = self.config_dir / CONFIG_FILE_NAME
        self.credentials_path = self.config_dir / CREDENTIALS_FILE_NAME
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def default_config(self) -> AppConfig:
        """Configuration used on first run or when the file is unreadable."""
        return AppConfig(data_dir=str(Path(user_data_dir("taskflow"))))

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating a default file on first run.

        A malformed file is not fatal: defaults are used and a warning logged.
        """
        if self._config is not None:
            return self._config

        try:
            raw = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._config = self.default_config()
            self.save_config()
            return self._config

        try:
            self._config = AppConfig.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning("config file %s unreadable, using defaults: %s", self.config_path, e)
            self._config = self.default_config()

        return self._config

    def save_config(self) -> None:
        """Write the current configuration to the config file."""
        self._write_config(self.config_path)

    def _write_config(self, path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.config.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"설정 파일 저장 실패: {e}") from e
        logger.info("config saved: %s", path)

    def update_config(self, **updates: Any) -> AppConfig:
        """Merge top-level updates into the configuration and save it.

        Raises:
            ConfigError: If the merged configuration is invalid.
        """
        merged = {**self.config.model_dump(), **updates}
        try:
            self._config = AppConfig.model_validate(merged)
        except PydanticValidationError as e:
            raise ConfigError(f"잘못된 설정 값: {e}") from e
        self.save_config()
        return self._config

    def set_value(self, key: str, value: Any) -> AppConfig:
        """Set a dotted configuration key (e.g. ``cache.stale_time``)."""
        if key == "data_dir":
            raise ConfigError("data_dir는 set-data-dir 명령으로 변경하세요.")

        data = self.config.model_dump()
        *parents, leaf = key.split(".")
        node = data
        for part in parents:
            if not isinstance(node.get(part), dict):
                raise ConfigError(f"알 수 없는 설정 키: {key}")
            node = node[part]
        if leaf not in node:
            raise ConfigError(f"알 수 없는 설정 키: {key}")
        node[leaf] = value

        try:
            self._config = AppConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigError(f"잘못된 설정 값 ({key}): {e}") from e
        self.save_config()
        return self._config

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = self.default_config()
        self.save_config()
        return self._config

    # ------------------------------------------------------------------
    # Data directory
    # ------------------------------------------------------------------

    @property
    def data_dir(self) -> Path:
        """Current data directory."""
        return self.config.data_path

    def get_main_db_path(self) -> Path:
        """Path of the main SQLite database."""
        return self.data_dir / MAIN_DB_NAME

    def get_backup_dir(self) -> Path:
        """Folder for database backups."""
        return self.data_dir / BACKUP_DIR_NAME

    def get_attachments_dir(self) -> Path:
        """Folder for locally stored attachments."""
        return self.data_dir / ATTACHMENTS_DIR_NAME

    def initialize_data_directory(self) -> None:
        """Create the data directory and its backup folder."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.get_backup_dir().mkdir(parents=True, exist_ok=True)
        logger.info("data directory ready: %s", self.data_dir)

    def set_data_dir(self, new_dir: str | Path, *, move_files: bool = True) -> Path:
        """Relocate the data directory.

        Validates the target, creates it, moves the database files and the
        attachment/backup folders, then saves the config both in the config
        directory and inside the new data directory.

        Args:
            new_dir: Target folder
            move_files: Move existing data along (default True)

        Returns:
            The resolved new data directory

        Raises:
            ConfigError: If the path is invalid or the target already holds
                TaskFlow data.
        """
        error = validate_folder_path(str(new_dir))
        if error:
            raise ConfigError(f"유효하지 않은 경로: {error}")

        old_dir = self.data_dir.expanduser().resolve()
        target = Path(new_dir).expanduser().resolve()
        if target == old_dir:
            return target

        items = [name for name in (*DATA_FILES, *DATA_DIRS) if (old_dir / name).exists()]
        if move_files:
            clashes = [name for name in items if (target / name).exists()]
            if clashes:
                raise ConfigError(
                    f"대상 폴더에 이미 데이터가 있습니다: {', '.join(clashes)}"
                )

        target.mkdir(parents=True, exist_ok=True)

        if move_files and items:
            # The open connection would keep writing to the old file.
            from taskflow.adapters.sqlite.connection import DatabaseConnection

            DatabaseConnection.close_connection()
            for name in items:
                shutil.move(str(old_dir / name), str(target / name))
                logger.info("moved %s -> %s", old_dir / name, target / name)

        self._config = self.config.model_copy(update={"data_dir": str(target)})
        self.save_config()
        self._write_config(target / CONFIG_FILE_NAME)
        self.initialize_data_directory()

        logger.info("data directory changed: %s -> %s", old_dir, target)
        return target

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def load_credentials(self) -> dict | None:
        """Load API credentials.

        Returns:
            dict with 'token', or None if not found
        """
        if not self.credentials_path.exists():
            return None
        try:
            return json.loads(self.credentials_path.read_text(encoding="utf-8"))
        except JSONDecodeError:
            logger.warning("credentials file is not valid JSON: %s", self.credentials_path)
            return None

    def save_credentials(self, token: str, user: dict | None = None) -> None:
        """Persist an API token and the signed-in user (owner read/write only)."""
        data: dict = {"token": token}
        if user:
            data["user"] = user
        self.credentials_path.write_text(
            json.dumps(data, ensure_ascii=False), encoding="utf-8"
        )
        self.credentials_path.chmod(0o600)

    def clear_credentials(self) -> bool:
        """Forget the stored token. Returns False when none was stored."""
        if not self.credentials_path.exists():
            return False
        self.credentials_path.unlink()
        logger.info("credentials removed: %s", self.credentials_path)
        return True


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
