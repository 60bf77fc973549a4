"""Configuration models for TaskFlow.

The JSON config file holds the relocatable data directory, backup policy and
system metadata, plus client-side settings for the API and the task cache.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_ALLOWED_EXTENSIONS = [
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".hwp",
    ".txt",
    ".csv",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".zip",
]


class APIConfig(BaseModel):
    """API configuration."""

    endpoint: str = Field(default="http://localhost:5000")
    timeout: int = Field(default=30)
    retry: int = Field(default=3)


class CacheConfig(BaseModel):
    """Task cache configuration."""

    stale_time: float = Field(default=300.0, ge=0, description="Seconds a snapshot stays fresh")
    fetch_timeout: float = Field(default=15.0, gt=0, description="Upper bound for one fetch")


class AttachmentConfig(BaseModel):
    """Attachment upload limits."""

    max_size_bytes: int = Field(default=2 * 1024 * 1024, gt=0)
    allowed_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_EXTENSIONS)
    )

    @field_validator("allowed_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case and dot-prefix every extension."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]


class AppConfig(BaseModel):
    """Main TaskFlow configuration."""

    data_dir: str = Field(..., description="Folder holding SQLite files and backups")
    auto_backup: bool = Field(default=True)
    backup_interval: int = Field(default=24, gt=0, description="Hours between backups")
    max_backup_files: int = Field(default=10, gt=0)
    system_name: str = Field(default="TaskFlowMaster")
    version: str = Field(default="1.0.0")

    storage: Literal["local", "remote"] = Field(default="local")
    current_user_id: int = Field(default=1)

    api: APIConfig = Field(default_factory=APIConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    attachments: AttachmentConfig = Field(default_factory=AttachmentConfig)

    @field_validator("data_dir")
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        """Reject empty data directories."""
        if not v or not v.strip():
            raise ValueError("data_dir cannot be empty")
        return v.strip()

    @property
    def data_path(self) -> Path:
        """Data directory as a Path."""
        return Path(self.data_dir)
