"""Attachment service - validates files before they reach the store."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from taskflow.models import Attachment
from taskflow.models.config_models import AttachmentConfig
from taskflow.models.exceptions import AttachmentValidationError
from taskflow.repositories import AttachmentRepository
from taskflow.utils.logger import get_logger

logger = get_logger("services.attachments")

MEGABYTE = 1024 * 1024


class AttachmentService:
    """Upload and list task attachments.

    Validation (existence, size, extension) always happens before the
    repository is touched, so a rejected file never costs a network call.
    """

    def __init__(self, repository: AttachmentRepository, limits: AttachmentConfig | None = None):
        self.repository = repository
        self.limits = limits or AttachmentConfig()

    def validate(self, file_path: str | Path) -> Path:
        """Check a file against the upload limits.

        Returns:
            The resolved path

        Raises:
            AttachmentValidationError: With a message fit for the user
        """
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise AttachmentValidationError(f"파일을 찾을 수 없습니다: {path}")

        size = path.stat().st_size
        if size > self.limits.max_size_bytes:
            limit_mb = self.limits.max_size_bytes / MEGABYTE
            raise AttachmentValidationError(f"파일 크기는 {limit_mb:g}MB 이하로 제한됩니다.")

        extension = path.suffix.lower()
        if extension not in self.limits.allowed_extensions:
            raise AttachmentValidationError(
                f"허용되지 않는 파일 형식입니다: {extension or path.name}"
            )
        return path

    async def upload(self, task_id: int, file_path: str | Path) -> Attachment:
        path = self.validate(file_path)
        mime_type, _ = mimetypes.guess_type(path.name)
        attachment = await self.repository.add(task_id, path, mime_type)
        logger.info("uploaded %s to task %s (%d bytes)", path.name, task_id, attachment.file_size)
        return attachment

    async def list_attachments(self, task_id: int) -> list[Attachment]:
        return await self.repository.list_for_task(task_id)
