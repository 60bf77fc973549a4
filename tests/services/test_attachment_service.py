"""Unit tests for AttachmentService validation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskflow.models import Attachment
from taskflow.models.config_models import AttachmentConfig
from taskflow.models.exceptions import AttachmentValidationError
from taskflow.repositories import AttachmentRepository
from taskflow.services.attachment_service import AttachmentService


@pytest.fixture
def repository():
    repo = MagicMock(spec=AttachmentRepository)
    repo.add = AsyncMock(
        return_value=Attachment(
            id=1,
            task_id=7,
            file_name="plan.pdf",
            file_url="attachments/7/plan.pdf",
            file_size=5,
            mime_type="application/pdf",
        )
    )
    repo.list_for_task = AsyncMock(return_value=[])
    return repo


@pytest.mark.asyncio
async def test_oversized_file_is_rejected_before_upload(tmp_path, repository):
    big = tmp_path / "scan.pdf"
    big.write_bytes(b"\0" * (3 * 1024 * 1024))

    service = AttachmentService(repository)
    with pytest.raises(AttachmentValidationError, match="파일 크기는 2MB 이하로 제한됩니다."):
        await service.upload(7, big)
    repository.add.assert_not_called()


@pytest.mark.asyncio
async def test_disallowed_extension(tmp_path, repository):
    script = tmp_path / "run.exe"
    script.write_bytes(b"MZ")

    with pytest.raises(AttachmentValidationError, match="허용되지 않는 파일 형식입니다: .exe"):
        await AttachmentService(repository).upload(7, script)
    repository.add.assert_not_called()


@pytest.mark.asyncio
async def test_missing_file(tmp_path, repository):
    with pytest.raises(AttachmentValidationError, match="파일을 찾을 수 없습니다"):
        await AttachmentService(repository).upload(7, tmp_path / "nope.pdf")


@pytest.mark.asyncio
async def test_valid_file_is_uploaded_with_mime_type(tmp_path, repository):
    doc = tmp_path / "plan.pdf"
    doc.write_bytes(b"%PDF-")

    attachment = await AttachmentService(repository).upload(7, doc)

    assert attachment.file_name == "plan.pdf"
    repository.add.assert_awaited_once_with(7, doc, "application/pdf")


def test_custom_limits(tmp_path, repository):
    notes = tmp_path / "notes.MD"
    notes.write_text("# hi")
    limits = AttachmentConfig(max_size_bytes=512 * 1024, allowed_extensions=["MD"])
    service = AttachmentService(repository, limits)

    assert service.validate(notes) == notes

    notes.write_bytes(b"x" * (600 * 1024))
    with pytest.raises(AttachmentValidationError, match="0.5MB"):
        service.validate(notes)
