"""Unit tests for NotificationService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskflow.models import Notification
from taskflow.repositories import NotificationRepository
from taskflow.services.notification_service import NotificationService


@pytest.fixture
def repository():
    repo = MagicMock(spec=NotificationRepository)
    repo.list_all = AsyncMock(
        return_value=[
            Notification(id=1, message="새 업무가 배정되었습니다."),
            Notification(id=2, message="업무 상태가 변경되었습니다."),
        ]
    )
    repo.mark_read = AsyncMock(return_value=True)
    repo.mark_all_read = AsyncMock(return_value=2)
    return repo


@pytest.mark.asyncio
async def test_list_passes_unread_flag(repository):
    service = NotificationService(repository)
    notifications = await service.list_notifications(unread_only=True)
    assert [n.id for n in notifications] == [1, 2]
    repository.list_all.assert_awaited_once_with(unread_only=True)


@pytest.mark.asyncio
async def test_unread_count(repository):
    assert await NotificationService(repository).unread_count() == 2


@pytest.mark.asyncio
async def test_mark_read(repository):
    service = NotificationService(repository)
    assert await service.mark_read(1) is True

    repository.mark_read.return_value = False
    assert await service.mark_read(1) is False
    assert await service.mark_all_read() == 2
