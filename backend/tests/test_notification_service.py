"""
Testes do NotificationService (sessão e Redis mockados).
"""

import json
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from app.db import redis as redis_db
from app.models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from app.models.notification import Notification
from app.services import notification as notification_module
from app.services.notification import NotificationService, format_money


def build_notification(**values) -> Notification:
    return Notification(id=uuid.uuid4(), **values)


@pytest.fixture
def redis_client():
    client = AsyncMock()
    with patch.object(redis_db, "redis_client", client):
        yield client


@pytest.fixture
def service(mock_db):
    service = NotificationService(mock_db)
    service.repo.add = AsyncMock(side_effect=build_notification)
    return service


class TestResolveChannels:
    """Canais sem contato são descartados."""

    def test_keeps_available_channels(self, sample_user):
        channels = NotificationService.resolve_channels(
            sample_user, [NotificationChannel.SMS, NotificationChannel.EMAIL]
        )

        assert channels == [NotificationChannel.SMS, NotificationChannel.EMAIL]

    def test_drops_sms_without_phone(self, sample_user):
        sample_user.phone = None

        channels = NotificationService.resolve_channels(
            sample_user, [NotificationChannel.SMS, NotificationChannel.EMAIL]
        )

        assert channels == [NotificationChannel.EMAIL]

    def test_falls_back_to_in_app(self, sample_user):
        sample_user.phone = None

        channels = NotificationService.resolve_channels(sample_user, [NotificationChannel.SMS])

        assert channels == [NotificationChannel.IN_APP]


class TestSendNotification:
    """Gravação e enfileiramento."""

    @pytest.mark.anyio
    async def test_persists_and_enqueues(self, service, mock_db, redis_client, sample_user):
        notification = await service.send_notification(
            user=sample_user,
            type=NotificationType.FINE_NOTICE,
            title="Aviso",
            message="Mensagem",
            priority=NotificationPriority.HIGH,
        )

        assert notification.status == NotificationStatus.SENT
        assert notification.channels == ["sms", "email"]
        redis_client.rpush.assert_awaited_once()
        key, raw = redis_client.rpush.await_args.args
        assert key == "queue:notifications"
        payload = json.loads(raw)
        assert payload["notification_id"] == str(notification.id)
        assert payload["type"] == "fine_notice"
        assert payload["priority"] == "high"
        assert mock_db.commit.await_count == 2

    @pytest.mark.anyio
    async def test_disabled(self, service, redis_client, sample_user):
        with patch.object(notification_module.settings, "NOTIFICATIONS_ENABLED", False):
            notification = await service.send_notification(
                user=sample_user,
                type=NotificationType.FINE_NOTICE,
                title="Aviso",
                message="Mensagem",
            )

        assert notification is None
        service.repo.add.assert_not_awaited()
        redis_client.rpush.assert_not_awaited()

    @pytest.mark.anyio
    async def test_without_redis_stays_pending(self, service, sample_user):
        with patch.object(redis_db, "redis_client", None):
            notification = await service.send_notification(
                user=sample_user,
                type=NotificationType.FINE_NOTICE,
                title="Aviso",
                message="Mensagem",
            )

        assert notification.status == NotificationStatus.PENDING

    @pytest.mark.anyio
    async def test_queue_error_recorded(self, service, redis_client, sample_user):
        redis_client.rpush.side_effect = ConnectionError("Connection refused")

        notification = await service.send_notification(
            user=sample_user,
            type=NotificationType.FINE_NOTICE,
            title="Aviso",
            message="Mensagem",
        )

        assert notification.status == NotificationStatus.PENDING
        assert "Connection refused" in notification.error_message


class TestFineMessages:
    """Mensagens de multa."""

    def test_format_money(self):
        assert format_money(Decimal("150")) == "KES 150.00"

    @pytest.mark.anyio
    async def test_fine_notice(self, service, redis_client, sample_user, make_fine):
        fine = make_fine(amount="150.00")

        notification = await service.send_fine_notice(sample_user, fine, "Things Fall Apart")

        assert notification.type == NotificationType.FINE_NOTICE
        assert notification.priority == NotificationPriority.HIGH
        assert "KES 150.00" in notification.message
        assert "Things Fall Apart" in notification.message
        assert notification.related_fine_id == fine.id
        assert notification.related_loan_id == fine.loan_id

    @pytest.mark.anyio
    async def test_paid_notice(self, service, redis_client, sample_user, make_fine):
        fine = make_fine(amount="80.00")

        notification = await service.send_fine_paid_notice(sample_user, fine)

        assert notification.type == NotificationType.FINE_PAID
        assert notification.channels == ["email"]
        assert "KES 80.00" in notification.message

    @pytest.mark.anyio
    async def test_waived_notice_includes_reason(self, service, redis_client, sample_user, make_fine):
        fine = make_fine(amount="80.00")

        notification = await service.send_fine_waived_notice(sample_user, fine, "Doença")

        assert notification.type == NotificationType.FINE_WAIVED
        assert "Doença" in notification.message


class TestRequeuePending:
    """Reenfileiramento."""

    @pytest.mark.anyio
    async def test_requeues_pending(self, service, redis_client, sample_user):
        pending = [
            build_notification(
                user_id=sample_user.id,
                type=NotificationType.FINE_NOTICE,
                title="Aviso",
                message="Mensagem",
                channels=["sms"],
                priority=NotificationPriority.MEDIUM,
                status=NotificationStatus.PENDING,
            )
            for _ in range(3)
        ]

        with patch.object(service.repo, "list_pending", return_value=pending):
            queued = await service.requeue_pending(limit=10)

        assert queued == 3
        assert redis_client.rpush.await_count == 3
        assert all(n.status == NotificationStatus.SENT for n in pending)
