"""
Service de notificações.

Grava a notificação no banco e publica o id na fila Redis consumida pelos
workers de entrega (SMS/email). A entrega em si não acontece aqui.

O envio é best-effort para quem chama: o FineService captura qualquer erro
daqui e apenas registra em log.
"""

import json
import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db import redis as redis_db
from app.models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from app.models.fine import Fine
from app.models.notification import Notification
from app.models.user import User
from app.repositories.notification import NotificationRepository

logger = logging.getLogger(__name__)
settings = get_settings()

DEFAULT_CHANNELS = [NotificationChannel.SMS, NotificationChannel.EMAIL]


def format_money(amount: Decimal) -> str:
    """Formata valor com a moeda configurada (ex.: 'KES 150.00')."""
    return f"{settings.CURRENCY} {Decimal(amount):.2f}"


class NotificationService:
    """Criação e enfileiramento de notificações."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = NotificationRepository(db)

    @staticmethod
    def resolve_channels(
        user: User,
        channels: list[NotificationChannel],
    ) -> list[NotificationChannel]:
        """Remove canais para os quais o usuário não tem contato."""
        resolved = []
        for channel in channels:
            if channel == NotificationChannel.SMS and not user.phone:
                continue
            if channel == NotificationChannel.EMAIL and not user.email:
                continue
            resolved.append(channel)
        return resolved or [NotificationChannel.IN_APP]

    async def send_notification(
        self,
        user: User,
        type: NotificationType,
        title: str,
        message: str,
        channels: list[NotificationChannel] | None = None,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        related_loan_id: UUID | None = None,
        related_fine_id: UUID | None = None,
    ) -> Notification | None:
        """
        Grava e enfileira uma notificação.

        Returns:
            Notification criada, ou None se notificações estão desabilitadas
        """
        if not settings.NOTIFICATIONS_ENABLED:
            logger.debug(f"Notificações desabilitadas; '{type.value}' para {user.id} ignorada")
            return None

        resolved = self.resolve_channels(user, channels or DEFAULT_CHANNELS)

        notification = await self.repo.add(
            user_id=user.id,
            type=type,
            title=title,
            message=message,
            channels=[channel.value for channel in resolved],
            priority=priority,
            status=NotificationStatus.PENDING,
            related_loan_id=related_loan_id,
            related_fine_id=related_fine_id,
        )
        await self.db.commit()

        await self.enqueue(notification)
        return notification

    async def enqueue(self, notification: Notification) -> bool:
        """
        Publica a notificação na fila Redis.

        Se o Redis não estiver disponível a notificação fica PENDING e pode ser
        reenfileirada depois com requeue_pending().
        """
        client = redis_db.redis_client
        if client is None:
            logger.warning(f"Redis indisponível; notificação {notification.id} ficou pendente")
            return False

        payload = {
            "notification_id": str(notification.id),
            "user_id": str(notification.user_id),
            "type": notification.type.value,
            "channels": notification.channels,
            "priority": notification.priority.value,
        }
        try:
            await client.rpush(settings.NOTIFICATION_QUEUE_KEY, json.dumps(payload))
        except Exception as e:
            logger.warning(f"Falha ao enfileirar notificação {notification.id}: {e}")
            notification.error_message = str(e)
            await self.db.commit()
            return False

        notification.status = NotificationStatus.SENT
        notification.error_message = None
        await self.db.commit()
        return True

    async def requeue_pending(self, limit: int = 100) -> int:
        """Tenta enfileirar novamente notificações pendentes. Retorna quantas foram."""
        pending = await self.repo.list_pending(limit=limit)
        queued = 0
        for notification in pending:
            if await self.enqueue(notification):
                queued += 1
        return queued

    # ==========================================
    # Mensagens de multa
    # ==========================================

    async def send_fine_notice(
        self,
        user: User,
        fine: Fine,
        book_title: str | None = None,
    ) -> Notification | None:
        """Avisa o usuário sobre uma nova multa."""
        book = f' pelo livro "{book_title}"' if book_title else ""
        message = (
            f"Olá {user.name}, você possui uma multa de {format_money(fine.amount)}{book}. "
            f"Quite a multa para continuar usando os serviços da biblioteca."
        )
        return await self.send_notification(
            user=user,
            type=NotificationType.FINE_NOTICE,
            title="Aviso de multa",
            message=message,
            channels=[NotificationChannel.SMS, NotificationChannel.EMAIL],
            priority=NotificationPriority.HIGH,
            related_loan_id=fine.loan_id,
            related_fine_id=fine.id,
        )

    async def send_fine_paid_notice(self, user: User, fine: Fine) -> Notification | None:
        """Confirma o pagamento de uma multa."""
        message = (
            f"Sua multa de {format_money(fine.amount)} foi paga com sucesso. "
            f"Obrigado por regularizar sua conta."
        )
        return await self.send_notification(
            user=user,
            type=NotificationType.FINE_PAID,
            title="Pagamento de multa confirmado",
            message=message,
            channels=[NotificationChannel.EMAIL],
            priority=NotificationPriority.MEDIUM,
            related_loan_id=fine.loan_id,
            related_fine_id=fine.id,
        )

    async def send_fine_waived_notice(
        self,
        user: User,
        fine: Fine,
        reason: str,
    ) -> Notification | None:
        """Informa o perdão de uma multa."""
        message = f"Sua multa de {format_money(fine.amount)} foi perdoada. Motivo: {reason}"
        return await self.send_notification(
            user=user,
            type=NotificationType.FINE_WAIVED,
            title="Multa perdoada",
            message=message,
            channels=[NotificationChannel.EMAIL],
            priority=NotificationPriority.MEDIUM,
            related_loan_id=fine.loan_id,
            related_fine_id=fine.id,
        )
