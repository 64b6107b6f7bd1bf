"""
Model de notificação enviada a um usuário.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.timeutils import utcnow
from app.db.session import Base
from app.models.base import UUIDMixin, TimestampMixin, pg_enum
from app.models.enums import NotificationPriority, NotificationStatus, NotificationType


class Notification(Base, UUIDMixin, TimestampMixin):
    """
    Registro de notificação.

    A entrega (SMS/email) é feita por workers externos que consomem a fila
    Redis; esta tabela guarda o conteúdo e o status.

    Attributes:
        user_id: Destinatário
        type: Tipo da notificação (fine_notice, fine_paid, ...)
        title / message: Conteúdo
        channels: Lista de canais (sms, email, in_app)
        status: pending, sent, failed, delivered
        priority: low, medium, high, urgent
        related_loan_id / related_fine_id: Entidades relacionadas
        scheduled_for: Quando deve ser entregue
        error_message: Último erro de enfileiramento/entrega
    """
    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[NotificationType] = mapped_column(
        pg_enum(NotificationType, "notification_type"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    channels: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[NotificationStatus] = mapped_column(
        pg_enum(NotificationStatus, "notification_status"),
        nullable=False,
        default=NotificationStatus.PENDING,
    )
    priority: Mapped[NotificationPriority] = mapped_column(
        pg_enum(NotificationPriority, "notification_priority"),
        nullable=False,
        default=NotificationPriority.MEDIUM,
    )
    related_loan_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("loans.id", ondelete="SET NULL"),
        nullable=True,
    )
    related_fine_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fines.id", ondelete="SET NULL"),
        nullable=True,
    )
    scheduled_for: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_notifications_user_id", "user_id"),
        Index("ix_notifications_scheduled_status", "scheduled_for", "status"),
    )

    def __repr__(self) -> str:
        return f"<Notification {self.type.value} -> {self.user_id} ({self.status.value})>"
