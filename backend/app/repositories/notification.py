"""
Repository para operações de Notification no banco de dados.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import NotificationStatus
from app.models.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository de Notification."""

    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def list_pending(self, limit: int = 100) -> list[Notification]:
        """Notificações ainda não entregues aos workers."""
        result = await self.db.execute(
            select(Notification)
            .where(Notification.status == NotificationStatus.PENDING)
            .order_by(Notification.scheduled_for)
            .limit(limit)
        )
        return list(result.scalars().all())
