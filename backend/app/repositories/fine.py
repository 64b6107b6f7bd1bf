"""
Repository para operações de Fine no banco de dados.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import FineStatus, FineType
from app.models.fine import Fine
from app.repositories.base import BaseRepository


class FineRepository(BaseRepository[Fine]):
    """Repository de Fine."""

    def __init__(self, db: AsyncSession):
        super().__init__(Fine, db)

    async def get_for_update(self, fine_id: UUID) -> Fine | None:
        """Busca multa travando a linha até o fim da transação."""
        result = await self.db.execute(
            select(Fine).where(Fine.id == fine_id).with_for_update(of=Fine)
        )
        return result.scalar_one_or_none()

    async def find_by_loan_and_type(
        self,
        loan_id: UUID,
        fine_type: FineType,
    ) -> Fine | None:
        """Busca a multa de um tipo para um empréstimo (no máximo uma)."""
        result = await self.db.execute(
            select(Fine).where(
                Fine.loan_id == loan_id,
                Fine.type == fine_type,
            )
        )
        return result.scalar_one_or_none()

    async def loan_ids_with_fine(
        self,
        loan_ids: list[UUID],
        fine_type: FineType,
    ) -> set[UUID]:
        """Dentre loan_ids, retorna os que já possuem multa do tipo."""
        if not loan_ids:
            return set()
        result = await self.db.execute(
            select(Fine.loan_id).where(
                Fine.loan_id.in_(loan_ids),
                Fine.type == fine_type,
            )
        )
        return set(result.scalars().all())

    async def list_by_user(self, user_id: UUID) -> list[Fine]:
        """Lista todas as multas de um usuário (mais recentes primeiro)."""
        result = await self.db.execute(
            select(Fine)
            .where(Fine.user_id == user_id)
            .order_by(Fine.created_at.desc())
        )
        return list(result.scalars().all())

    async def search(
        self,
        user_id: UUID | None = None,
        status: FineStatus | None = None,
        fine_type: FineType | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Fine], int]:
        """
        Busca multas com filtros e paginação.

        Returns:
            Tupla (lista de multas, total)
        """
        filters = []
        if user_id:
            filters.append(Fine.user_id == user_id)
        if status:
            filters.append(Fine.status == status)
        if fine_type:
            filters.append(Fine.type == fine_type)

        count_result = await self.db.execute(
            select(func.count(Fine.id)).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Fine)
            .where(*filters)
            .order_by(Fine.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    async def pending_total_by_user(self, user_id: UUID) -> Decimal:
        """Soma das multas pendentes de um usuário."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(Fine.amount), 0)).where(
                Fine.user_id == user_id,
                Fine.status == FineStatus.PENDING,
            )
        )
        return Decimal(result.scalar_one())

    async def pending_totals(self) -> dict[UUID, Decimal]:
        """Soma das multas pendentes agrupada por usuário."""
        result = await self.db.execute(
            select(Fine.user_id, func.sum(Fine.amount))
            .where(Fine.status == FineStatus.PENDING)
            .group_by(Fine.user_id)
        )
        return {user_id: Decimal(total) for user_id, total in result.all()}

    async def breakdown_since(self, start: datetime) -> list[tuple[FineType, FineStatus, int, Decimal]]:
        """Contagem e soma por (tipo, status) das multas criadas desde start."""
        result = await self.db.execute(
            select(
                Fine.type,
                Fine.status,
                func.count(Fine.id),
                func.coalesce(func.sum(Fine.amount), 0),
            )
            .where(Fine.created_at >= start)
            .group_by(Fine.type, Fine.status)
            .order_by(Fine.type, Fine.status)
        )
        return [
            (fine_type, fine_status, count, Decimal(total))
            for fine_type, fine_status, count, total in result.all()
        ]

    async def totals_since(self, start: datetime) -> tuple[int, Decimal, Decimal]:
        """(quantidade, soma, média) das multas criadas desde start."""
        result = await self.db.execute(
            select(
                func.count(Fine.id),
                func.coalesce(func.sum(Fine.amount), 0),
                func.coalesce(func.avg(Fine.amount), 0),
            ).where(Fine.created_at >= start)
        )
        count, total, average = result.one()
        return count, Decimal(total), Decimal(average)
