"""
Repository para operações de Loan no banco de dados.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.enums import LoanStatus, LoanType
from app.models.loan import Loan
from app.repositories.base import BaseRepository


class LoanRepository(BaseRepository[Loan]):
    """Repository de Loan."""

    def __init__(self, db: AsyncSession):
        super().__init__(Loan, db)

    async def get_with_relations(self, loan_id: UUID) -> Loan | None:
        """Busca empréstimo com usuário e livro."""
        result = await self.db.execute(
            select(Loan)
            .where(Loan.id == loan_id)
            .options(
                selectinload(Loan.user),
                selectinload(Loan.book),
            )
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, loan_id: UUID) -> Loan | None:
        """Busca empréstimo travando a linha até o fim da transação."""
        result = await self.db.execute(
            select(Loan)
            .where(Loan.id == loan_id)
            .options(
                selectinload(Loan.user),
                selectinload(Loan.book),
            )
            .with_for_update(of=Loan)
        )
        return result.scalar_one_or_none()

    async def find_overdue_active_borrowed(self, now: datetime) -> list[Loan]:
        """
        Lista empréstimos candidatos à multa por atraso.

        Critério: type=borrowed, status=active e due_date < now.
        """
        result = await self.db.execute(
            select(Loan)
            .where(
                Loan.type == LoanType.BORROWED,
                Loan.status == LoanStatus.ACTIVE,
                Loan.due_date.is_not(None),
                Loan.due_date < now,
            )
            .order_by(Loan.due_date)
        )
        return list(result.scalars().all())
