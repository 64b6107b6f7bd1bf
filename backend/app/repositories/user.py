"""
Repository para operações de User no banco de dados.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository de User, incluindo o saldo de multas."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> User | None:
        """Busca usuário por email."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def increment_balance(self, user_id: UUID, delta: Decimal) -> None:
        """
        Soma delta ao saldo de multas com um UPDATE atômico.

        O incremento é feito no banco (fine_balance = fine_balance + delta),
        sem leitura prévia, então operações concorrentes sobre o mesmo
        usuário não perdem atualizações.
        """
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(fine_balance=User.fine_balance + delta)
            .execution_options(synchronize_session=False)
        )

    async def set_balance(self, user_id: UUID, balance: Decimal) -> None:
        """Sobrescreve o saldo (usado pela reconciliação)."""
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(fine_balance=balance)
            .execution_options(synchronize_session=False)
        )

    async def get_balance(self, user_id: UUID) -> Decimal | None:
        """Lê o saldo armazenado direto do banco."""
        result = await self.db.execute(
            select(User.fine_balance).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_balances(self) -> dict[UUID, Decimal]:
        """Retorna {user_id: fine_balance} de todos os usuários."""
        result = await self.db.execute(select(User.id, User.fine_balance))
        return {row.id: row.fine_balance for row in result.all()}
