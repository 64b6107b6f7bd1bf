"""
Repository base com operações genéricas.

Os repositories não fazem commit: quem controla a transação é o service,
para que a escrita da multa e o ajuste de saldo do usuário sejam
confirmados juntos.
"""

from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository base.

    Fornece:
    - get_by_id: Buscar por ID
    - add: Adicionar à sessão e fazer flush (sem commit)
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Busca registro por ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def add(self, **kwargs: Any) -> ModelType:
        """Cria instância e envia o INSERT (flush) dentro da transação atual."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        return instance
