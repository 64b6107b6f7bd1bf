"""
Repository de configuração do sistema (provedor de políticas).

Valores são lidos do banco a cada chamada: alterações feitas por
administradores valem no próximo cálculo, sem reiniciar a aplicação.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConfigurationUnavailableError, InvalidConfigurationError
from app.models.enums import ConfigCategory
from app.models.system_config import SystemConfig, infer_data_type
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SystemConfigRepository(BaseRepository[SystemConfig]):
    """Repository de SystemConfig."""

    def __init__(self, db: AsyncSession):
        super().__init__(SystemConfig, db)

    async def get_by_key(self, key: str) -> SystemConfig | None:
        """Busca configuração pela chave."""
        result = await self.db.execute(
            select(SystemConfig).where(SystemConfig.key == key)
        )
        return result.scalar_one_or_none()

    async def get_value(self, key: str, default: Any = None) -> Any:
        """
        Retorna o valor da chave ou default se ela não existir.

        Em caso de erro a transação da sessão é desfeita (no PostgreSQL ela
        fica abortada) e os objetos carregados nela expiram; leia a
        configuração antes de carregar o que a operação vai usar.

        Raises:
            ConfigurationUnavailableError: falha ao ler o armazenamento
        """
        try:
            config = await self.get_by_key(key)
        except SQLAlchemyError as e:
            logger.error(f"Erro ao ler configuração '{key}': {e}")
            await self.db.rollback()
            raise ConfigurationUnavailableError(
                "Configuração de multas indisponível no momento"
            ) from e
        return config.value if config is not None else default

    async def set_value(
        self,
        key: str,
        value: Any,
        category: ConfigCategory,
        description: str | None = None,
        updated_by: UUID | None = None,
    ) -> SystemConfig:
        """
        Cria ou atualiza uma configuração (sem commit).

        Raises:
            InvalidConfigurationError: chave não editável ou valor de tipo errado
        """
        config = await self.get_by_key(key)

        if config is None:
            return await self.add(
                key=key,
                value=value,
                description=description,
                category=category,
                data_type=infer_data_type(value),
                updated_by_id=updated_by,
                version=1,
            )

        if not config.is_editable:
            raise InvalidConfigurationError(f"A configuração '{key}' não pode ser alterada")

        if not config.validate_value(value):
            raise InvalidConfigurationError(
                f"Valor inválido para '{key}'. Tipo esperado: {config.data_type.value}"
            )

        config.value = value
        config.description = description or config.description
        config.updated_by_id = updated_by
        config.version += 1
        await self.db.flush()
        return config

    async def get_by_category(self, category: ConfigCategory) -> list[SystemConfig]:
        """Lista configurações de uma categoria ordenadas pela chave."""
        result = await self.db.execute(
            select(SystemConfig)
            .where(SystemConfig.category == category)
            .order_by(SystemConfig.key)
        )
        return list(result.scalars().all())
