"""
Service de configuração das políticas de multa.

Chaves em system_configs (categoria "fines"):
    - grace_period_days: Carência em dias (padrão 2)
    - fine_daily_rate: Taxa diária (padrão 50)
    - fine_hourly_rate: Taxa horária (padrão 5)
    - fine_rate_type: per_day ou per_hour (padrão per_day)
    - max_fine_amount: Teto da multa por atraso (padrão 2000)
    - lost_book_multiplier: Multiplicador da multa por perda (padrão 2)
"""

import logging
from decimal import Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConfigurationUnavailableError, InvalidConfigurationError
from app.models.enums import ConfigCategory, RateType
from app.models.system_config import SystemConfig
from app.repositories.system_config import SystemConfigRepository
from app.schemas.config import FineConfigRead, FineConfigUpdate
from app.services.fine_calculator import FinePolicy

logger = logging.getLogger(__name__)

KEY_GRACE_PERIOD = "grace_period_days"
KEY_DAILY_RATE = "fine_daily_rate"
KEY_HOURLY_RATE = "fine_hourly_rate"
KEY_RATE_TYPE = "fine_rate_type"
KEY_MAX_FINE = "max_fine_amount"
KEY_LOST_MULTIPLIER = "lost_book_multiplier"

# chave -> (campo de FineConfigUpdate, descrição)
FINE_CONFIG_FIELDS: dict[str, tuple[str, str]] = {
    KEY_GRACE_PERIOD: ("grace_period", "Carência em dias para multas por atraso"),
    KEY_DAILY_RATE: ("daily_rate", "Taxa diária da multa por atraso"),
    KEY_HOURLY_RATE: ("hourly_rate", "Taxa horária da multa por atraso"),
    KEY_RATE_TYPE: ("rate_type", "Forma de cobrança: per_day ou per_hour"),
    KEY_MAX_FINE: ("max_fine", "Valor máximo da multa por atraso"),
    KEY_LOST_MULTIPLIER: ("lost_book_multiplier", "Multiplicador do valor do livro em caso de perda"),
}


def _as_decimal(key: str, value, default: Decimal) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        logger.warning(f"Configuração '{key}' inválida ({value!r}); usando padrão {default}")
        return default


class ConfigService:
    """Leitura e atualização da política de multas."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = SystemConfigRepository(db)

    async def get_fine_policy(self) -> FinePolicy:
        """
        Monta a FinePolicy vigente lendo cada chave do banco.

        Chaves ausentes ou ilegíveis usam os valores padrão documentados.
        Se o armazenamento estiver indisponível, a política padrão inteira
        é usada.
        """
        defaults = FinePolicy.defaults()

        try:
            grace = await self.repo.get_value(KEY_GRACE_PERIOD, defaults.grace_period_days)
            daily = await self.repo.get_value(KEY_DAILY_RATE, defaults.daily_rate)
            hourly = await self.repo.get_value(KEY_HOURLY_RATE, defaults.hourly_rate)
            rate_type = await self.repo.get_value(KEY_RATE_TYPE, defaults.rate_type.value)
            max_fine = await self.repo.get_value(KEY_MAX_FINE, defaults.max_fine)
            multiplier = await self.repo.get_value(KEY_LOST_MULTIPLIER, defaults.lost_book_multiplier)
        except ConfigurationUnavailableError:
            logger.warning("Configuração indisponível; usando política de multas padrão")
            return defaults

        try:
            grace_days = int(grace)
        except (TypeError, ValueError):
            logger.warning(f"Carência inválida ({grace!r}); usando {defaults.grace_period_days}")
            grace_days = defaults.grace_period_days

        return FinePolicy(
            grace_period_days=grace_days,
            daily_rate=_as_decimal(KEY_DAILY_RATE, daily, defaults.daily_rate),
            hourly_rate=_as_decimal(KEY_HOURLY_RATE, hourly, defaults.hourly_rate),
            max_fine=_as_decimal(KEY_MAX_FINE, max_fine, defaults.max_fine),
            rate_type=RateType.PER_HOUR if rate_type == RateType.PER_HOUR.value else RateType.PER_DAY,
            lost_book_multiplier=_as_decimal(KEY_LOST_MULTIPLIER, multiplier, defaults.lost_book_multiplier),
        )

    async def get_fine_configuration(self) -> FineConfigRead:
        """Retorna a política vigente no formato da API."""
        policy = await self.get_fine_policy()
        return FineConfigRead.from_policy(policy)

    async def update_fine_configuration(
        self,
        data: FineConfigUpdate,
        updated_by: UUID | None = None,
    ) -> FineConfigRead:
        """
        Atualiza apenas os campos informados.

        Raises:
            InvalidConfigurationError: nenhum campo informado, chave bloqueada
                ou valor incompatível com o tipo armazenado
        """
        changes = data.model_dump(exclude_none=True, mode="json")
        if not changes:
            raise InvalidConfigurationError("Informe ao menos um campo para atualizar")

        for key, (field, description) in FINE_CONFIG_FIELDS.items():
            if field not in changes:
                continue
            value = changes[field]
            # Decimais vêm como string no modo json; armazenamos como número
            if field not in ("grace_period", "rate_type"):
                value = float(value)
            await self.repo.set_value(
                key,
                value,
                category=ConfigCategory.FINES,
                description=description,
                updated_by=updated_by,
            )

        await self.db.commit()
        logger.info(f"Configuração de multas atualizada por {updated_by}: {sorted(changes)}")

        return await self.get_fine_configuration()

    async def list_configs(self, category: ConfigCategory) -> list[SystemConfig]:
        """Lista as entradas de uma categoria."""
        return await self.repo.get_by_category(category)

    async def seed_defaults(self) -> int:
        """Grava os valores padrão das chaves ausentes. Retorna quantas criou."""
        defaults = FinePolicy.defaults()
        default_values = {
            KEY_GRACE_PERIOD: defaults.grace_period_days,
            KEY_DAILY_RATE: float(defaults.daily_rate),
            KEY_HOURLY_RATE: float(defaults.hourly_rate),
            KEY_RATE_TYPE: defaults.rate_type.value,
            KEY_MAX_FINE: float(defaults.max_fine),
            KEY_LOST_MULTIPLIER: float(defaults.lost_book_multiplier),
        }

        created = 0
        for key, value in default_values.items():
            if await self.repo.get_by_key(key) is not None:
                continue
            await self.repo.set_value(
                key,
                value,
                category=ConfigCategory.FINES,
                description=FINE_CONFIG_FIELDS[key][1],
            )
            created += 1

        await self.db.commit()
        return created
