"""
Schemas Pydantic para a configuração de multas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.enums import ConfigCategory, ConfigDataType, RateType


class FineConfigRead(BaseModel):
    """Política de multas vigente."""

    grace_period: int = Field(..., description="Carência em dias")
    daily_rate: Decimal
    hourly_rate: Decimal
    rate_type: RateType
    max_fine: Decimal
    lost_book_multiplier: Decimal

    @classmethod
    def from_policy(cls, policy) -> "FineConfigRead":
        """Cria a partir de uma FinePolicy."""
        return cls(
            grace_period=policy.grace_period_days,
            daily_rate=policy.daily_rate,
            hourly_rate=policy.hourly_rate,
            rate_type=policy.rate_type,
            max_fine=policy.max_fine,
            lost_book_multiplier=policy.lost_book_multiplier,
        )


class FineConfigUpdate(BaseModel):
    """Atualização parcial da política. Campos omitidos não mudam."""

    grace_period: int | None = Field(None, ge=0, le=365, description="Carência em dias")
    daily_rate: Decimal | None = Field(None, ge=0)
    hourly_rate: Decimal | None = Field(None, ge=0)
    rate_type: RateType | None = Field(None, description="per_day ou per_hour")
    max_fine: Decimal | None = Field(None, ge=0)
    lost_book_multiplier: Decimal | None = Field(None, gt=0)

    @field_validator("rate_type")
    @classmethod
    def validate_rate_type(cls, v: RateType | None) -> RateType | None:
        """Multas por atraso só aceitam cobrança por dia ou por hora."""
        if v == RateType.FIXED:
            raise ValueError("rate_type deve ser per_day ou per_hour")
        return v


class FineConfigUpdateRequest(FineConfigUpdate):
    """Corpo do PUT /config/fines."""

    updated_by: UUID | None = Field(None, description="ID do administrador")


class SystemConfigRead(BaseModel):
    """Entrada de system_configs."""

    key: str
    value: Any
    description: str | None = None
    category: ConfigCategory
    data_type: ConfigDataType
    is_editable: bool
    requires_restart: bool
    version: int
    updated_by_id: UUID | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
