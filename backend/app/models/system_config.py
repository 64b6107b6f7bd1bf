"""
Model de configuração do sistema (chave/valor editável por administradores).
"""

import uuid
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.models.base import UUIDMixin, TimestampMixin, pg_enum
from app.models.enums import ConfigCategory, ConfigDataType


def infer_data_type(value: Any) -> ConfigDataType:
    """Deduz o ConfigDataType de um valor Python."""
    # bool precisa vir antes de int (bool é subclasse de int)
    if isinstance(value, bool):
        return ConfigDataType.BOOLEAN
    if isinstance(value, (int, float)):
        return ConfigDataType.NUMBER
    if isinstance(value, list):
        return ConfigDataType.ARRAY
    if isinstance(value, dict):
        return ConfigDataType.OBJECT
    return ConfigDataType.STRING


class SystemConfig(Base, UUIDMixin, TimestampMixin):
    """
    Entrada de configuração do sistema.

    Attributes:
        key: Chave única (ex.: grace_period_days)
        value: Valor JSON
        description: Texto exibido no painel de administração
        category: fines, notifications, borrowing, system, sms, email
        data_type: Tipo esperado do valor
        is_editable: Se pode ser alterada via API
        requires_restart: Se a alteração só vale após reiniciar
        updated_by_id: Último administrador que alterou
        version: Incrementado a cada alteração
    """
    __tablename__ = "system_configs"

    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[ConfigCategory] = mapped_column(
        pg_enum(ConfigCategory, "config_category"),
        nullable=False,
        index=True,
    )
    data_type: Mapped[ConfigDataType] = mapped_column(
        pg_enum(ConfigDataType, "config_data_type"),
        nullable=False,
    )
    is_editable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requires_restart: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<SystemConfig {self.key}={self.value!r}>"

    def validate_value(self, value: Any) -> bool:
        """Verifica se o valor é compatível com data_type."""
        if self.data_type == ConfigDataType.STRING:
            return isinstance(value, str)
        if self.data_type == ConfigDataType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value
        if self.data_type == ConfigDataType.BOOLEAN:
            return isinstance(value, bool)
        if self.data_type == ConfigDataType.ARRAY:
            return isinstance(value, list)
        if self.data_type == ConfigDataType.OBJECT:
            return isinstance(value, dict)
        return True
