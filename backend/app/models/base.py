"""
Classe base e mixins para models SQLAlchemy.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base


class UUIDMixin:
    """Mixin que adiciona ID do tipo UUID como primary key."""
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


class TimestampMixin:
    """
    Mixin que adiciona timestamps de criação e atualização.

    created_at é a referência da janela de estatísticas de multas.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


def pg_enum(enum_cls: type[enum.Enum], name: str) -> ENUM:
    """
    Tipo ENUM do PostgreSQL persistindo o *valor* do enum (minúsculo).

    Sem values_callable o SQLAlchemy gravaria o nome do membro (ex.: "PER_DAY").
    """
    return ENUM(
        enum_cls,
        name=name,
        create_type=True,
        values_callable=lambda members: [member.value for member in members],
    )
