"""
Model de empréstimo (Loan/Borrow).
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.timeutils import utcnow
from app.db.session import Base
from app.models.base import UUIDMixin, TimestampMixin, pg_enum
from app.models.enums import LoanStatus, LoanType

if TYPE_CHECKING:
    from app.models.book import Book
    from app.models.user import User

RESERVATION_HOLD_HOURS = 24


def _default_reserved_until() -> datetime:
    return utcnow() + timedelta(hours=RESERVATION_HOLD_HOURS)


class Loan(Base, UUIDMixin, TimestampMixin):
    """
    Custódia de um livro por um usuário (reserva, empréstimo ou histórico).

    Regras:
        - due_date só é definida quando o tipo passa a BORROWED
        - Empréstimos nunca são apagados (histórico/auditoria)
        - Perda marca is_lost=True e status=COMPLETED

    Attributes:
        user_id: FK para o usuário
        book_id: FK para o livro
        issued_by_id: Funcionário que registrou o empréstimo
        type: Fase do ciclo de vida (reservation, borrowed, ...)
        status: active, completed, cancelled, overdue
        reserved_at / reserved_until: Janela da reserva (24h)
        borrowed_at: Data da retirada
        due_date: Data de devolução prevista
        returned_at: Data da devolução efetiva
        is_lost / lost_at: Marcação de perda
        replacement_cost: Custo de reposição informado na perda
    """
    __tablename__ = "loans"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("books.id", ondelete="RESTRICT"),
        nullable=False,
    )
    issued_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    type: Mapped[LoanType] = mapped_column(
        pg_enum(LoanType, "loan_type"),
        nullable=False,
        default=LoanType.RESERVATION,
    )
    status: Mapped[LoanStatus] = mapped_column(
        pg_enum(LoanStatus, "loan_status"),
        nullable=False,
        default=LoanStatus.ACTIVE,
    )
    reserved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    reserved_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=_default_reserved_until,
    )
    borrowed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    returned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_lost: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lost_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    replacement_cost: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="loans",
        foreign_keys=[user_id],
        lazy="selectin",
    )
    book: Mapped["Book"] = relationship(
        "Book",
        back_populates="loans",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_loans_user_status", "user_id", "status"),
        Index("ix_loans_book_status", "book_id", "status"),
        # Índice da varredura de atrasos
        Index("ix_loans_overdue_sweep", "type", "status", "due_date"),
        Index("ix_loans_reserved_until", "reserved_until", "type"),
    )

    def __repr__(self) -> str:
        return f"<Loan {self.id} - {self.type.value}/{self.status.value}>"

    def mark_lost(self, replacement_cost: Decimal, now: datetime | None = None) -> None:
        """Marca o livro como perdido e encerra o empréstimo."""
        self.is_lost = True
        self.lost_at = now or utcnow()
        self.replacement_cost = replacement_cost
        self.type = LoanType.LOST
        self.status = LoanStatus.COMPLETED
