"""
Model de multa.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.timeutils import as_utc, utcnow
from app.db.session import Base
from app.models.base import UUIDMixin, TimestampMixin, pg_enum
from app.models.enums import FineStatus, FineType, PaymentMethod, RateType

if TYPE_CHECKING:
    from app.models.loan import Loan
    from app.models.user import User


class Fine(Base, UUIDMixin, TimestampMixin):
    """
    Obrigação financeira ligada a exatamente um empréstimo.

    Regras:
        - No máximo uma multa de cada tipo por empréstimo (unique loan_id+type)
        - amount não muda após a criação; só o status avança
        - PAID e WAIVED são terminais

    Attributes:
        user_id: Usuário devedor
        loan_id: Empréstimo que originou a multa
        amount: Valor devido
        base_amount: Valor calculado antes de ajustes
        type: overdue, lost, damaged, reservation_expired
        status: pending, paid, waived, cancelled
        rate_type / rate: Taxa usada no cálculo
        grace_period: Carência (dias) vigente no cálculo
        overdue_days: Dias de atraso no momento do cálculo
        book_value / replacement_cost: Dados da multa por perda
        due_date: Prazo para quitar a multa
    """
    __tablename__ = "fines"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    loan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("loans.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    type: Mapped[FineType] = mapped_column(pg_enum(FineType, "fine_type"), nullable=False)
    status: Mapped[FineStatus] = mapped_column(
        pg_enum(FineStatus, "fine_status"),
        nullable=False,
        default=FineStatus.PENDING,
    )
    rate_type: Mapped[RateType] = mapped_column(
        pg_enum(RateType, "fine_rate_type"),
        nullable=False,
        default=RateType.PER_DAY,
    )
    rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    grace_period: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overdue_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    book_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    replacement_cost: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Pagamento
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(
        pg_enum(PaymentMethod, "payment_method"),
        nullable=True,
    )
    receipt_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Perdão
    waived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    waived_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    waiver_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="fines",
        foreign_keys=[user_id],
        lazy="selectin",
    )
    loan: Mapped["Loan"] = relationship("Loan", lazy="selectin")

    __table_args__ = (
        # Garante "uma multa por tipo por empréstimo" mesmo com varreduras concorrentes
        UniqueConstraint("loan_id", "type", name="uq_fines_loan_type"),
        CheckConstraint("amount >= 0", name="ck_fines_amount_non_negative"),
        Index("ix_fines_user_status", "user_id", "status"),
        Index("ix_fines_due_date_status", "due_date", "status"),
        Index("ix_fines_type_status", "type", "status"),
        Index("ix_fines_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Fine {self.id} - {self.type.value} {self.amount} ({self.status.value})>"

    def is_overdue(self, now: datetime | None = None) -> bool:
        """True se a multa está pendente e passou do prazo de quitação."""
        if self.status != FineStatus.PENDING:
            return False
        return as_utc(now or utcnow()) > as_utc(self.due_date)

    def mark_as_paid(
        self,
        paid_by: uuid.UUID,
        payment_method: PaymentMethod,
        receipt_number: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Registra o pagamento (a validação de estado fica no service)."""
        self.status = FineStatus.PAID
        self.paid_at = now or utcnow()
        self.paid_by_id = paid_by
        self.payment_method = payment_method
        self.receipt_number = receipt_number

    def waive(self, waived_by: uuid.UUID, reason: str, now: datetime | None = None) -> None:
        """Registra o perdão da multa."""
        self.status = FineStatus.WAIVED
        self.waived_at = now or utcnow()
        self.waived_by_id = waived_by
        self.waiver_reason = reason
