"""
Model de usuário (membro da biblioteca).
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base
from app.models.base import UUIDMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.fine import Fine
    from app.models.loan import Loan


class User(Base, UUIDMixin, TimestampMixin):
    """
    Usuário do sistema de biblioteca.

    Attributes:
        id: UUID único do usuário
        name: Nome completo
        email: Email único
        phone: Telefone para SMS (opcional)
        fine_balance: Soma das multas pendentes. Alterado apenas na mesma
            transação que muda o status de uma multa; pode ser recalculado
            a partir da tabela fines (ver FineService.reconcile_user_balance)
        loans: Empréstimos do usuário
        fines: Multas do usuário
    """
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    fine_balance: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    # Relationships
    loans: Mapped[List["Loan"]] = relationship(
        "Loan",
        back_populates="user",
        foreign_keys="Loan.user_id",
        lazy="noload",
    )
    fines: Mapped[List["Fine"]] = relationship(
        "Fine",
        back_populates="user",
        foreign_keys="Fine.user_id",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
