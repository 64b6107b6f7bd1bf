"""
Model de livro do acervo.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base
from app.models.base import UUIDMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.loan import Loan


class Book(Base, UUIDMixin, TimestampMixin):
    """
    Livro do acervo.

    Attributes:
        id: UUID único do livro
        title: Título
        author: Nome do autor
        isbn: ISBN (opcional, único)
        price: Valor de reposição usado na multa por perda
    """
    __tablename__ = "books"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    loans: Mapped[List["Loan"]] = relationship(
        "Loan",
        back_populates="book",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Book {self.title}>"
