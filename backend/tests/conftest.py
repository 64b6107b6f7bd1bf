"""
Fixtures compartilhadas para testes.

Os testes unitários usam uma sessão mockada; os de ledger com sessão real
usam SQLite (aiosqlite) em arquivo temporário; os de integração usam o
PostgreSQL de DATABASE_URL e são pulados se ele não estiver acessível.
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient, ASGITransport

from app.db.session import get_db
from app.main import app
from app.models.book import Book
from app.models.enums import (
    FineStatus,
    FineType,
    LoanStatus,
    LoanType,
    RateType,
)
from app.models.fine import Fine
from app.models.loan import Loan
from app.models.user import User

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


# ==========================================
# Event loop configuration
# ==========================================

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


# ==========================================
# Session / HTTP client
# ==========================================

@pytest.fixture
def mock_db():
    """Mock da sessão do banco."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
async def client(mock_db) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP assíncrono com get_db substituído pela sessão mockada.

    Os services são mockados nos próprios testes com patch.object.
    """
    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==========================================
# Sample data
# ==========================================

@pytest.fixture
def sample_user():
    """Usuário de exemplo."""
    return User(
        id=uuid.uuid4(),
        name="Amina Otieno",
        email="amina@example.com",
        phone="+254700000000",
        fine_balance=Decimal("0.00"),
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def sample_book():
    """Livro de exemplo."""
    return Book(
        id=uuid.uuid4(),
        title="Things Fall Apart",
        author="Chinua Achebe",
        price=Decimal("750.00"),
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def sample_loan(sample_user, sample_book):
    """Empréstimo ativo com devolução em 2024-01-01."""
    loan = Loan(
        id=uuid.uuid4(),
        user_id=sample_user.id,
        book_id=sample_book.id,
        type=LoanType.BORROWED,
        status=LoanStatus.ACTIVE,
        reserved_at=datetime(2023, 12, 18, tzinfo=timezone.utc),
        borrowed_at=datetime(2023, 12, 18, tzinfo=timezone.utc),
        due_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        is_lost=False,
        created_at=NOW,
        updated_at=NOW,
    )
    loan.user = sample_user
    loan.book = sample_book
    return loan


@pytest.fixture
def make_fine(sample_user, sample_loan):
    """Fábrica de multas pendentes."""
    def _make(
        amount: str = "150.00",
        status: FineStatus = FineStatus.PENDING,
        fine_type: FineType = FineType.OVERDUE,
        due_date: datetime = NOW + timedelta(days=7),
    ) -> Fine:
        return Fine(
            id=uuid.uuid4(),
            user_id=sample_user.id,
            loan_id=sample_loan.id,
            amount=Decimal(amount),
            base_amount=Decimal(amount),
            type=fine_type,
            status=status,
            rate_type=RateType.PER_DAY,
            rate=Decimal("50"),
            grace_period=2,
            overdue_days=5,
            book_value=Decimal("0.00"),
            replacement_cost=Decimal("0.00"),
            due_date=due_date,
            created_at=NOW,
            updated_at=NOW,
        )

    return _make
