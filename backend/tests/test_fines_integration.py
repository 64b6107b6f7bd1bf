"""
Testes de integração do ledger de multas contra o PostgreSQL real.

Usam DATABASE_URL; se o banco não estiver acessível, o módulo inteiro é
pulado. As tabelas são criadas com metadata.create_all e cada teste usa
usuários e livros próprios.
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401
from app.core.config import get_settings
from app.core.exceptions import DuplicateFineError
from app.db.session import Base
from app.models.book import Book
from app.models.enums import FineStatus, LoanStatus, LoanType, PaymentMethod
from app.models.loan import Loan
from app.models.user import User
from app.repositories.user import UserRepository
from app.services.fine import FineService
from app.services.overdue_sweep import OverdueSweepService

settings = get_settings()

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
STAFF_ID = uuid.uuid4()


class SilentNotifier:
    """Notificador que não toca no banco nem no Redis."""

    async def send_fine_notice(self, *args):
        return None

    async def send_fine_paid_notice(self, *args):
        return None

    async def send_fine_waived_notice(self, *args):
        return None


@pytest.fixture(scope="module")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="module")
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL indisponível: {e}")

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def overdue_loan(session_factory) -> Loan:
    """Empréstimo ativo vencido em 2024-01-01 com usuário e livro novos."""
    async with session_factory() as db:
        user = User(name="Integration", email=f"{uuid.uuid4()}@example.com")
        book = Book(title="Petals of Blood", author="Ngugi wa Thiong'o", price=Decimal("1000.00"))
        db.add_all([user, book])
        await db.flush()

        loan = Loan(
            user_id=user.id,
            book_id=book.id,
            type=LoanType.BORROWED,
            status=LoanStatus.ACTIVE,
            reserved_at=datetime(2023, 12, 18, tzinfo=timezone.utc),
            borrowed_at=datetime(2023, 12, 18, tzinfo=timezone.utc),
            due_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        db.add(loan)
        await db.commit()
        return loan


def ledger(db: AsyncSession) -> FineService:
    return FineService(db, notifier=SilentNotifier(), clock=lambda: NOW)


@pytest.mark.anyio
async def test_overdue_fine_lifecycle(session_factory, overdue_loan):
    async with session_factory() as db:
        fine = await ledger(db).create_overdue_fine(overdue_loan.id)

    assert fine.amount == Decimal("350.00")

    async with session_factory() as db:
        balance = await UserRepository(db).get_balance(overdue_loan.user_id)
        assert balance == Decimal("350.00")

        paid = await ledger(db).pay_fine(fine.id, paid_by=STAFF_ID, payment_method=PaymentMethod.CASH)
        assert paid.status == FineStatus.PAID

    async with session_factory() as db:
        balance = await UserRepository(db).get_balance(overdue_loan.user_id)
        assert balance == Decimal("0.00")


@pytest.mark.anyio
async def test_duplicate_overdue_fine(session_factory, overdue_loan):
    async with session_factory() as db:
        await ledger(db).create_overdue_fine(overdue_loan.id)

    async with session_factory() as db:
        with pytest.raises(DuplicateFineError):
            await ledger(db).create_overdue_fine(overdue_loan.id)


@pytest.mark.anyio
async def test_lost_book_fine(session_factory, overdue_loan):
    async with session_factory() as db:
        fine = await ledger(db).create_lost_book_fine(overdue_loan.id)

    assert fine.amount == Decimal("2000.00")

    async with session_factory() as db:
        loan = await db.get(Loan, overdue_loan.id)
        assert loan.is_lost is True
        assert loan.status == LoanStatus.COMPLETED


@pytest.mark.anyio
async def test_sweep_is_idempotent(session_factory, overdue_loan):
    sweep = OverdueSweepService(session_factory, clock=lambda: NOW)

    await sweep.process_overdue_fines()
    await sweep.process_overdue_fines()

    async with session_factory() as db:
        service = ledger(db)
        fines, total = await service.list_fines(user_id=overdue_loan.user_id)

    assert total == 1
    assert fines[0].loan_id == overdue_loan.id
