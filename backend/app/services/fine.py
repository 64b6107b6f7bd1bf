"""
Service do ledger de multas.

Regras de negócio:
    - No máximo uma multa de cada tipo por empréstimo
    - Multa por atraso só é criada após a carência; prazo de quitação 7 dias
    - Multa por perda = valor do livro * multiplicador; prazo 14 dias
    - PAID e WAIVED são terminais
    - fine_balance do usuário = soma das multas PENDING

Cada operação grava a multa, o ajuste de saldo e eventuais alterações no
empréstimo em um único commit. A notificação é enviada depois do commit e
falhas nela nunca desfazem a operação.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.exceptions import (
    AlreadyCompletedError,
    AlreadyPaidError,
    CannotWaivePaidError,
    DuplicateFineError,
    FineNotPendingError,
    InvalidLoanStateError,
    NotFoundError,
)
from app.core.timeutils import utcnow
from app.db.session import async_session_factory
from app.models.enums import FineStatus, FineType, LoanStatus, PaymentMethod, RateType
from app.models.fine import Fine
from app.models.loan import Loan
from app.repositories.fine import FineRepository
from app.repositories.loan import LoanRepository
from app.repositories.user import UserRepository
from app.schemas.fine import (
    BalanceReconciliation,
    FineRead,
    FineStatistics,
    FineStatisticsBucket,
    FineStatisticsTotal,
    FineSummary,
)
from app.services.config import ConfigService
from app.services.fine_calculator import (
    FineCalculation,
    calculate_lost_book_fine,
    calculate_overdue_fine,
    to_money,
)
from app.services.notification import NotificationService

logger = logging.getLogger(__name__)
settings = get_settings()

ZERO = Decimal("0.00")


class FineService:
    """Service para operações de multa."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationService | None = None,
        clock: Callable[[], datetime] = utcnow,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
    ):
        """
        Args:
            db: Sessão do ledger (multa, saldo e empréstimo)
            notifier: Notificador fixo; se omitido, cada aviso usa um
                NotificationService em sessão própria de session_factory
            clock: Fonte do "agora"
        """
        self.db = db
        self.loan_repo = LoanRepository(db)
        self.fine_repo = FineRepository(db)
        self.user_repo = UserRepository(db)
        self.config = ConfigService(db)
        self.notifier = notifier
        self.session_factory = session_factory
        self.clock = clock

    # ==========================================
    # Overdue fine
    # ==========================================

    async def calculate_overdue_fine(self, loan_id: UUID) -> FineCalculation:
        """
        Calcula a multa por atraso de um empréstimo sem gravar nada.

        Raises:
            NotFoundError: Empréstimo não encontrado
            AlreadyCompletedError: Empréstimo encerrado
            InvalidLoanStateError: Empréstimo sem data de devolução
        """
        policy = await self.config.get_fine_policy()
        loan = await self._get_open_loan(loan_id)
        return calculate_overdue_fine(loan.due_date, self.clock(), policy)

    async def create_overdue_fine(
        self,
        loan_id: UUID,
        issued_by: UUID | None = None,
    ) -> Fine | None:
        """
        Cria a multa por atraso de um empréstimo.

        Fluxo:
            1. Lê a política vigente
            2. Busca o empréstimo (deve existir e não estar encerrado)
            3. Verifica se já existe multa por atraso
            4. Calcula a multa
            5. Se o valor for 0 (carência), retorna None
            6. Grava a multa e soma o valor ao saldo do usuário (um commit)
            7. Envia aviso de multa (best-effort)

        A política é lida antes do empréstimo: uma falha no armazenamento de
        configuração desfaz a transação da sessão.

        Returns:
            Multa criada ou None se ainda está na carência

        Raises:
            NotFoundError: Empréstimo não encontrado
            AlreadyCompletedError: Empréstimo encerrado
            DuplicateFineError: Já existe multa por atraso para o empréstimo
            InvalidLoanStateError: Empréstimo sem data de devolução
        """
        policy = await self.config.get_fine_policy()
        loan = await self._get_open_loan(loan_id)

        existing = await self.fine_repo.find_by_loan_and_type(loan.id, FineType.OVERDUE)
        if existing:
            raise DuplicateFineError(loan.id, FineType.OVERDUE.value)

        now = self.clock()
        calculation = calculate_overdue_fine(loan.due_date, now, policy)

        if not calculation.has_fine:
            logger.debug(
                f"Empréstimo {loan.id} com {calculation.overdue_days} dia(s) de atraso "
                f"dentro da carência de {policy.grace_period_days} dia(s)"
            )
            return None

        fine = await self._insert_fine(
            loan,
            user_id=loan.user_id,
            loan_id=loan.id,
            amount=calculation.fine_amount,
            base_amount=calculation.fine_amount,
            type=FineType.OVERDUE,
            status=FineStatus.PENDING,
            rate_type=calculation.rate_type,
            rate=calculation.rate,
            grace_period=policy.grace_period_days,
            overdue_days=calculation.overdue_days,
            book_value=ZERO,
            replacement_cost=ZERO,
            due_date=now + timedelta(days=settings.FINE_SETTLEMENT_DAYS),
            notes=f"Registrada por {issued_by}" if issued_by else None,
        )

        logger.info(
            f"Multa por atraso {fine.id} criada: empréstimo={loan.id} "
            f"usuário={loan.user_id} valor={fine.amount}"
        )

        await self._notify(
            "aviso de multa",
            "send_fine_notice",
            loan.user,
            fine,
            loan.book.title if loan.book else None,
        )
        return fine

    # ==========================================
    # Lost book fine
    # ==========================================

    async def create_lost_book_fine(
        self,
        loan_id: UUID,
        replacement_cost: Decimal | None = None,
        issued_by: UUID | None = None,
    ) -> Fine:
        """
        Registra a perda do livro e cria a multa correspondente.

        Valor = (replacement_cost ou, se omitido, preço do livro) * multiplicador.
        O empréstimo é marcado como perdido e encerrado no mesmo commit.
        Um custo de reposição informado precisa ser positivo; o preço do
        livro só é usado quando replacement_cost é None.

        Raises:
            NotFoundError: Empréstimo não encontrado
            DuplicateFineError: Já existe multa por perda para o empréstimo
            InvalidLoanStateError: Custo de reposição não positivo, ou livro
                sem preço quando o custo é omitido
        """
        # antes do lock: falha de configuração desfaz a transação
        policy = await self.config.get_fine_policy()

        loan = await self.loan_repo.get_for_update(loan_id)
        if not loan:
            raise NotFoundError("Empréstimo", loan_id)

        existing = await self.fine_repo.find_by_loan_and_type(loan.id, FineType.LOST)
        if existing:
            raise DuplicateFineError(loan.id, FineType.LOST.value)

        if replacement_cost is not None:
            if Decimal(replacement_cost) <= 0:
                raise InvalidLoanStateError(
                    f"Custo de reposição deve ser positivo (recebido {replacement_cost})"
                )
            book_value = replacement_cost
        else:
            book_value = loan.book.price if loan.book is not None else None
            if book_value is None or Decimal(book_value) <= 0:
                raise InvalidLoanStateError(
                    "Livro sem preço cadastrado. Informe o custo de reposição."
                )
        book_value = to_money(book_value)

        now = self.clock()
        amount = calculate_lost_book_fine(book_value, policy)

        loan.mark_lost(book_value, now)

        fine = await self._insert_fine(
            loan,
            user_id=loan.user_id,
            loan_id=loan.id,
            amount=amount,
            base_amount=amount,
            type=FineType.LOST,
            status=FineStatus.PENDING,
            rate_type=RateType.FIXED,
            rate=ZERO,
            grace_period=0,
            overdue_days=0,
            book_value=book_value,
            replacement_cost=amount,
            due_date=now + timedelta(days=settings.LOST_FINE_SETTLEMENT_DAYS),
            notes=f"Registrada por {issued_by}" if issued_by else None,
        )

        logger.info(
            f"Multa por perda {fine.id} criada: empréstimo={loan.id} "
            f"valor_livro={book_value} multa={amount}"
        )

        await self._notify(
            "aviso de multa por perda",
            "send_fine_notice",
            loan.user,
            fine,
            loan.book.title if loan.book else None,
        )
        return fine

    # ==========================================
    # Pay / Waive
    # ==========================================

    async def pay_fine(
        self,
        fine_id: UUID,
        paid_by: UUID,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        receipt_number: str | None = None,
    ) -> Fine:
        """
        Registra o pagamento de uma multa.

        Raises:
            NotFoundError: Multa não encontrada
            AlreadyPaidError: Multa já paga
            FineNotPendingError: Multa perdoada ou cancelada
        """
        fine = await self.fine_repo.get_for_update(fine_id)
        if not fine:
            raise NotFoundError("Multa", fine_id)

        if fine.status == FineStatus.PAID:
            raise AlreadyPaidError(fine.id)
        if fine.status != FineStatus.PENDING:
            raise FineNotPendingError(fine.id, fine.status.value)

        fine.mark_as_paid(paid_by, payment_method, receipt_number, now=self.clock())
        await self.user_repo.increment_balance(fine.user_id, -fine.amount)
        await self.db.commit()
        await self.db.refresh(fine)

        logger.info(f"Multa {fine.id} paga ({payment_method.value}) por {paid_by}")

        user = await self.user_repo.get_by_id(fine.user_id)
        if user is not None:
            await self._notify("confirmação de pagamento", "send_fine_paid_notice", user, fine)
        return fine

    async def waive_fine(self, fine_id: UUID, waived_by: UUID, reason: str) -> Fine:
        """
        Perdoa uma multa pendente.

        Raises:
            NotFoundError: Multa não encontrada
            CannotWaivePaidError: Multa já paga
            FineNotPendingError: Multa já perdoada ou cancelada
        """
        fine = await self.fine_repo.get_for_update(fine_id)
        if not fine:
            raise NotFoundError("Multa", fine_id)

        if fine.status == FineStatus.PAID:
            raise CannotWaivePaidError(fine.id)
        if fine.status != FineStatus.PENDING:
            raise FineNotPendingError(fine.id, fine.status.value)

        fine.waive(waived_by, reason, now=self.clock())
        await self.user_repo.increment_balance(fine.user_id, -fine.amount)
        await self.db.commit()
        await self.db.refresh(fine)

        logger.info(f"Multa {fine.id} perdoada por {waived_by}: {reason}")

        user = await self.user_repo.get_by_id(fine.user_id)
        if user is not None:
            await self._notify(
                "aviso de perdão",
                "send_fine_waived_notice",
                user,
                fine,
                reason,
            )
        return fine

    # ==========================================
    # Queries
    # ==========================================

    async def get_fine(self, fine_id: UUID) -> Fine:
        """Busca multa por ID. Raises NotFoundError."""
        fine = await self.fine_repo.get_by_id(fine_id)
        if not fine:
            raise NotFoundError("Multa", fine_id)
        return fine

    async def list_fines(
        self,
        user_id: UUID | None = None,
        status: FineStatus | None = None,
        fine_type: FineType | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Fine], int]:
        """Lista multas com filtros e paginação."""
        return await self.fine_repo.search(
            user_id=user_id,
            status=status,
            fine_type=fine_type,
            page=page,
            page_size=page_size,
        )

    async def get_user_fine_summary(self, user_id: UUID) -> FineSummary:
        """
        Totaliza as multas de um usuário por status.

        Multas pendentes com prazo de quitação vencido também entram em
        overdue_fines.

        Raises:
            NotFoundError: Usuário não encontrado
        """
        balance = await self.user_repo.get_balance(user_id)
        if balance is None:
            raise NotFoundError("Usuário", user_id)

        fines = await self.fine_repo.list_by_user(user_id)
        now = self.clock()
        summary = FineSummary(user_id=user_id, fine_balance=balance)

        for fine in fines:
            summary.total_fines += fine.amount
            summary.fines.append(FineRead.model_validate(fine))

            if fine.status == FineStatus.PAID:
                summary.paid_fines += fine.amount
            elif fine.status == FineStatus.PENDING:
                summary.pending_fines += fine.amount
                if fine.is_overdue(now):
                    summary.overdue_fines += fine.amount
                    summary.overdue_fine_ids.append(fine.id)
            elif fine.status == FineStatus.WAIVED:
                summary.waived_fines += fine.amount

        return summary

    async def get_fine_statistics(self, days: int = 30) -> FineStatistics:
        """Estatísticas das multas criadas nos últimos `days` dias."""
        since = self.clock() - timedelta(days=days)

        breakdown = await self.fine_repo.breakdown_since(since)
        count, total_amount, average_amount = await self.fine_repo.totals_since(since)

        return FineStatistics(
            days=days,
            since=since,
            breakdown=[
                FineStatisticsBucket(
                    type=fine_type,
                    status=fine_status,
                    count=bucket_count,
                    total_amount=to_money(bucket_total),
                )
                for fine_type, fine_status, bucket_count, bucket_total in breakdown
            ],
            total=FineStatisticsTotal(
                count=count,
                total_amount=to_money(total_amount),
                average_amount=to_money(average_amount),
            ),
        )

    # ==========================================
    # Reconciliation
    # ==========================================

    async def reconcile_user_balance(self, user_id: UUID) -> Decimal:
        """
        Recalcula o saldo do usuário a partir das multas pendentes.

        Returns:
            Saldo correto (gravado se divergia)

        Raises:
            NotFoundError: Usuário não encontrado
        """
        stored = await self.user_repo.get_balance(user_id)
        if stored is None:
            raise NotFoundError("Usuário", user_id)

        expected = to_money(await self.fine_repo.pending_total_by_user(user_id))
        if to_money(stored) != expected:
            logger.warning(f"Saldo divergente para {user_id}: armazenado={stored} esperado={expected}")
            await self.user_repo.set_balance(user_id, expected)
            await self.db.commit()
        return expected

    async def reconcile_all_balances(self) -> BalanceReconciliation:
        """Corrige o saldo de todos os usuários cujo valor diverge das pendentes."""
        balances = await self.user_repo.list_balances()
        pending = await self.fine_repo.pending_totals()

        corrections: dict[UUID, Decimal] = {}
        for user_id, stored in balances.items():
            expected = to_money(pending.get(user_id, ZERO))
            if to_money(stored) != expected:
                await self.user_repo.set_balance(user_id, expected)
                corrections[user_id] = expected

        if corrections:
            await self.db.commit()
            logger.warning(f"Reconciliação corrigiu o saldo de {len(corrections)} usuário(s)")

        return BalanceReconciliation(
            users_checked=len(balances),
            users_corrected=len(corrections),
            corrections=corrections,
        )

    # ==========================================
    # Helpers
    # ==========================================

    async def _get_open_loan(self, loan_id: UUID) -> Loan:
        loan = await self.loan_repo.get_with_relations(loan_id)
        if not loan:
            raise NotFoundError("Empréstimo", loan_id)
        if loan.status == LoanStatus.COMPLETED:
            raise AlreadyCompletedError(loan.id)
        if loan.due_date is None:
            raise InvalidLoanStateError(
                f"Empréstimo {loan.id} ainda não foi retirado (sem data de devolução)"
            )
        return loan

    async def _insert_fine(self, loan: Loan, **values) -> Fine:
        """
        Grava a multa e soma o valor ao saldo do usuário em um único commit.

        A constraint única (loan_id, type) cobre a corrida entre duas
        varreduras que passaram pela verificação de duplicidade ao mesmo tempo.
        """
        try:
            fine = await self.fine_repo.add(**values)
            await self.user_repo.increment_balance(values["user_id"], values["amount"])
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if "uq_fines_loan_type" in str(e.orig) or "UNIQUE" in str(e.orig).upper():
                raise DuplicateFineError(loan.id, values["type"].value) from e
            raise
        await self.db.refresh(fine)
        return fine

    async def _notify(self, description: str, method: str, *args) -> None:
        """
        Envia notificação sem deixar falhas chegarem ao chamador.

        Sem notificador fixo, o aviso roda numa sessão própria: um erro ao
        gravar a notificação não toca na sessão do ledger nem nos objetos
        já commitados que serão devolvidos.
        """
        try:
            if self.notifier is not None:
                await getattr(self.notifier, method)(*args)
                return
            async with self.session_factory() as session:
                await getattr(NotificationService(session), method)(*args)
        except Exception as e:
            logger.warning(f"Falha ao enviar {description}: {e}")
