"""
Varredura periódica de empréstimos atrasados.

Para cada empréstimo emprestado, ativo e com due_date no passado, cria a
multa por atraso (se ainda não existir). Cada empréstimo é processado em
sua própria sessão e com tempo limite, então uma falha isolada não
interrompe a varredura.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.exceptions import DuplicateFineError
from app.core.timeutils import utcnow
from app.db.session import async_session_factory
from app.models.enums import FineType
from app.repositories.fine import FineRepository
from app.repositories.loan import LoanRepository
from app.services.fine import FineService

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class SweepResult:
    """
    Resultado de uma varredura.

    Attributes:
        processed_count: Multas criadas
        total_overdue: Candidatos encontrados
        skipped_count: Já multados ou ainda na carência
        failed_count: Erros ou tempo esgotado
        cancelled: Varredura interrompida antes do fim
    """

    processed_count: int = 0
    total_overdue: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    cancelled: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class OverdueSweepService:
    """Cria multas por atraso em lote."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
        loan_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.loan_timeout = (
            loan_timeout if loan_timeout is not None
            else settings.OVERDUE_SWEEP_LOAN_TIMEOUT_SECONDS
        )
        self.clock = clock

    async def find_candidates(self) -> tuple[list[UUID], set[UUID]]:
        """
        Retorna (ids dos empréstimos atrasados, ids que já têm multa por atraso).
        """
        async with self.session_factory() as session:
            loans = await LoanRepository(session).find_overdue_active_borrowed(self.clock())
            loan_ids = [loan.id for loan in loans]
            already_fined = await FineRepository(session).loan_ids_with_fine(
                loan_ids, FineType.OVERDUE
            )
        return loan_ids, already_fined

    async def process_overdue_fines(
        self,
        cancel_event: asyncio.Event | None = None,
    ) -> SweepResult:
        """
        Processa todos os empréstimos atrasados.

        Args:
            cancel_event: Quando setado, a varredura para antes do próximo empréstimo

        Returns:
            SweepResult com as contagens
        """
        result = SweepResult()

        loan_ids, already_fined = await self.find_candidates()
        result.total_overdue = len(loan_ids)

        for loan_id in loan_ids:
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                logger.info("Varredura de atrasos cancelada")
                break

            if loan_id in already_fined:
                result.skipped_count += 1
                continue

            try:
                fine = await asyncio.wait_for(
                    self._process_loan(loan_id),
                    timeout=self.loan_timeout,
                )
            except DuplicateFineError:
                result.skipped_count += 1
                continue
            except asyncio.TimeoutError:
                logger.error(f"Tempo esgotado ao processar empréstimo {loan_id}")
                result.failed_count += 1
                continue
            except Exception as e:
                logger.error(f"Falha ao processar empréstimo {loan_id}: {e}")
                result.failed_count += 1
                continue

            if fine is None:
                result.skipped_count += 1
            else:
                result.processed_count += 1

        logger.info(
            f"Varredura de atrasos: {result.processed_count} multa(s) criada(s) de "
            f"{result.total_overdue} atrasado(s), {result.skipped_count} ignorado(s), "
            f"{result.failed_count} falha(s)"
        )
        return result

    async def _process_loan(self, loan_id: UUID):
        async with self.session_factory() as session:
            service = FineService(session, clock=self.clock, session_factory=self.session_factory)
            return await service.create_overdue_fine(loan_id)
