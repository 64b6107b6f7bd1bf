"""
Endpoints de Multas (Fine).

Contratos:
    - GET /fines: Lista multas com filtros
    - GET /fines/stats: Estatísticas dos últimos N dias
    - GET /fines/users/{user_id}/summary: Resumo das multas de um usuário
    - GET /fines/loans/{loan_id}/preview: Prévia da multa por atraso
    - POST /fines/loans/{loan_id}/overdue: Gera multa por atraso
    - POST /fines/loans/{loan_id}/lost: Registra perda e gera multa
    - POST /fines/{fine_id}/pay: Registra pagamento
    - POST /fines/{fine_id}/waive: Perdoa multa

Status codes:
    - 200: Sucesso
    - 201: Multa criada
    - 400: Regra de negócio (empréstimo encerrado, multa já paga, ...)
    - 404: Empréstimo, multa ou usuário não encontrado
    - 409: Multa duplicada
    - 503: Configuração indisponível
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.core.deps import DbSession
from app.models.enums import FineStatus, FineType
from app.schemas.base import ErrorResponse, PaginatedResponse
from app.schemas.fine import (
    FineCalculationRead,
    FinePayRequest,
    FineRead,
    FineStatistics,
    FineSummary,
    FineWaiveRequest,
    LostBookFineRequest,
    OverdueFineResult,
)
from app.services.fine import FineService

router = APIRouter(
    prefix="/fines",
    tags=["Fines"],
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=PaginatedResponse[FineRead],
    summary="Listar multas",
)
async def list_fines(
    db: DbSession,
    user_id: UUID | None = Query(None, description="Filtrar por usuário"),
    fine_status: FineStatus | None = Query(None, alias="status", description="Filtrar por status"),
    fine_type: FineType | None = Query(None, alias="type", description="Filtrar por tipo"),
    page: int = Query(1, ge=1, description="Página"),
    page_size: int = Query(20, ge=1, le=100, description="Itens por página"),
) -> PaginatedResponse[FineRead]:
    """Lista multas, mais recentes primeiro."""
    service = FineService(db)
    fines, total = await service.list_fines(
        user_id=user_id,
        status=fine_status,
        fine_type=fine_type,
        page=page,
        page_size=page_size,
    )
    return PaginatedResponse.create(
        items=[FineRead.model_validate(fine) for fine in fines],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/stats",
    response_model=FineStatistics,
    summary="Estatísticas de multas",
)
async def fine_statistics(
    db: DbSession,
    days: int = Query(30, ge=1, le=3650, description="Janela em dias"),
) -> FineStatistics:
    """Contagem e soma por tipo e status das multas criadas na janela."""
    return await FineService(db).get_fine_statistics(days)


@router.get(
    "/users/{user_id}/summary",
    response_model=FineSummary,
    summary="Resumo de multas do usuário",
)
async def user_fine_summary(user_id: UUID, db: DbSession) -> FineSummary:
    return await FineService(db).get_user_fine_summary(user_id)


@router.get(
    "/loans/{loan_id}/preview",
    response_model=FineCalculationRead,
    summary="Prévia da multa por atraso",
    description="Calcula a multa com a política vigente sem gravar nada.",
)
async def preview_overdue_fine(loan_id: UUID, db: DbSession) -> FineCalculationRead:
    calculation = await FineService(db).calculate_overdue_fine(loan_id)
    return FineCalculationRead.from_calculation(loan_id, calculation)


@router.post(
    "/loans/{loan_id}/overdue",
    response_model=OverdueFineResult,
    summary="Gerar multa por atraso",
)
async def create_overdue_fine(loan_id: UUID, db: DbSession) -> OverdueFineResult:
    """
    Gera a multa por atraso de um empréstimo em aberto.

    Dentro da carência nada é criado e `created` vem false.
    """
    fine = await FineService(db).create_overdue_fine(loan_id)
    if fine is None:
        return OverdueFineResult(
            created=False,
            message="Empréstimo ainda dentro da carência; nenhuma multa gerada",
        )
    return OverdueFineResult(
        created=True,
        fine=FineRead.model_validate(fine),
        message="Multa por atraso gerada",
    )


@router.post(
    "/loans/{loan_id}/lost",
    response_model=FineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar perda de livro",
)
async def create_lost_book_fine(
    loan_id: UUID,
    data: LostBookFineRequest,
    db: DbSession,
) -> FineRead:
    """
    Marca o empréstimo como perdido e gera a multa de reposição.

    Valor = custo de reposição (ou preço do livro) * multiplicador configurado.
    """
    fine = await FineService(db).create_lost_book_fine(
        loan_id,
        replacement_cost=data.replacement_cost,
        issued_by=data.issued_by,
    )
    return FineRead.model_validate(fine)


@router.post(
    "/{fine_id}/pay",
    response_model=FineRead,
    summary="Pagar multa",
)
async def pay_fine(fine_id: UUID, data: FinePayRequest, db: DbSession) -> FineRead:
    fine = await FineService(db).pay_fine(
        fine_id,
        paid_by=data.paid_by,
        payment_method=data.payment_method,
        receipt_number=data.receipt_number,
    )
    return FineRead.model_validate(fine)


@router.post(
    "/{fine_id}/waive",
    response_model=FineRead,
    summary="Perdoar multa",
)
async def waive_fine(fine_id: UUID, data: FineWaiveRequest, db: DbSession) -> FineRead:
    fine = await FineService(db).waive_fine(
        fine_id,
        waived_by=data.waived_by,
        reason=data.reason,
    )
    return FineRead.model_validate(fine)
