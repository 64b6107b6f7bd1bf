"""
Endpoints de Sistema.

Contratos:
    - POST /system/process-overdue-fines: Executa a varredura de atrasos agora
    - POST /system/reconcile-balances: Recalcula fine_balance dos usuários
    - POST /system/requeue-notifications: Reenfileira notificações pendentes

Status codes:
    - 200: Sucesso
"""

from fastapi import APIRouter, Query

from app.core.deps import DbSession
from app.schemas.fine import BalanceReconciliation
from app.schemas.system import RequeueResult, SweepResultRead
from app.services.fine import FineService
from app.services.notification import NotificationService
from app.services.overdue_sweep import OverdueSweepService

router = APIRouter(prefix="/system", tags=["System"])


@router.post(
    "/process-overdue-fines",
    response_model=SweepResultRead,
    summary="Processar multas por atraso",
    description="Gera multa por atraso para todos os empréstimos vencidos sem multa.",
)
async def process_overdue_fines() -> SweepResultRead:
    """
    Executa a mesma varredura do job periódico.

    Cada empréstimo usa sua própria sessão, por isso o endpoint não recebe
    a sessão da requisição.
    """
    result = await OverdueSweepService().process_overdue_fines()
    return SweepResultRead(
        **result.to_dict(),
        message=f"{result.processed_count} multa(s) gerada(s)",
    )


@router.post(
    "/reconcile-balances",
    response_model=BalanceReconciliation,
    summary="Reconciliar saldos de multa",
)
async def reconcile_balances(db: DbSession) -> BalanceReconciliation:
    """Iguala fine_balance de cada usuário à soma das suas multas pendentes."""
    return await FineService(db).reconcile_all_balances()


@router.post(
    "/requeue-notifications",
    response_model=RequeueResult,
    summary="Reenfileirar notificações pendentes",
)
async def requeue_notifications(
    db: DbSession,
    limit: int = Query(100, ge=1, le=1000),
) -> RequeueResult:
    requeued = await NotificationService(db).requeue_pending(limit=limit)
    return RequeueResult(requeued=requeued)
