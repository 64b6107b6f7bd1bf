"""
Schemas Pydantic para os endpoints de sistema.
"""

from pydantic import BaseModel


class SweepResultRead(BaseModel):
    """Contagens de uma execução da varredura de atrasos."""

    processed_count: int
    total_overdue: int
    skipped_count: int
    failed_count: int
    cancelled: bool = False
    message: str


class RequeueResult(BaseModel):
    """Notificações pendentes enviadas novamente para a fila."""

    requeued: int
