"""
Schemas Pydantic para Fine (multa).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.enums import FineStatus, FineType, PaymentMethod, RateType
from app.schemas.base import BaseSchema


class FineRead(BaseSchema):
    """Schema de leitura de multa."""

    id: UUID
    user_id: UUID
    loan_id: UUID
    amount: Decimal
    base_amount: Decimal
    type: FineType
    status: FineStatus
    rate_type: RateType
    rate: Decimal
    grace_period: int
    overdue_days: int
    book_value: Decimal
    replacement_cost: Decimal
    due_date: datetime
    paid_at: datetime | None = None
    paid_by_id: UUID | None = None
    payment_method: PaymentMethod | None = None
    receipt_number: str | None = None
    waived_at: datetime | None = None
    waived_by_id: UUID | None = None
    waiver_reason: str | None = None
    created_at: datetime | None = None


class FineCalculationRead(BaseModel):
    """Prévia do cálculo de multa por atraso (nada é gravado)."""

    loan_id: UUID
    fine_amount: Decimal
    overdue_days: int
    overdue_hours: int
    grace_period_used: bool
    rate_type: RateType
    daily_rate: Decimal
    hourly_rate: Decimal

    @classmethod
    def from_calculation(cls, loan_id: UUID, calculation) -> "FineCalculationRead":
        return cls(loan_id=loan_id, **calculation.to_dict())


class OverdueFineResult(BaseModel):
    """Resultado de create_overdue_fine: a multa ou o motivo de não existir."""

    created: bool
    fine: FineRead | None = None
    message: str


class LostBookFineRequest(BaseSchema):
    """Corpo do registro de perda de livro."""

    replacement_cost: Decimal | None = Field(
        None,
        gt=0,
        description="Custo de reposição. Se omitido, usa o preço do livro.",
    )
    issued_by: UUID | None = None


class FinePayRequest(BaseSchema):
    """Corpo do pagamento de multa."""

    paid_by: UUID = Field(..., description="Funcionário que recebeu o pagamento")
    payment_method: PaymentMethod = PaymentMethod.CASH
    receipt_number: str | None = Field(None, max_length=64)


class FineWaiveRequest(BaseSchema):
    """Corpo do perdão de multa."""

    waived_by: UUID = Field(..., description="Funcionário que autorizou o perdão")
    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        """Motivo do perdão é obrigatório."""
        v = v.strip()
        if not v:
            raise ValueError("Motivo do perdão é obrigatório")
        return v


class FineSummary(BaseModel):
    """
    Resumo das multas de um usuário.

    Attributes:
        total_fines: Soma de todas as multas
        paid_fines / pending_fines / waived_fines: Soma por status
        overdue_fines: Soma das pendentes com prazo de quitação vencido
        overdue_fine_ids: IDs das pendentes vencidas
        fine_balance: Saldo armazenado no usuário (deve igualar pending_fines)
    """

    user_id: UUID
    total_fines: Decimal = Decimal("0.00")
    paid_fines: Decimal = Decimal("0.00")
    pending_fines: Decimal = Decimal("0.00")
    waived_fines: Decimal = Decimal("0.00")
    overdue_fines: Decimal = Decimal("0.00")
    overdue_fine_ids: list[UUID] = Field(default_factory=list)
    fine_balance: Decimal | None = None
    fines: list[FineRead] = Field(default_factory=list)


class FineStatisticsBucket(BaseModel):
    """Contagem e soma de multas por (tipo, status)."""

    type: FineType
    status: FineStatus
    count: int
    total_amount: Decimal


class FineStatisticsTotal(BaseModel):
    """Totais da janela."""

    count: int = 0
    total_amount: Decimal = Decimal("0.00")
    average_amount: Decimal = Decimal("0.00")


class FineStatistics(BaseModel):
    """Estatísticas de multas criadas nos últimos `days` dias."""

    days: int
    since: datetime
    breakdown: list[FineStatisticsBucket]
    total: FineStatisticsTotal


class BalanceReconciliation(BaseModel):
    """Resultado da reconciliação de saldos."""

    users_checked: int
    users_corrected: int
    corrections: dict[UUID, Decimal] = Field(
        default_factory=dict,
        description="user_id -> saldo corrigido",
    )
