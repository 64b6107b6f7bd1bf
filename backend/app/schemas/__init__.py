"""
Schemas Pydantic da aplicação.
"""

from app.schemas.base import (
    BaseSchema,
    ErrorResponse,
    PaginatedResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.config import (
    FineConfigRead,
    FineConfigUpdate,
    FineConfigUpdateRequest,
    SystemConfigRead,
)
from app.schemas.fine import (
    BalanceReconciliation,
    FineCalculationRead,
    FinePayRequest,
    FineRead,
    FineStatistics,
    FineStatisticsBucket,
    FineStatisticsTotal,
    FineSummary,
    FineWaiveRequest,
    LostBookFineRequest,
    OverdueFineResult,
)
from app.schemas.system import RequeueResult, SweepResultRead

__all__ = [
    # Base
    "BaseSchema",
    "ErrorResponse",
    "PaginatedResponse",
    # Health
    "HealthResponse",
    # Config
    "FineConfigRead",
    "FineConfigUpdate",
    "FineConfigUpdateRequest",
    "SystemConfigRead",
    # Fine
    "BalanceReconciliation",
    "FineCalculationRead",
    "FinePayRequest",
    "FineRead",
    "FineStatistics",
    "FineStatisticsBucket",
    "FineStatisticsTotal",
    "FineSummary",
    "FineWaiveRequest",
    "LostBookFineRequest",
    "OverdueFineResult",
    # System
    "RequeueResult",
    "SweepResultRead",
]
