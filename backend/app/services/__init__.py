"""
Módulo de serviços - lógica de negócio.
"""

from app.services.config import ConfigService
from app.services.fine import FineService
from app.services.notification import NotificationService
from app.services.overdue_sweep import OverdueSweepService, SweepResult

__all__ = [
    "ConfigService",
    "FineService",
    "NotificationService",
    "OverdueSweepService",
    "SweepResult",
]
