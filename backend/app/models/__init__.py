"""
Models SQLAlchemy da aplicação.

Importar todos os models aqui para que o metadata conheça todas as tabelas.
"""

from app.models.enums import (
    ConfigCategory,
    ConfigDataType,
    FineStatus,
    FineType,
    LoanStatus,
    LoanType,
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    PaymentMethod,
    RateType,
)
from app.models.user import User
from app.models.book import Book
from app.models.loan import Loan
from app.models.fine import Fine
from app.models.system_config import SystemConfig
from app.models.notification import Notification

__all__ = [
    "ConfigCategory",
    "ConfigDataType",
    "FineStatus",
    "FineType",
    "LoanStatus",
    "LoanType",
    "NotificationChannel",
    "NotificationPriority",
    "NotificationStatus",
    "NotificationType",
    "PaymentMethod",
    "RateType",
    "User",
    "Book",
    "Loan",
    "Fine",
    "SystemConfig",
    "Notification",
]
