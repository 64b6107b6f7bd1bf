"""
Módulo de repositórios - acesso a dados.
"""

from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.loan import LoanRepository
from app.repositories.fine import FineRepository
from app.repositories.system_config import SystemConfigRepository
from app.repositories.notification import NotificationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "LoanRepository",
    "FineRepository",
    "SystemConfigRepository",
    "NotificationRepository",
]
