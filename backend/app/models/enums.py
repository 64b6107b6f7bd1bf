"""
Enums utilizados nos models da aplicação.
"""

import enum


class LoanType(str, enum.Enum):
    """
    Tipo (fase do ciclo de vida) de um empréstimo.

    Fluxo típico:
        RESERVATION -> BORROWED -> RETURNED
        BORROWED -> OVERDUE -> RETURNED
        BORROWED/OVERDUE -> LOST
    """
    RESERVATION = "reservation"
    BORROWED = "borrowed"
    RETURNED = "returned"
    OVERDUE = "overdue"
    LOST = "lost"


class LoanStatus(str, enum.Enum):
    """Status de um empréstimo."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


class FineType(str, enum.Enum):
    """Motivo da multa."""
    OVERDUE = "overdue"
    LOST = "lost"
    DAMAGED = "damaged"
    RESERVATION_EXPIRED = "reservation_expired"


class FineStatus(str, enum.Enum):
    """
    Status de uma multa.

    Fluxo:
        PENDING -> PAID (pagamento registrado pela equipe)
        PENDING -> WAIVED (perdão com motivo)
        PENDING -> CANCELLED
    Nenhuma transição volta para PENDING.
    """
    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"
    CANCELLED = "cancelled"


class RateType(str, enum.Enum):
    """Forma de cálculo do valor da multa."""
    PER_HOUR = "per_hour"
    PER_DAY = "per_day"
    FIXED = "fixed"


class PaymentMethod(str, enum.Enum):
    """Meios de pagamento aceitos no balcão."""
    CASH = "cash"
    MPESA = "mpesa"
    BANK = "bank"


class ConfigCategory(str, enum.Enum):
    """Categoria de uma chave de configuração do sistema."""
    FINES = "fines"
    NOTIFICATIONS = "notifications"
    BORROWING = "borrowing"
    SYSTEM = "system"
    SMS = "sms"
    EMAIL = "email"


class ConfigDataType(str, enum.Enum):
    """Tipo do valor armazenado em uma configuração."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class NotificationType(str, enum.Enum):
    """Tipos de notificação enviados aos usuários."""
    DUE_DATE_REMINDER = "due_date_reminder"
    OVERDUE_NOTICE = "overdue_notice"
    RESERVATION_READY = "reservation_ready"
    RESERVATION_EXPIRED = "reservation_expired"
    FINE_NOTICE = "fine_notice"
    ACCOUNT_APPROVED = "account_approved"
    ACCOUNT_SUSPENDED = "account_suspended"
    BOOK_RETURNED = "book_returned"
    FINE_PAID = "fine_paid"
    FINE_WAIVED = "fine_waived"


class NotificationChannel(str, enum.Enum):
    """Canais de entrega."""
    SMS = "sms"
    EMAIL = "email"
    IN_APP = "in_app"


class NotificationStatus(str, enum.Enum):
    """Status de entrega de uma notificação."""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    DELIVERED = "delivered"


class NotificationPriority(str, enum.Enum):
    """Prioridade de uma notificação."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
