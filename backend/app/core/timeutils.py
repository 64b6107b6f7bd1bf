"""
Utilitários de data/hora.

Todas as datas persistidas são UTC com timezone. Valores lidos sem tzinfo
(ex.: drivers que descartam o fuso) são tratados como UTC.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Data/hora atual em UTC (aware)."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normaliza um datetime para UTC aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
