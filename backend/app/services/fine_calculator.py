"""
Cálculo de multas (funções puras, sem I/O).

Regras:
    - Carência (dias): enquanto dias_atraso <= carência, não há multa
    - per_day: (dias_atraso - carência) * taxa_diária
    - per_hour: (horas_atraso - carência*24) * taxa_horária
    - Valor limitado a [0, teto] e arredondado para 2 casas

Dias e horas de atraso são calculados de forma independente a partir de
(now - due_date), ambos truncados. Perto da virada do dia isso faz com que a
carência seja avaliada em dias mesmo quando a taxa é por hora: 71h de atraso
com carência de 2 dias contam como 2 dias e não geram multa, embora
71h - 48h = 23h. Esse comportamento é intencional e coberto por testes.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from app.core.timeutils import as_utc
from app.models.enums import RateType

CENT = Decimal("0.01")
SECONDS_PER_HOUR = 3600


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Converte para Decimal com 2 casas (arredondamento comercial)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FinePolicy:
    """
    Política de multas vigente.

    Lida do armazenamento de configuração a cada cálculo; os valores padrão
    são usados quando a configuração não existe.
    """

    grace_period_days: int = 2
    daily_rate: Decimal = Decimal("50")
    hourly_rate: Decimal = Decimal("5")
    max_fine: Decimal = Decimal("2000")
    rate_type: RateType = RateType.PER_DAY
    lost_book_multiplier: Decimal = Decimal("2")

    @classmethod
    def defaults(cls) -> "FinePolicy":
        return cls()


@dataclass(frozen=True)
class FineCalculation:
    """Resultado de um cálculo de multa por atraso."""

    fine_amount: Decimal
    overdue_days: int
    grace_period_used: bool
    rate_type: RateType
    daily_rate: Decimal
    hourly_rate: Decimal
    overdue_hours: int = 0

    @property
    def rate(self) -> Decimal:
        """Taxa efetivamente aplicada."""
        if self.rate_type == RateType.PER_HOUR:
            return self.hourly_rate
        return self.daily_rate

    @property
    def has_fine(self) -> bool:
        return self.fine_amount > 0

    def to_dict(self) -> dict:
        return asdict(self)


def overdue_days_between(due_date: datetime, now: datetime) -> int:
    """Dias inteiros de atraso (truncado em direção a zero)."""
    seconds = (as_utc(now) - as_utc(due_date)).total_seconds()
    return int(seconds / 86400)


def overdue_hours_between(due_date: datetime, now: datetime) -> int:
    """Horas inteiras de atraso (truncado em direção a zero)."""
    seconds = (as_utc(now) - as_utc(due_date)).total_seconds()
    return int(seconds / SECONDS_PER_HOUR)


def calculate_overdue_fine(
    due_date: datetime,
    now: datetime,
    policy: FinePolicy,
) -> FineCalculation:
    """
    Calcula a multa por atraso de um empréstimo.

    Args:
        due_date: Data de devolução prevista
        now: Momento da avaliação
        policy: Política vigente (carência, taxas, teto)

    Returns:
        FineCalculation. Dentro da carência, fine_amount=0 e
        grace_period_used=True, independentemente do tipo de taxa.
    """
    overdue_days = overdue_days_between(due_date, now)
    overdue_hours = overdue_hours_between(due_date, now)

    if overdue_days <= policy.grace_period_days:
        return FineCalculation(
            fine_amount=Decimal("0.00"),
            overdue_days=overdue_days,
            grace_period_used=True,
            rate_type=policy.rate_type,
            daily_rate=policy.daily_rate,
            hourly_rate=policy.hourly_rate,
            overdue_hours=overdue_hours,
        )

    if policy.rate_type == RateType.PER_HOUR:
        billable_hours = max(0, overdue_hours - policy.grace_period_days * 24)
        raw_amount = Decimal(billable_hours) * policy.hourly_rate
    else:
        billable_days = max(0, overdue_days - policy.grace_period_days)
        raw_amount = Decimal(billable_days) * policy.daily_rate

    capped = min(max(raw_amount, Decimal("0")), policy.max_fine)

    return FineCalculation(
        fine_amount=to_money(capped),
        overdue_days=overdue_days,
        grace_period_used=False,
        rate_type=policy.rate_type,
        daily_rate=policy.daily_rate,
        hourly_rate=policy.hourly_rate,
        overdue_hours=overdue_hours,
    )


def calculate_lost_book_fine(book_value: Decimal, policy: FinePolicy) -> Decimal:
    """Multa por perda: valor do livro * multiplicador."""
    return to_money(Decimal(book_value) * policy.lost_book_multiplier)
