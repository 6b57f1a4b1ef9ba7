from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from finforecast.budget_forecast import RawAmount
from finforecast.chart_data import round_currency

ZERO = Decimal("0")
DEFAULT_HISTORY_DAYS = 7
DEFAULT_VOLATILITY = 0.03
# Share of the spread used to seed the first value.
START_SPREAD_FACTOR = 0.2
# Centre of the per-step draw; below 0.5 tilts the walk upward.
STEP_CENTRE = 0.49


@dataclass(frozen=True)
class PricePoint:
    date: date
    value: Decimal


def generate_price_history(
    current_value: RawAmount,
    days: int = DEFAULT_HISTORY_DAYS,
    volatility: float = DEFAULT_VOLATILITY,
    *,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[PricePoint]:
    """Synthesize a daily price series ending today at ``current_value``.

    The series is a placeholder for charts when no real history exists: a
    multiplicative random walk with a slight upward drift, floored at zero.
    Only the final point is meaningful; it always equals ``current_value``.
    """
    anchor = coerce_value(current_value)
    if anchor < ZERO:
        raise ValueError("current_value must be zero or greater.")
    if days < 1:
        raise ValueError("days must be at least 1.")
    if not 0 < volatility < 1:
        raise ValueError("volatility must be between 0 and 1.")
    today = today or date.today()
    rng = rng or random.Random()

    spread = volatility * days * START_SPREAD_FACTOR
    value = max(0.0, float(anchor) * (1 - (rng.random() - 0.5) * spread))

    history: List[PricePoint] = []
    for offset in range(days - 1, -1, -1):
        point_date = today - timedelta(days=offset)
        if offset == 0:
            history.append(PricePoint(date=point_date, value=anchor))
            continue
        change = (rng.random() - STEP_CENTRE) * volatility * 2
        value = max(0.0, value * (1 + change))
        history.append(PricePoint(date=point_date, value=to_cents(value)))
    return history


def to_cents(value: float) -> Decimal:
    return round_currency(Decimal(str(value)))


def coerce_value(value: RawAmount) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
