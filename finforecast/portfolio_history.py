from __future__ import annotations

import random
from datetime import date, timedelta
from typing import List, Optional

from finforecast.budget_forecast import RawAmount
from finforecast.price_history import PricePoint, coerce_value, to_cents
from finforecast.time_range import TimeRange, range_start

MIN_CHART_POINTS = 2
MIN_FLUCTUATION_BASE = 1000.0
STARTING_MULTIPLIER_RANGE = (0.8, 0.95)
UPWARD_PROBABILITY = 0.51


def generate_portfolio_history(
    current_value: RawAmount,
    time_range: TimeRange | str = TimeRange.ALL,
    *,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[PricePoint]:
    """Synthesize one point per day from the start of ``time_range`` to today.

    The walk starts at 80-95% of ``current_value`` and is pulled onto it on
    the last day. It never crosses zero away from the sign of ``current_value``, and
    the result always has at least two points.
    """
    anchor = coerce_value(current_value)
    today = today or date.today()
    rng = rng or random.Random()
    start_date = range_start(time_range, today)

    anchor_float = float(anchor)
    value = anchor_float * rng.uniform(*STARTING_MULTIPLIER_RANGE)
    fluctuation = (0.001 + rng.random() * 0.005) * max(abs(anchor_float), MIN_FLUCTUATION_BASE)

    history: List[PricePoint] = []
    point_date = start_date
    while point_date <= today:
        if point_date == today:
            history.append(PricePoint(date=point_date, value=anchor))
            break
        direction = 1 if rng.random() < UPWARD_PROBABILITY else -1
        value += direction * fluctuation * (0.5 + rng.random())
        value = _clamp_to_sign(value, anchor_float)
        history.append(PricePoint(date=point_date, value=to_cents(value)))
        point_date += timedelta(days=1)

    if len(history) < MIN_CHART_POINTS:
        wobble = 1 + (rng.random() - 0.5) * 0.02
        previous = _clamp_to_sign(anchor_float * wobble, anchor_float)
        history.insert(
            0,
            PricePoint(date=today - timedelta(days=1), value=to_cents(previous)),
        )
    return history


def _clamp_to_sign(value: float, anchor: float) -> float:
    if anchor >= 0 and value < 0:
        return 0.0
    if anchor < 0 and value > 0:
        return 0.0
    return value
