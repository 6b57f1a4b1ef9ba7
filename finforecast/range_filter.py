from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from finforecast.budget_forecast import RawAmount
from finforecast.portfolio_history import MIN_CHART_POINTS, generate_portfolio_history
from finforecast.price_history import PricePoint
from finforecast.time_range import TimeRange, parse_time_range, range_start

SYNTHETIC_MARKDOWN = Decimal("0.98")

RecoveryStrategy = Callable[[Sequence[PricePoint], List[PricePoint], date], List[PricePoint]]


def filter_to_range(
    history: Sequence[PricePoint],
    total_value: RawAmount,
    time_range: TimeRange | str,
    *,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[PricePoint]:
    """Cut a stored portfolio history down to the points shown for ``time_range``.

    ``ALL`` keeps the history as stored. Narrower windows that leave fewer
    than two points are topped up by ``RECOVERY_STRATEGIES`` in order, and
    as a last resort the whole window is synthesized around ``total_value``.
    """
    time_range = parse_time_range(time_range)
    today = today or date.today()
    points = list(history)
    if not points:
        return generate_portfolio_history(total_value, time_range, today=today, rng=rng)
    if time_range is TimeRange.ALL:
        return points

    cutoff = range_start(time_range, today)
    retained = [point for point in points if point.date >= cutoff]
    for strategy in RECOVERY_STRATEGIES:
        if is_renderable(retained):
            break
        retained = strategy(points, retained, cutoff)

    if is_renderable(retained):
        return retained
    return generate_portfolio_history(total_value, time_range, today=today, rng=rng)


def is_renderable(points: Sequence[PricePoint]) -> bool:
    return len(points) >= MIN_CHART_POINTS


def prepend_predecessor(
    history: Sequence[PricePoint],
    retained: List[PricePoint],
    cutoff: date,
) -> List[PricePoint]:
    """Anchor the window on the last stored point before ``cutoff``."""
    predecessor = next((point for point in reversed(history) if point.date < cutoff), None)
    if predecessor is None:
        return retained
    return [predecessor, *retained]


def prepend_markdown_point(
    history: Sequence[PricePoint],
    retained: List[PricePoint],
    cutoff: date,
) -> List[PricePoint]:
    """Prepend a point 2% below the first retained one.

    It is dated at ``cutoff``, or the day before the first point when that
    point is not after the cutoff, so dates stay in order.
    """
    if not retained:
        return retained
    first = retained[0]
    point_date = cutoff if cutoff < first.date else first.date - timedelta(days=1)
    synthetic = PricePoint(date=point_date, value=first.value * SYNTHETIC_MARKDOWN)
    return [synthetic, *retained]


RECOVERY_STRATEGIES: tuple[RecoveryStrategy, ...] = (
    prepend_predecessor,
    prepend_markdown_point,
)
