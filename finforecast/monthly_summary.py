from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from finforecast.budget_forecast import RawAmount, coerce_amount
from finforecast.chart_data import CATEGORY_COLORS, BreakdownSlice, round_currency

ZERO = Decimal("0")
UNCATEGORIZED = "Uncategorized"
RECOMMENDED_SAVINGS_RATE = Decimal("0.20")


@dataclass(frozen=True)
class LedgerItem:
    """A dated income item or transaction; expenses carry a negative amount."""

    amount: RawAmount
    date: Union[date, str, None]
    category: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class MonthlySummary:
    month: str
    income: Decimal
    expenses: Decimal
    savings: Decimal

    @property
    def savings_rate(self) -> Decimal:
        if self.income <= ZERO:
            return ZERO
        return self.savings / self.income * Decimal("100")


@dataclass(frozen=True)
class SavingsRecommendation:
    rate: Decimal
    target_amount: Decimal


def monthly_summary_history(
    transactions: Iterable[LedgerItem],
    income: Iterable[LedgerItem],
) -> List[MonthlySummary]:
    totals: dict[str, dict[str, Decimal]] = {}
    tagged = [(item, "expenses") for item in transactions]
    tagged.extend((item, "income") for item in income)
    for item, kind in tagged:
        amount = coerce_amount(item.amount)
        item_date = _coerce_date(item.date)
        if amount is None or not amount.is_finite() or amount == ZERO or item_date is None:
            continue
        entry = totals.setdefault(month_key(item_date), {"income": ZERO, "expenses": ZERO})
        if kind == "income":
            entry["income"] += amount
        else:
            entry["expenses"] += abs(amount)

    return [
        MonthlySummary(
            month=month,
            income=entry["income"],
            expenses=entry["expenses"],
            savings=entry["income"] - entry["expenses"],
        )
        for month, entry in sorted(totals.items())
    ]


def category_breakdown(
    transactions: Iterable[LedgerItem],
    month: Optional[str] = None,
) -> List[BreakdownSlice]:
    """Total spending per category, largest first.

    Only negative (expense) amounts count. ``month`` is a ``YYYY-MM`` key.
    """
    totals: dict[str, Decimal] = {}
    for txn in transactions:
        amount = coerce_amount(txn.amount)
        if amount is None or not amount.is_finite() or amount >= ZERO:
            continue
        if month is not None:
            txn_date = _coerce_date(txn.date)
            if txn_date is None or month_key(txn_date) != month:
                continue
        category = (txn.category or "").strip() or UNCATEGORIZED
        totals[category] = totals.get(category, ZERO) + abs(amount)

    slices = [
        BreakdownSlice(label=category, value=round_currency(total), color_index=index % len(CATEGORY_COLORS))
        for index, (category, total) in enumerate(totals.items())
    ]
    slices.sort(key=lambda item: item.value, reverse=True)
    return slices


def savings_recommendation(monthly_income: Decimal) -> Optional[SavingsRecommendation]:
    if monthly_income <= ZERO:
        return None
    return SavingsRecommendation(
        rate=RECOMMENDED_SAVINGS_RATE,
        target_amount=monthly_income * RECOMMENDED_SAVINGS_RATE,
    )


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def _coerce_date(value: Union[date, str, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None
