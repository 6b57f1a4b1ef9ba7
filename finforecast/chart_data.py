from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable

from finforecast.budget_forecast import BudgetForecast, ExpenseEntry, monthly_expense_amounts

ZERO = Decimal("0")
CENT = Decimal("0.01")

CATEGORY_COLORS = (
    "#6366F1",
    "#EC4899",
    "#10B981",
    "#F59E0B",
    "#3B82F6",
    "#8B5CF6",
    "#D946EF",
    "#06B6D4",
    "#EF4444",
    "#84CC16",
    "#71717A",
    "#F97316",
    "#14B8A6",
    "#F43F5E",
    "#22C55E",
)

SAVINGS_LABEL = "Savings"
DISCRETIONARY_LABEL = "Discretionary"


@dataclass(frozen=True)
class BreakdownSlice:
    label: str
    value: Decimal
    color_index: int

    @property
    def color(self) -> str:
        return palette_color(self.color_index)


def to_breakdown(
    expenses: Iterable[ExpenseEntry],
    forecast: BudgetForecast,
) -> list[BreakdownSlice]:
    """Build the pie-chart slices for a forecast.

    One slice per expense category, in the order categories first appear,
    then savings, then discretionary spend when it is positive. Rows sharing
    a category are summed. Overspending yields no discretionary slice.
    """
    totals: dict[str, Decimal] = {}
    for entry, monthly in monthly_expense_amounts(expenses):
        totals[entry.category] = totals.get(entry.category, ZERO) + monthly
    slices = list(totals.items())
    slices.append((SAVINGS_LABEL, forecast.monthly_savings))
    if forecast.monthly_spendable > ZERO:
        slices.append((DISCRETIONARY_LABEL, forecast.monthly_spendable))
    return [
        BreakdownSlice(label=label, value=round_currency(value), color_index=index % len(CATEGORY_COLORS))
        for index, (label, value) in enumerate(slices)
    ]


def palette_color(index: int) -> str:
    return CATEGORY_COLORS[index % len(CATEGORY_COLORS)]


def round_currency(value: Decimal) -> Decimal:
    with localcontext() as context:
        # quantize needs a digit for every place down to the cent.
        context.prec = max(context.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
