from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, Optional, Union

from finforecast.frequency import (
    DAYS_PER_MONTH,
    MONTHS_PER_YEAR,
    WEEKS_PER_MONTH,
    Frequency,
    parse_frequency,
    to_monthly,
)

ZERO = Decimal("0")
# Largest amount accepted from user input or stored data.
MAX_AMOUNT = Decimal("1e15")

RawAmount = Union[Decimal, int, float, str, None]


class ForecastValidationError(ValueError):
    """Raised when the inputs of a forecast are rejected before computing."""


class SavingsGoal(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"

    @property
    def rate(self) -> Decimal:
        return SAVINGS_GOAL_RATES[self]


SAVINGS_GOAL_RATES: dict[SavingsGoal, Decimal] = {
    SavingsGoal.LIGHT: Decimal("0.10"),
    SavingsGoal.MODERATE: Decimal("0.20"),
    SavingsGoal.AGGRESSIVE: Decimal("0.30"),
}


@dataclass(frozen=True)
class MoneyAmount:
    amount: RawAmount
    frequency: Frequency


@dataclass(frozen=True)
class ExpenseEntry:
    category: str
    amount: RawAmount
    frequency: Frequency = Frequency.MONTHLY


@dataclass(frozen=True)
class BudgetForecast:
    monthly_income: Decimal
    monthly_expenses: Decimal
    daily_spendable: Decimal
    weekly_spendable: Decimal
    monthly_spendable: Decimal
    monthly_savings: Decimal
    yearly_savings: Decimal

    @property
    def is_overspending(self) -> bool:
        return self.monthly_spendable < ZERO


def calculate_forecast(
    income: MoneyAmount,
    expenses: Iterable[ExpenseEntry],
    goal: SavingsGoal | str,
) -> BudgetForecast:
    """Project spendable and savings figures from income and recurring expenses.

    Every amount is normalized to a monthly figure first. Expense rows whose
    amount is missing, non-numeric or not positive are skipped. A negative
    spendable result is returned as-is; it means the plan overspends.

    Raises ForecastValidationError when the income amount is unusable; nothing
    is computed in that case.
    """
    income_amount = coerce_positive_amount(income.amount)
    if income_amount is None:
        raise ForecastValidationError("Please enter a valid income amount.")
    savings_goal = parse_savings_goal(goal)

    monthly_income = to_monthly(income_amount, parse_frequency(income.frequency))
    monthly_expenses = monthly_expense_total(expenses)
    monthly_savings = monthly_income * savings_goal.rate
    monthly_spendable = monthly_income - monthly_expenses - monthly_savings

    return BudgetForecast(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        daily_spendable=monthly_spendable / DAYS_PER_MONTH,
        weekly_spendable=monthly_spendable / WEEKS_PER_MONTH,
        monthly_spendable=monthly_spendable,
        monthly_savings=monthly_savings,
        yearly_savings=monthly_savings * MONTHS_PER_YEAR,
    )


def monthly_expense_total(expenses: Iterable[ExpenseEntry]) -> Decimal:
    total = ZERO
    for _, monthly in monthly_expense_amounts(expenses):
        total += monthly
    return total


def monthly_expense_amounts(
    expenses: Iterable[ExpenseEntry],
) -> list[tuple[ExpenseEntry, Decimal]]:
    """Pair each usable expense with its monthly amount, in input order."""
    amounts: list[tuple[ExpenseEntry, Decimal]] = []
    for entry in expenses:
        amount = coerce_positive_amount(entry.amount)
        if amount is None:
            continue
        amounts.append((entry, to_monthly(amount, parse_frequency(entry.frequency))))
    return amounts


def coerce_positive_amount(value: RawAmount) -> Optional[Decimal]:
    amount = coerce_amount(value)
    if amount is None or not amount.is_finite() or amount <= ZERO:
        return None
    if amount > MAX_AMOUNT:
        return None
    return amount


def coerce_amount(value: RawAmount) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def parse_savings_goal(value: SavingsGoal | str) -> SavingsGoal:
    if isinstance(value, SavingsGoal):
        return value
    try:
        return SavingsGoal(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError("Savings goal must be light, moderate, or aggressive.") from exc
