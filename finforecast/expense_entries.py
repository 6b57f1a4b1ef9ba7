from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from finforecast.budget_forecast import ExpenseEntry, RawAmount
from finforecast.frequency import Frequency, parse_frequency

_UNSET = object()


def add_expense(
    entries: Sequence[ExpenseEntry],
    category: str,
    amount: RawAmount = None,
    frequency: Frequency | str = Frequency.MONTHLY,
) -> list[ExpenseEntry]:
    normalized_category = _validate_category(category)
    return [
        *entries,
        ExpenseEntry(
            category=normalized_category,
            amount=amount,
            frequency=parse_frequency(frequency),
        ),
    ]


def update_expense(
    entries: Sequence[ExpenseEntry],
    index: int,
    *,
    category: str | object = _UNSET,
    amount: RawAmount | object = _UNSET,
    frequency: Frequency | str | object = _UNSET,
) -> list[ExpenseEntry]:
    """Return a copy of ``entries`` with one row edited.

    Amounts are stored as typed; an unusable amount keeps the row in the list
    and only excludes it from totals.
    """
    _check_index(entries, index)
    changes: dict[str, object] = {}
    if category is not _UNSET:
        changes["category"] = _validate_category(category)
    if amount is not _UNSET:
        changes["amount"] = amount
    if frequency is not _UNSET:
        changes["frequency"] = parse_frequency(frequency)
    updated = list(entries)
    updated[index] = replace(updated[index], **changes)
    return updated


def remove_expense(entries: Sequence[ExpenseEntry], index: int) -> list[ExpenseEntry]:
    _check_index(entries, index)
    return [entry for position, entry in enumerate(entries) if position != index]


def _validate_category(category: object) -> str:
    normalized = str(category).strip() if category is not None else ""
    if not normalized:
        raise ValueError("Expense category required.")
    return normalized


def _check_index(entries: Sequence[ExpenseEntry], index: int) -> None:
    if not 0 <= index < len(entries):
        raise IndexError(f"No expense entry at position {index}.")
