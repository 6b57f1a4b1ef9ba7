from __future__ import annotations

from decimal import Decimal
from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Fixed approximations of a 365.25-day year; no calendar math.
MONTHLY_MULTIPLIERS: dict[Frequency, Decimal] = {
    Frequency.DAILY: Decimal("30"),
    Frequency.WEEKLY: Decimal("4.345"),
    Frequency.BIWEEKLY: Decimal("2.1725"),
    Frequency.MONTHLY: Decimal("1"),
}
MONTHS_PER_YEAR = Decimal("12")
DAYS_PER_MONTH = MONTHLY_MULTIPLIERS[Frequency.DAILY]
WEEKS_PER_MONTH = MONTHLY_MULTIPLIERS[Frequency.WEEKLY]


def to_monthly(amount: Decimal, frequency: Frequency) -> Decimal:
    """Convert an amount paid at ``frequency`` to its monthly equivalent.

    No rounding is applied here.
    """
    frequency = parse_frequency(frequency)
    amount = _coerce_amount(amount)
    if frequency is Frequency.YEARLY:
        return amount / MONTHS_PER_YEAR
    return amount * MONTHLY_MULTIPLIERS[frequency]


def parse_frequency(value: Frequency | str) -> Frequency:
    if isinstance(value, Frequency):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported frequency: {value!r}")
    normalized = _normalize_frequency(value)
    if normalized == "byweekly":
        normalized = "biweekly"
    try:
        return Frequency(normalized)
    except ValueError as exc:
        raise ValueError(
            "Only daily, weekly, biweekly, monthly, or yearly amounts are supported."
        ) from exc


def _normalize_frequency(value: str) -> str:
    return "".join(ch for ch in value.strip().lower() if ch.isalnum())


def _coerce_amount(amount: Decimal) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
