from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from finforecast.price_history import DEFAULT_HISTORY_DAYS, PricePoint, generate_price_history
from finforecast.range_filter import is_renderable

ZERO = Decimal("0")


class HoldingType(str, Enum):
    STOCK = "stock"
    ETF = "etf"
    CRYPTO = "crypto"


EQUITY_TYPES = {HoldingType.STOCK, HoldingType.ETF}


@dataclass(frozen=True)
class Holding:
    ticker: str
    name: str
    type: HoldingType
    quantity: Decimal = ZERO
    current_price: Decimal = ZERO
    change_percent_today: Decimal = ZERO
    price_history_7d: Tuple[PricePoint, ...] = field(default_factory=tuple)
    id: Optional[str] = None

    @property
    def value(self) -> Decimal:
        return self.quantity * self.current_price

    @property
    def change_amount_today(self) -> Decimal:
        return self.current_price * self.change_percent_today / Decimal("100")


@dataclass(frozen=True)
class Account:
    name: str
    type: Optional[str] = None
    institution: Optional[str] = None
    value: Optional[Decimal] = None
    id: Optional[str] = None


def aggregate_holdings(
    holdings: Iterable[Holding],
    *,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[Holding]:
    """Fill in missing 7-day price histories and order holdings by value, largest first."""
    rng = rng or random.Random()
    prepared = [_with_price_history(holding, today, rng) for holding in holdings]
    prepared.sort(key=lambda holding: holding.value, reverse=True)
    return prepared


def partition_holdings(holdings: Iterable[Holding]) -> Tuple[List[Holding], List[Holding]]:
    """Split holdings into (stocks and ETFs, crypto), keeping their order."""
    holdings = list(holdings)
    equities = [holding for holding in holdings if holding.type in EQUITY_TYPES]
    crypto = [holding for holding in holdings if holding.type is HoldingType.CRYPTO]
    return equities, crypto


def parse_holding_type(value: HoldingType | str) -> HoldingType:
    if isinstance(value, HoldingType):
        return value
    try:
        return HoldingType(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError("Holding type must be stock, etf, or crypto.") from exc


def _with_price_history(
    holding: Holding,
    today: Optional[date],
    rng: random.Random,
) -> Holding:
    if is_renderable(holding.price_history_7d):
        return holding
    history = generate_price_history(
        holding.current_price,
        DEFAULT_HISTORY_DAYS,
        today=today,
        rng=rng,
    )
    return replace(holding, price_history_7d=tuple(history))
