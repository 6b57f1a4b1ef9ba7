from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from finforecast.budget_forecast import MAX_AMOUNT
from finforecast.holdings import Account, Holding, HoldingType, aggregate_holdings, partition_holdings
from finforecast.portfolio_history import generate_portfolio_history
from finforecast.price_history import PricePoint
from finforecast.range_filter import filter_to_range, is_renderable
from finforecast.time_range import TimeRange, parse_time_range

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

RawSession = Union[str, bytes, Mapping[str, Any], None]


class StoredModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StoredPricePoint(StoredModel):
    date: date
    value: Decimal = Field(ge=-MAX_AMOUNT, le=MAX_AMOUNT)


class StoredHolding(StoredModel):
    id: str | int | None = None
    ticker: str = ""
    name: str = ""
    type: HoldingType
    quantity: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)
    current_price: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT, alias="currentPrice")
    change_percent_today: Decimal | None = Field(
        default=None, ge=-MAX_AMOUNT, le=MAX_AMOUNT, alias="changePercentToday"
    )
    price_history_7d: list[StoredPricePoint] | None = Field(default=None, alias="priceHistory7d")


class StoredAccount(StoredModel):
    id: str | int | None = None
    name: str = ""
    type: str | None = None
    institution: str | None = None
    value: Decimal | None = Field(default=None, ge=-MAX_AMOUNT, le=MAX_AMOUNT)


class StoredInvestments(StoredModel):
    total_value: Decimal | None = Field(
        default=None, ge=-MAX_AMOUNT, le=MAX_AMOUNT, alias="totalValue"
    )
    change_percent: Decimal | None = Field(
        default=None, ge=-MAX_AMOUNT, le=MAX_AMOUNT, alias="changePercent"
    )
    history: list[StoredPricePoint] | None = None
    holdings: list[StoredHolding] | None = None
    accounts: list[StoredAccount] | None = None


class StoredSession(StoredModel):
    investments: StoredInvestments | None = None


@dataclass(frozen=True)
class PortfolioSnapshot:
    total_value: Decimal = ZERO
    change_percent: Decimal = ZERO
    history: Tuple[PricePoint, ...] = field(default_factory=tuple)
    holdings: Tuple[Holding, ...] = field(default_factory=tuple)
    accounts: Tuple[Account, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PortfolioView:
    snapshot: PortfolioSnapshot
    time_range: TimeRange
    filtered_history: Tuple[PricePoint, ...]
    stock_holdings: Tuple[Holding, ...]
    crypto_holdings: Tuple[Holding, ...]


def load_portfolio_snapshot(
    raw: RawSession,
    *,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> PortfolioSnapshot:
    """Build the in-memory portfolio from stored session data.

    Missing data gives the empty snapshot. Data that cannot be parsed or has
    the wrong shape is logged and also gives the empty snapshot; it never
    raises. Holdings get derived values and placeholder price histories, and
    a portfolio history with fewer than two points is synthesized.
    """
    if raw is None:
        return PortfolioSnapshot()
    try:
        session = _parse_session(raw)
    except (ValueError, TypeError) as exc:
        logger.warning("Failed to parse stored investment data: %s", exc)
        return PortfolioSnapshot()

    stored = session.investments
    if stored is None:
        return PortfolioSnapshot()

    rng = rng or random.Random()
    total_value = stored.total_value or ZERO
    history = sorted(
        (_to_price_point(point) for point in stored.history or []),
        key=lambda point: point.date,
    )
    if not is_renderable(history):
        history = generate_portfolio_history(total_value, TimeRange.ALL, today=today, rng=rng)

    holdings = aggregate_holdings(
        (_to_holding(holding) for holding in stored.holdings or []),
        today=today,
        rng=rng,
    )
    return PortfolioSnapshot(
        total_value=total_value,
        change_percent=stored.change_percent or ZERO,
        history=tuple(history),
        holdings=tuple(holdings),
        accounts=tuple(_to_account(account) for account in stored.accounts or []),
    )


def build_portfolio_view(
    snapshot: PortfolioSnapshot,
    time_range: TimeRange | str = TimeRange.ALL,
    *,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> PortfolioView:
    time_range = parse_time_range(time_range)
    equities, crypto = partition_holdings(snapshot.holdings)
    filtered = filter_to_range(
        snapshot.history,
        snapshot.total_value,
        time_range,
        today=today,
        rng=rng,
    )
    return PortfolioView(
        snapshot=snapshot,
        time_range=time_range,
        filtered_history=tuple(filtered),
        stock_holdings=tuple(equities),
        crypto_holdings=tuple(crypto),
    )


def _parse_session(raw: RawSession) -> StoredSession:
    if isinstance(raw, (str, bytes)):
        return StoredSession.model_validate_json(raw)
    if isinstance(raw, Mapping):
        return StoredSession.model_validate(dict(raw))
    raise TypeError(f"Unsupported session data type: {type(raw).__name__}")


def _to_price_point(point: StoredPricePoint) -> PricePoint:
    return PricePoint(date=point.date, value=point.value)


def _to_holding(holding: StoredHolding) -> Holding:
    return Holding(
        id=None if holding.id is None else str(holding.id),
        ticker=holding.ticker.strip().upper(),
        name=holding.name.strip(),
        type=holding.type,
        quantity=holding.quantity or ZERO,
        current_price=holding.current_price or ZERO,
        change_percent_today=holding.change_percent_today or ZERO,
        price_history_7d=tuple(_to_price_point(point) for point in holding.price_history_7d or []),
    )


def _to_account(account: StoredAccount) -> Account:
    return Account(
        id=None if account.id is None else str(account.id),
        name=account.name.strip(),
        type=account.type,
        institution=account.institution,
        value=account.value,
    )
