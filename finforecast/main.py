import os
import random
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from finforecast.budget_forecast import (
    MAX_AMOUNT,
    BudgetForecast,
    ExpenseEntry,
    MoneyAmount,
    calculate_forecast,
    parse_savings_goal,
)
from finforecast.chart_data import BreakdownSlice, round_currency, to_breakdown
from finforecast.expense_entries import add_expense
from finforecast.frequency import parse_frequency
from finforecast.holdings import Account, Holding
from finforecast.monthly_summary import (
    LedgerItem,
    category_breakdown,
    monthly_summary_history,
    savings_recommendation,
)
from finforecast.portfolio_history import generate_portfolio_history
from finforecast.price_history import (
    DEFAULT_HISTORY_DAYS,
    DEFAULT_VOLATILITY,
    PricePoint,
    generate_price_history,
)
from finforecast.session_data import build_portfolio_view, load_portfolio_snapshot
from finforecast.time_range import parse_time_range

app = FastAPI()

frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_random_source() -> random.Random:
    raw_seed = os.getenv("FINFORECAST_RANDOM_SEED")
    if raw_seed is None or not raw_seed.strip():
        return random.Random()
    try:
        return random.Random(int(raw_seed))
    except ValueError:
        return random.Random(raw_seed)


class MoneyAmountPayload(BaseModel):
    amount: Decimal | str | None = None
    frequency: str = "monthly"


class ExpensePayload(BaseModel):
    category: str
    amount: Decimal | str | None = None
    frequency: str = "monthly"


class ForecastPayload(BaseModel):
    income: MoneyAmountPayload
    expenses: list[ExpensePayload] = []
    goal: str = "moderate"

    @classmethod
    def validate_payload(
        cls, payload: "ForecastPayload"
    ) -> tuple[MoneyAmount, list[ExpenseEntry]]:
        income = MoneyAmount(
            amount=payload.income.amount,
            frequency=parse_frequency(payload.income.frequency),
        )
        expenses: list[ExpenseEntry] = []
        for expense in payload.expenses:
            expenses = add_expense(
                expenses, expense.category, expense.amount, expense.frequency
            )
        return income, expenses


class BreakdownSliceResponse(BaseModel):
    label: str
    value: Decimal
    color_index: int
    color: str


class ForecastResponse(BaseModel):
    monthly_income: Decimal
    monthly_expenses: Decimal
    daily_spendable: Decimal
    weekly_spendable: Decimal
    monthly_spendable: Decimal
    monthly_savings: Decimal
    yearly_savings: Decimal
    is_overspending: bool
    breakdown: list[BreakdownSliceResponse]


class LedgerItemPayload(BaseModel):
    amount: Decimal | str | None = None
    date: date | str | None = None
    category: str | None = None
    title: str | None = None


class MonthlySummaryPayload(BaseModel):
    income: list[LedgerItemPayload] = []
    transactions: list[LedgerItemPayload] = []
    month: str | None = None


class MonthlySummaryEntry(BaseModel):
    month: str
    income: Decimal
    expenses: Decimal
    savings: Decimal
    savings_rate: Decimal


class SavingsRecommendationResponse(BaseModel):
    rate: Decimal
    target_amount: Decimal


class MonthlySummaryResponse(BaseModel):
    history: list[MonthlySummaryEntry]
    category_breakdown: list[BreakdownSliceResponse]
    savings_recommendation: SavingsRecommendationResponse | None = None


class PricePointResponse(BaseModel):
    date: date
    value: Decimal


class HoldingResponse(BaseModel):
    id: str | None = None
    ticker: str
    name: str
    type: str
    quantity: Decimal
    current_price: Decimal
    value: Decimal
    change_percent_today: Decimal
    change_amount_today: Decimal
    price_history_7d: list[PricePointResponse]


class AccountResponse(BaseModel):
    id: str | None = None
    name: str
    type: str | None = None
    institution: str | None = None
    value: Decimal | None = None


class PortfolioResponse(BaseModel):
    total_value: Decimal
    change_percent: Decimal
    time_range: str
    history: list[PricePointResponse]
    filtered_history: list[PricePointResponse]
    holdings: list[HoldingResponse]
    stock_holdings: list[HoldingResponse]
    crypto_holdings: list[HoldingResponse]
    accounts: list[AccountResponse]


def to_slice_response(item: BreakdownSlice) -> BreakdownSliceResponse:
    return BreakdownSliceResponse(
        label=item.label,
        value=item.value,
        color_index=item.color_index,
        color=item.color,
    )


def to_forecast_response(
    forecast: BudgetForecast, breakdown: list[BreakdownSlice]
) -> ForecastResponse:
    return ForecastResponse(
        monthly_income=round_currency(forecast.monthly_income),
        monthly_expenses=round_currency(forecast.monthly_expenses),
        daily_spendable=round_currency(forecast.daily_spendable),
        weekly_spendable=round_currency(forecast.weekly_spendable),
        monthly_spendable=round_currency(forecast.monthly_spendable),
        monthly_savings=round_currency(forecast.monthly_savings),
        yearly_savings=round_currency(forecast.yearly_savings),
        is_overspending=forecast.is_overspending,
        breakdown=[to_slice_response(item) for item in breakdown],
    )


def to_point_responses(points) -> list[PricePointResponse]:
    return [
        PricePointResponse(date=point.date, value=round_currency(point.value))
        for point in points
    ]


def to_holding_response(holding: Holding) -> HoldingResponse:
    return HoldingResponse(
        id=holding.id,
        ticker=holding.ticker,
        name=holding.name,
        type=holding.type.value,
        quantity=holding.quantity,
        current_price=holding.current_price,
        value=round_currency(holding.value),
        change_percent_today=holding.change_percent_today,
        change_amount_today=round_currency(holding.change_amount_today),
        price_history_7d=to_point_responses(holding.price_history_7d),
    )


def to_account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        name=account.name,
        type=account.type,
        institution=account.institution,
        value=account.value,
    )


def to_ledger_items(items: list[LedgerItemPayload]) -> list[LedgerItem]:
    return [
        LedgerItem(
            amount=item.amount,
            date=item.date,
            category=item.category,
            title=item.title,
        )
        for item in items
    ]


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/budget/forecast", response_model=ForecastResponse)
def budget_forecast(payload: ForecastPayload) -> ForecastResponse:
    try:
        income, expenses = ForecastPayload.validate_payload(payload)
        forecast = calculate_forecast(income, expenses, parse_savings_goal(payload.goal))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return to_forecast_response(forecast, to_breakdown(expenses, forecast))


@app.post("/budget/monthly-summary", response_model=MonthlySummaryResponse)
def budget_monthly_summary(payload: MonthlySummaryPayload) -> MonthlySummaryResponse:
    transactions = to_ledger_items(payload.transactions)
    history = monthly_summary_history(transactions, to_ledger_items(payload.income))
    month = payload.month or (history[-1].month if history else None)

    recommendation = None
    current = next((entry for entry in history if entry.month == month), None)
    if current is not None:
        recommendation = savings_recommendation(current.income)

    return MonthlySummaryResponse(
        history=[
            MonthlySummaryEntry(
                month=entry.month,
                income=round_currency(entry.income),
                expenses=round_currency(entry.expenses),
                savings=round_currency(entry.savings),
                savings_rate=entry.savings_rate.quantize(
                    Decimal("0.1"), rounding=ROUND_HALF_UP
                ),
            )
            for entry in history
        ],
        category_breakdown=[
            to_slice_response(item) for item in category_breakdown(transactions, month)
        ],
        savings_recommendation=(
            SavingsRecommendationResponse(
                rate=recommendation.rate,
                target_amount=round_currency(recommendation.target_amount),
            )
            if recommendation
            else None
        ),
    )


@app.post("/investments/portfolio", response_model=PortfolioResponse)
def investments_portfolio(
    payload: Any = Body(None),
    time_range: str = Query("ALL", alias="range"),
) -> PortfolioResponse:
    try:
        selected_range = parse_time_range(time_range)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    rng = get_random_source()
    snapshot = load_portfolio_snapshot(payload, rng=rng)
    view = build_portfolio_view(snapshot, selected_range, rng=rng)
    return PortfolioResponse(
        total_value=snapshot.total_value,
        change_percent=snapshot.change_percent,
        time_range=view.time_range.value,
        history=to_point_responses(snapshot.history),
        filtered_history=to_point_responses(view.filtered_history),
        holdings=[to_holding_response(holding) for holding in snapshot.holdings],
        stock_holdings=[to_holding_response(holding) for holding in view.stock_holdings],
        crypto_holdings=[to_holding_response(holding) for holding in view.crypto_holdings],
        accounts=[to_account_response(account) for account in snapshot.accounts],
    )


@app.get("/investments/history", response_model=list[PricePointResponse])
def investments_history(
    current_value: Decimal = Query(..., ge=-MAX_AMOUNT, le=MAX_AMOUNT),
    time_range: str = Query("ALL", alias="range"),
) -> list[PricePointResponse]:
    try:
        history = generate_portfolio_history(
            current_value,
            parse_time_range(time_range),
            rng=get_random_source(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return to_point_responses(history)


@app.get("/investments/price-history", response_model=list[PricePointResponse])
def investments_price_history(
    current_value: Decimal = Query(..., ge=-MAX_AMOUNT, le=MAX_AMOUNT),
    days: int = Query(DEFAULT_HISTORY_DAYS),
    volatility: float = Query(DEFAULT_VOLATILITY),
) -> list[PricePointResponse]:
    try:
        history: list[PricePoint] = generate_price_history(
            current_value,
            days,
            volatility,
            rng=get_random_source(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return to_point_responses(history)
