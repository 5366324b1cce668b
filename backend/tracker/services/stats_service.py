"""
Aggregation engine.

Derives summary statistics from a snapshot of transactions. Everything here
is a pure function of its arguments: no store access, no clock reads, no
module state. Callers pass `now` explicitly.

Sums go through math.fsum, which is correctly rounded, so results do not
depend on the order transactions are iterated in.
"""

import calendar
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Protocol

from ..models import BudgetPeriod, TransactionType

DEFAULT_TREND_MONTHS = 6


class TransactionLike(Protocol):
    amount: float
    type: TransactionType | str
    category: str
    date: datetime


@dataclass(frozen=True)
class MonthlyTrend:
    """Income and expense totals for one calendar month."""
    label: str
    year: int
    month: int
    income: float
    expenses: float


@dataclass(frozen=True)
class Statistics:
    """Derived, never persisted, projection of all transactions."""
    balance: float = 0.0
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    expense_change: float = 0.0
    savings_rate: float = 0.0
    category_breakdown: dict[str, float] = field(default_factory=dict)
    monthly_trends: tuple[MonthlyTrend, ...] = ()


def to_local(value: date | datetime) -> datetime:
    """Normalize to a naive datetime in the local calendar."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return datetime(value.year, value.month, value.day)


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_window(now: datetime, offset: int = 0) -> tuple[datetime, datetime]:
    """
    Half-open window [start, end) of the calendar month `offset` months away
    from the one containing `now` (0 = current, -1 = previous).
    """
    now = to_local(now)
    year, month = _shift_month(now.year, now.month, offset)
    next_year, next_month = _shift_month(year, month, 1)
    return datetime(year, month, 1), datetime(next_year, next_month, 1)


def period_window(now: datetime, period: BudgetPeriod | str) -> tuple[datetime, datetime]:
    """Window of the current week (Monday start), month or year."""
    now = to_local(now)
    period = BudgetPeriod(period)

    if period == BudgetPeriod.WEEKLY:
        start = datetime(now.year, now.month, now.day) - timedelta(days=now.weekday())
        return start, start + timedelta(days=7)
    if period == BudgetPeriod.YEARLY:
        return datetime(now.year, 1, 1), datetime(now.year + 1, 1, 1)
    return month_window(now)


def _kind(tx: TransactionLike) -> str:
    return getattr(tx.type, "value", tx.type)


def _entries(transactions: Iterable[TransactionLike]) -> list[tuple[datetime, str, float, str]]:
    return [
        (to_local(tx.date), _kind(tx), float(tx.amount), tx.category)
        for tx in transactions
    ]


def _window_totals(entries, start: datetime, end: datetime) -> tuple[float, float]:
    income = math.fsum(
        amount for when, kind, amount, _ in entries
        if kind == TransactionType.INCOME.value and start <= when < end
    )
    expenses = math.fsum(
        amount for when, kind, amount, _ in entries
        if kind == TransactionType.EXPENSE.value and start <= when < end
    )
    return income, expenses


def _breakdown(entries, start: datetime, end: datetime) -> dict[str, float]:
    grouped: dict[str, list[float]] = {}
    for when, kind, amount, category in entries:
        if kind == TransactionType.EXPENSE.value and start <= when < end:
            grouped.setdefault(category, []).append(amount)

    totals = {name: math.fsum(amounts) for name, amounts in grouped.items()}
    # Absence means zero
    return {name: total for name, total in sorted(totals.items()) if total != 0}


def category_breakdown(
    transactions: Iterable[TransactionLike],
    start: datetime,
    end: datetime,
) -> dict[str, float]:
    """Expense totals per category for transactions dated in [start, end)."""
    return _breakdown(_entries(transactions), start, end)


def compute_stats(
    transactions: Iterable[TransactionLike],
    now: datetime,
    trend_months: int = DEFAULT_TREND_MONTHS,
) -> Statistics:
    """Compute the full statistics projection as of `now`."""
    entries = _entries(transactions)

    balance = math.fsum(
        amount if kind == TransactionType.INCOME.value else -amount
        for _, kind, amount, _ in entries
    )

    current_start, current_end = month_window(now)
    previous_start, previous_end = month_window(now, -1)

    monthly_income, monthly_expenses = _window_totals(entries, current_start, current_end)
    _, previous_expenses = _window_totals(entries, previous_start, previous_end)

    if previous_expenses == 0:
        expense_change = 0.0
    else:
        expense_change = (monthly_expenses - previous_expenses) * 100 / previous_expenses

    if monthly_income == 0:
        savings_rate = 0.0
    else:
        savings_rate = (monthly_income - monthly_expenses) * 100 / monthly_income

    trends = []
    for offset in range(-(trend_months - 1), 1):
        start, end = month_window(now, offset)
        income, expenses = _window_totals(entries, start, end)
        trends.append(MonthlyTrend(
            label=calendar.month_abbr[start.month],
            year=start.year,
            month=start.month,
            income=income,
            expenses=expenses,
        ))

    return Statistics(
        balance=balance,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        expense_change=expense_change,
        savings_rate=savings_rate,
        category_breakdown=_breakdown(entries, current_start, current_end),
        monthly_trends=tuple(trends),
    )
