import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

from ..models import Budget, BudgetPeriod
from .stats_service import TransactionLike, category_breakdown, period_window

WARNING_THRESHOLD = 80.0


class BudgetStatus(enum.Enum):
    """Three-tier progress classification."""
    OK = "ok"
    WARNING = "warning"
    OVER = "over"


@dataclass(frozen=True)
class BudgetProgress:
    """How much of a budget has been used."""
    spent: float
    percentage: float  # capped at 100 for progress bars
    overage: float
    remaining: float
    status: BudgetStatus


def evaluate_budget(budget: Budget, breakdown: Mapping[str, float]) -> BudgetProgress:
    """
    Compare a budget cap against a category breakdown.

    A non-positive cap cannot be divided by; it is reported as fully used.
    """
    spent = breakdown.get(budget.category, 0.0)
    overage = max(spent - budget.amount, 0.0)
    remaining = max(budget.amount - spent, 0.0)

    if budget.amount <= 0:
        return BudgetProgress(
            spent=spent,
            percentage=100.0,
            overage=overage,
            remaining=0.0,
            status=BudgetStatus.OVER,
        )

    raw = spent * 100 / budget.amount
    percentage = min(max(raw, 0.0), 100.0)

    if raw >= 100:
        status = BudgetStatus.OVER
    elif raw >= WARNING_THRESHOLD:
        status = BudgetStatus.WARNING
    else:
        status = BudgetStatus.OK

    return BudgetProgress(
        spent=spent,
        percentage=percentage,
        overage=overage,
        remaining=remaining,
        status=status,
    )


class BudgetService:
    """
    Evaluates budgets against a transaction snapshot.

    Spend is measured over a window sized to each budget's period: the
    current Monday-start week, calendar month or calendar year. For monthly
    budgets this matches Statistics.category_breakdown exactly.
    """

    def __init__(self, transactions: Iterable[TransactionLike]):
        self.transactions = list(transactions)
        self._breakdowns: dict[tuple[datetime, datetime], dict[str, float]] = {}

    def breakdown_for(self, period: BudgetPeriod | str, now: datetime) -> dict[str, float]:
        window = period_window(now, period)
        if window not in self._breakdowns:
            self._breakdowns[window] = category_breakdown(self.transactions, *window)
        return self._breakdowns[window]

    def progress(self, budget: Budget, now: datetime) -> BudgetProgress:
        return evaluate_budget(budget, self.breakdown_for(budget.period, now))

    def progress_all(self, budgets: Iterable[Budget], now: datetime) -> list[tuple[Budget, BudgetProgress]]:
        return [(budget, self.progress(budget, now)) for budget in budgets]
