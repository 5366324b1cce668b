from .stats_service import (
    MonthlyTrend,
    Statistics,
    category_breakdown,
    compute_stats,
    month_window,
    period_window,
)
from .budget_service import BudgetProgress, BudgetService, BudgetStatus, evaluate_budget
from .formatting import format_currency

__all__ = [
    "MonthlyTrend",
    "Statistics",
    "category_breakdown",
    "compute_stats",
    "month_window",
    "period_window",
    "BudgetProgress",
    "BudgetService",
    "BudgetStatus",
    "evaluate_budget",
    "format_currency",
]
