from .transaction import TransactionCreate, TransactionUpdate, TransactionResponse
from .category import CategoryCreate, CategoryResponse
from .budget import (
    BudgetCreate,
    BudgetUpdate,
    BudgetResponse,
    BudgetProgressResponse,
)
from .stats import MonthlyTrendItem, StatisticsResponse
from .backup import (
    BackupTransaction,
    BackupCategory,
    BackupBudget,
    BackupDocument,
    ImportSummary,
)
from .preferences import PreferencesUpdate, FormattedAmount

__all__ = [
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionResponse",
    "CategoryCreate",
    "CategoryResponse",
    "BudgetCreate",
    "BudgetUpdate",
    "BudgetResponse",
    "BudgetProgressResponse",
    "MonthlyTrendItem",
    "StatisticsResponse",
    "BackupTransaction",
    "BackupCategory",
    "BackupBudget",
    "BackupDocument",
    "ImportSummary",
    "PreferencesUpdate",
    "FormattedAmount",
]
