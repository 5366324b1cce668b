from .base import Base
from .transaction import Transaction, TransactionType
from .category import Category, CategoryType
from .budget import Budget, BudgetPeriod

__all__ = [
    "Base",
    "Transaction",
    "TransactionType",
    "Category",
    "CategoryType",
    "Budget",
    "BudgetPeriod",
]
