from fastapi import APIRouter

from .transactions import router as transactions_router
from .categories import router as categories_router
from .budgets import router as budgets_router
from .stats import router as stats_router
from .data import router as data_router
from .preferences import router as preferences_router

api_router = APIRouter()

api_router.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
api_router.include_router(categories_router, prefix="/categories", tags=["categories"])
api_router.include_router(budgets_router, prefix="/budgets", tags=["budgets"])
api_router.include_router(stats_router, prefix="/stats", tags=["stats"])
api_router.include_router(data_router, prefix="/data", tags=["data"])
api_router.include_router(preferences_router, prefix="/preferences", tags=["preferences"])
