from fastapi import APIRouter, Depends

from ..database import get_feed
from ..errors import NotFoundError
from ..schemas.budget import (
    BudgetCreate,
    BudgetUpdate,
    BudgetProgressResponse,
)
from ..services.ledger_feed import LedgerFeed

router = APIRouter()


def _build_response(budget, progress) -> dict:
    return {
        "id": budget.id,
        "category": budget.category,
        "amount": budget.amount,
        "period": budget.period,
        "created_at": budget.created_at,
        "spent": progress.spent,
        "percentage": progress.percentage,
        "overage": progress.overage,
        "remaining": progress.remaining,
        "status": progress.status,
    }


def _find(feed: LedgerFeed, budget_id: int) -> dict:
    for budget, progress in feed.budget_progress():
        if budget.id == budget_id:
            return _build_response(budget, progress)
    raise NotFoundError(f"Budget {budget_id} not found")


@router.get("/", response_model=list[BudgetProgressResponse])
def list_budgets(feed: LedgerFeed = Depends(get_feed)):
    return [_build_response(b, p) for b, p in feed.budget_progress()]


@router.get("/{budget_id}", response_model=BudgetProgressResponse)
def get_budget(budget_id: int, feed: LedgerFeed = Depends(get_feed)):
    return _find(feed, budget_id)


@router.post("/", response_model=BudgetProgressResponse, status_code=201)
async def create_budget(data: BudgetCreate, feed: LedgerFeed = Depends(get_feed)):
    budget_id = await feed.add_budget(data)
    return _find(feed, budget_id)


@router.patch("/{budget_id}", response_model=BudgetProgressResponse)
async def update_budget(budget_id: int, data: BudgetUpdate, feed: LedgerFeed = Depends(get_feed)):
    await feed.update_budget(budget_id, data)
    return _find(feed, budget_id)


@router.delete("/{budget_id}", status_code=204)
async def delete_budget(budget_id: int, feed: LedgerFeed = Depends(get_feed)):
    await feed.delete_budget(budget_id)
