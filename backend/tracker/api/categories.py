from fastapi import APIRouter, Depends, Query

from ..database import get_feed
from ..models import TransactionType
from ..schemas import CategoryCreate, CategoryResponse
from ..services.ledger_feed import LedgerFeed

router = APIRouter()


@router.get("/", response_model=list[CategoryResponse])
def list_categories(
    for_type: TransactionType | None = Query(None),
    feed: LedgerFeed = Depends(get_feed),
):
    """Get all categories, or only those eligible for a transaction type."""
    if for_type:
        return feed.categories_for(for_type.value)
    return list(feed.categories)


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(category: CategoryCreate, feed: LedgerFeed = Depends(get_feed)):
    """Create a new category."""
    category_id = await feed.add_category(category)
    return next(c for c in feed.categories if c.id == category_id)


@router.delete("/{category_id}", status_code=204)
async def delete_category(category_id: int, feed: LedgerFeed = Depends(get_feed)):
    """Delete a category that no transaction or budget refers to."""
    await feed.delete_category(category_id)
