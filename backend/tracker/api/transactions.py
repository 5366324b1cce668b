from datetime import datetime
from fastapi import APIRouter, Depends, Query

from ..database import get_feed
from ..models import TransactionType
from ..schemas import TransactionCreate, TransactionUpdate, TransactionResponse
from ..services.ledger_feed import LedgerFeed

router = APIRouter()


@router.get("/", response_model=list[TransactionResponse])
def list_transactions(
    type: TransactionType | None = Query(None),
    category: str | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    search: str | None = Query(None),
    feed: LedgerFeed = Depends(get_feed),
):
    """
    Get transactions, most recent first.

    start_date is inclusive and end_date exclusive. search matches the
    description or category, case-insensitively.
    """
    transactions = feed.transactions

    if type:
        transactions = [t for t in transactions if t.type == type]
    if category:
        transactions = [t for t in transactions if t.category == category]
    if start_date:
        transactions = [t for t in transactions if t.date >= start_date]
    if end_date:
        transactions = [t for t in transactions if t.date < end_date]
    if search:
        needle = search.lower()
        transactions = [
            t for t in transactions
            if needle in t.description.lower() or needle in t.category.lower()
        ]

    return list(transactions)


@router.get("/recent", response_model=list[TransactionResponse])
def recent_transactions(
    limit: int = Query(5, ge=1, le=100),
    feed: LedgerFeed = Depends(get_feed),
):
    """Get the most recent transactions for the dashboard."""
    return list(feed.recent(limit))


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(transaction_id: int, feed: LedgerFeed = Depends(get_feed)):
    """Get a single transaction by ID."""
    return feed.find_transaction(transaction_id)


@router.post("/", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    transaction: TransactionCreate,
    feed: LedgerFeed = Depends(get_feed),
):
    """Create a new transaction."""
    transaction_id = await feed.add_transaction(transaction)
    return feed.find_transaction(transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    transaction: TransactionUpdate,
    feed: LedgerFeed = Depends(get_feed),
):
    """Update a transaction."""
    await feed.update_transaction(transaction_id, transaction)
    return feed.find_transaction(transaction_id)


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(transaction_id: int, feed: LedgerFeed = Depends(get_feed)):
    """Delete a transaction."""
    await feed.delete_transaction(transaction_id)
