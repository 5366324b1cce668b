from fastapi import APIRouter, Depends

from ..config import load_preferences
from ..database import get_feed
from ..schemas import StatisticsResponse, FormattedAmount
from ..services.formatting import format_currency
from ..services.ledger_feed import LedgerFeed

router = APIRouter()


@router.get("/", response_model=StatisticsResponse)
def get_statistics(feed: LedgerFeed = Depends(get_feed)):
    """Current statistics derived from all transactions."""
    return StatisticsResponse.model_validate(feed.stats)


@router.get("/summary", response_model=dict[str, FormattedAmount])
def get_formatted_summary(feed: LedgerFeed = Depends(get_feed)):
    """Headline totals formatted with the saved currency preferences."""
    stats = feed.stats
    prefs = load_preferences()
    values = {
        "balance": stats.balance,
        "monthly_income": stats.monthly_income,
        "monthly_expenses": stats.monthly_expenses,
    }
    return {
        key: FormattedAmount(value=value, formatted=format_currency(value, prefs))
        for key, value in values.items()
    }
