from fastapi import APIRouter, Query

from ..config import CURRENCIES, THEMES, Currency, Preferences, Theme, load_preferences, update_preferences
from ..schemas import FormattedAmount, PreferencesUpdate
from ..services.formatting import format_currency

router = APIRouter()


@router.get("/", response_model=Preferences)
def get_preferences():
    """Get the saved display preferences."""
    return load_preferences()


@router.patch("/", response_model=Preferences)
def patch_preferences(data: PreferencesUpdate):
    """Change one or more display preferences."""
    return update_preferences(**data.model_dump(exclude_unset=True))


@router.get("/currencies", response_model=list[Currency])
def list_currencies():
    return CURRENCIES


@router.get("/themes", response_model=list[Theme])
def list_themes():
    return THEMES


@router.get("/format", response_model=FormattedAmount)
def format_amount(value: float = Query(...)):
    """Format an amount with the saved preferences."""
    return FormattedAmount(value=value, formatted=format_currency(value, load_preferences()))
