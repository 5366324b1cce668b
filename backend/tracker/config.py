import json
import os
from pathlib import Path
from typing import Literal
from pydantic import BaseModel

from .errors import ValidationError

APP_NAME = "LedgerTracker"
APP_VERSION = "1.0.0"

# Data directory — use TRACKER_DATA_DIR env var if set (e.g. /data in Docker),
# otherwise fall back to ~/.config/ledger-tracker for local dev
_data_dir = os.environ.get("TRACKER_DATA_DIR")
DATA_DIR = Path(_data_dir) if _data_dir else Path.home() / ".config" / "ledger-tracker"
CONFIG_DIR = DATA_DIR / "config" if _data_dir else DATA_DIR
PREFERENCES_FILE = CONFIG_DIR / "preferences.json"

DEFAULT_DB_PATH = Path(os.environ.get("TRACKER_DB_PATH", DATA_DIR / "ledger.db"))

# Number of calendar months in the trend series
TREND_MONTHS = int(os.environ.get("TRACKER_TREND_MONTHS", "6"))

# Comma-separated origins allowed to call the API from a browser
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("TRACKER_CORS_ORIGINS", "").split(",")
    if origin.strip()
]


class Currency(BaseModel):
    """A selectable display currency."""
    code: str
    symbol: str
    name: str
    locale: str


class Theme(BaseModel):
    """A selectable color theme."""
    id: str
    name: str


CURRENCIES: list[Currency] = [
    Currency(code="BDT", symbol="৳", name="Bangladeshi Taka", locale="bn-BD"),
    Currency(code="USD", symbol="$", name="US Dollar", locale="en-US"),
    Currency(code="EUR", symbol="€", name="Euro", locale="de-DE"),
    Currency(code="GBP", symbol="£", name="British Pound", locale="en-GB"),
    Currency(code="INR", symbol="₹", name="Indian Rupee", locale="en-IN"),
    Currency(code="SAR", symbol="﷼", name="Saudi Riyal", locale="ar-SA"),
    Currency(code="AED", symbol="د.إ", name="UAE Dirham", locale="ar-AE"),
    Currency(code="MYR", symbol="RM", name="Malaysian Ringgit", locale="ms-MY"),
]

THEMES: list[Theme] = [
    Theme(id="dark", name="Midnight Dark"),
    Theme(id="light", name="Clean White"),
    Theme(id="ocean", name="Deep Ocean"),
    Theme(id="forest", name="Forest Green"),
    Theme(id="sunset", name="Golden Sunset"),
]


class Preferences(BaseModel):
    """User display preferences, stored outside the record store."""
    currency: str = CURRENCIES[0].code
    number_format: Literal["international", "local"] = "international"
    theme: str = THEMES[0].id


def get_currency(code: str) -> Currency | None:
    """Look up a supported currency by code."""
    for currency in CURRENCIES:
        if currency.code == code:
            return currency
    return None


def ensure_config_dir() -> None:
    """Ensure the config directory exists."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_preferences() -> Preferences:
    """Load saved preferences, falling back to defaults for anything unknown."""
    if not PREFERENCES_FILE.exists():
        return Preferences()

    try:
        with open(PREFERENCES_FILE, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return Preferences()

    prefs = Preferences()
    # Each key is read independently so one stale value does not reset the rest
    if get_currency(data.get("currency", "")):
        prefs.currency = data["currency"]
    if data.get("number_format") in ("international", "local"):
        prefs.number_format = data["number_format"]
    if data.get("theme") in {t.id for t in THEMES}:
        prefs.theme = data["theme"]
    return prefs


def save_preferences(prefs: Preferences) -> None:
    """Save preferences."""
    ensure_config_dir()
    with open(PREFERENCES_FILE, "w") as f:
        json.dump(prefs.model_dump(mode="json"), f, indent=2)


def update_preferences(
    currency: str | None = None,
    number_format: str | None = None,
    theme: str | None = None,
) -> Preferences:
    """Validate and persist a change to one or more preferences."""
    prefs = load_preferences()

    if currency is not None:
        if not get_currency(currency):
            raise ValidationError(f"Unsupported currency: {currency}")
        prefs.currency = currency
    if number_format is not None:
        if number_format not in ("international", "local"):
            raise ValidationError(f"Unsupported number format: {number_format}")
        prefs.number_format = number_format
    if theme is not None:
        if theme not in {t.id for t in THEMES}:
            raise ValidationError(f"Unsupported theme: {theme}")
        prefs.theme = theme

    save_preferences(prefs)
    return prefs
