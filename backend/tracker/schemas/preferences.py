from typing import Literal
from pydantic import BaseModel


class PreferencesUpdate(BaseModel):
    """Fields for changing preferences (all optional)."""
    currency: str | None = None
    number_format: Literal["international", "local"] | None = None
    theme: str | None = None


class FormattedAmount(BaseModel):
    value: float
    formatted: str
