from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from ..models.transaction import TransactionType
from ..services.stats_service import to_local


class TransactionBase(BaseModel):
    """Base transaction fields."""
    amount: float = Field(ge=0)
    type: TransactionType
    category: str = Field(min_length=1)
    description: str = ""
    date: datetime

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def local_date(cls, v: datetime) -> datetime:
        return to_local(v)


class TransactionCreate(TransactionBase):
    """Fields for creating a transaction."""
    pass


class TransactionUpdate(BaseModel):
    """Fields for updating a transaction (all optional)."""
    amount: float | None = Field(None, ge=0)
    type: TransactionType | None = None
    category: str | None = Field(None, min_length=1)
    description: str | None = None
    date: datetime | None = None

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def local_date(cls, v: datetime | None) -> datetime | None:
        return to_local(v) if v is not None else None


class TransactionResponse(TransactionBase):
    """Transaction response with all fields."""
    id: int
    created_at: datetime

    class Config:
        from_attributes = True
