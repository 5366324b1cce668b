from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from ..models.budget import BudgetPeriod
from ..services.budget_service import BudgetStatus


# --- Input schemas ---

class BudgetCreate(BaseModel):
    category: str = Field(min_length=1)
    amount: float = Field(gt=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, v):
        return v.strip() if isinstance(v, str) else v


class BudgetUpdate(BaseModel):
    category: str | None = Field(None, min_length=1)
    amount: float | None = Field(None, gt=0)
    period: BudgetPeriod | None = None


# --- Response schemas ---

class BudgetResponse(BaseModel):
    id: int
    category: str
    amount: float
    period: BudgetPeriod
    created_at: datetime

    class Config:
        from_attributes = True


class BudgetProgressResponse(BudgetResponse):
    spent: float
    percentage: float
    overage: float
    remaining: float
    status: BudgetStatus
