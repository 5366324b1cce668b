"""
Export file format.

Field names follow the camelCase keys of the exported JSON document
(`createdAt`, `exportedAt`, ...). Every top-level array is optional on
import; a missing key leaves that table untouched.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.budget import BudgetPeriod
from ..models.category import CategoryType
from ..models.transaction import TransactionType
from ..services.stats_service import to_local


class _BackupRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True, extra="ignore")


class BackupTransaction(_BackupRecord):
    id: int | None = None
    amount: float = Field(ge=0)
    type: TransactionType
    category: str = Field(min_length=1)
    description: str = ""
    date: datetime
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")

    @field_validator("date", "created_at")
    @classmethod
    def local_time(cls, v: datetime) -> datetime:
        return to_local(v)


class BackupCategory(_BackupRecord):
    id: int | None = None
    name: str = Field(min_length=1)
    icon: str = "Tag"
    color: str = "#64748b"
    type: CategoryType = CategoryType.EXPENSE


class BackupBudget(_BackupRecord):
    id: int | None = None
    category: str = Field(min_length=1)
    amount: float = Field(gt=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def local_time(cls, v: datetime) -> datetime:
        return to_local(v)


class BackupDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    transactions: list[BackupTransaction] | None = None
    categories: list[BackupCategory] | None = None
    budgets: list[BackupBudget] | None = None
    exported_at: datetime | None = Field(None, alias="exportedAt")
    app_version: str | None = Field(None, alias="appVersion")
    app_name: str | None = Field(None, alias="appName")


class ImportSummary(BaseModel):
    """Number of records written per replaced table."""
    transactions: int | None = None
    categories: int | None = None
    budgets: int | None = None
