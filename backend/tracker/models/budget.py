import enum
from sqlalchemy import String, Integer, Float, Enum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class BudgetPeriod(enum.Enum):
    """Window over which a budget's spend is measured."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Budget(Base, TimestampMixin):
    """A spending cap for one category over one period."""

    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    period: Mapped[BudgetPeriod] = mapped_column(
        Enum(BudgetPeriod, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BudgetPeriod.MONTHLY,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Budget(id={self.id}, category='{self.category}', "
            f"amount={self.amount:.2f}, period={self.period.value})>"
        )
