import enum
from datetime import datetime
from sqlalchemy import String, Integer, Float, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class TransactionType(enum.Enum):
    """Direction of money flow. The amount itself is never negative."""
    INCOME = "income"
    EXPENSE = "expense"


class Transaction(Base, TimestampMixin):
    """
    A single income or expense entry.

    `category` holds the Category *name*, not its id. Renaming a category
    detaches historical transactions from it.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    category: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    # Economic date, may differ from created_at
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, date={self.date}, type={self.type.value}, "
            f"amount={self.amount:.2f}, category='{self.category}')>"
        )
