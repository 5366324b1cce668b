import enum
from sqlalchemy import String, Integer, Enum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CategoryType(enum.Enum):
    """Which transaction types a category may be used for."""
    INCOME = "income"
    EXPENSE = "expense"
    BOTH = "both"


class Category(Base):
    """
    Spending or income category.
    Transactions and budgets reference it by `name`.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Presentation only
    icon: Mapped[str] = mapped_column(String(100), nullable=False, default="Tag")
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="#64748b")

    type: Mapped[CategoryType] = mapped_column(
        Enum(CategoryType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CategoryType.EXPENSE,
        index=True,
    )

    def accepts(self, transaction_type: str) -> bool:
        """Whether this category can be picked for the given transaction type."""
        return self.type == CategoryType.BOTH or self.type.value == transaction_type

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', type={self.type.value})>"
