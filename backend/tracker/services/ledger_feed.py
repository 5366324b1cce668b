"""
Reactive binding layer.

LedgerFeed keeps a live view of the transaction list and the statistics
derived from it. Mutations only write to the record store; the store's
commit notification is what refreshes the view. Nothing here patches the
published list or totals by hand.

The list and its statistics are published together as one immutable
snapshot, so a reader can never pair a list from one generation with
totals from another.
"""

import itertools
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, TypeVar

import pydantic
import structlog
from starlette.concurrency import run_in_threadpool

from ..config import TREND_MONTHS
from ..errors import NotFoundError, ValidationError
from ..models import Budget, Category, CategoryType, Transaction
from ..schemas import (
    BudgetCreate,
    BudgetUpdate,
    CategoryCreate,
    TransactionCreate,
    TransactionUpdate,
)
from ..store import RecordStore
from .budget_service import BudgetProgress, BudgetService
from .stats_service import Statistics, compute_stats

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Transactions (most recent first) and the statistics derived from them."""
    version: int
    transactions: tuple[Transaction, ...]
    stats: Statistics
    computed_at: datetime


def transaction_sort_key(tx: Transaction):
    return (tx.date, tx.created_at, tx.id)


def _coerce(schema: type[M], data: M | dict) -> M:
    """Validate raw input against a schema, reporting problems as ValidationError."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(reasons) from e


class LedgerFeed:
    """Live transactions, statistics, categories and budgets, plus mutations."""

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] = datetime.now,
        trend_months: int = TREND_MONTHS,
    ):
        self._store = store
        self._clock = clock
        self._trend_months = trend_months
        self._versions = itertools.count(1)
        self._listeners: list[Callable[[LedgerSnapshot], None]] = []

        self._ledger = store.subscribe(self._load_ledger)
        self._ledger.add_listener(self._publish)
        self._categories = store.subscribe(lambda: tuple(store.list("categories")))
        self._budgets = store.subscribe(lambda: tuple(store.list("budgets")))

    def close(self) -> None:
        for live in (self._ledger, self._categories, self._budgets):
            live.close()
        self._listeners.clear()

    # --- live view ---

    def _load_ledger(self) -> LedgerSnapshot:
        records = self._store.list("transactions")
        ordered = tuple(sorted(records, key=transaction_sort_key, reverse=True))
        now = self._clock()
        snapshot = LedgerSnapshot(
            version=next(self._versions),
            transactions=ordered,
            stats=compute_stats(ordered, now, self._trend_months),
            computed_at=now,
        )
        logger.debug(
            "ledger_recomputed",
            version=snapshot.version,
            transactions=len(ordered),
            balance=snapshot.stats.balance,
        )
        return snapshot

    def _publish(self, snapshot: LedgerSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("ledger_subscriber_failed", version=snapshot.version)

    def subscribe(self, listener: Callable[[LedgerSnapshot], None]) -> Callable[[], None]:
        """Call `listener` with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def snapshot(self) -> LedgerSnapshot:
        snapshot = self._ledger.value
        now = self._clock()
        # Month windows move with the calendar even without writes
        if (now.year, now.month) != (snapshot.computed_at.year, snapshot.computed_at.month):
            snapshot = self._ledger.refresh()
        return snapshot

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self.snapshot.transactions

    @property
    def stats(self) -> Statistics:
        return self.snapshot.stats

    def recent(self, limit: int = 5) -> tuple[Transaction, ...]:
        return self.snapshot.transactions[:limit]

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories.value

    def categories_for(self, transaction_type: str) -> list[Category]:
        """Categories that may be picked for a transaction type."""
        return [c for c in self.categories if c.accepts(transaction_type)]

    @property
    def budgets(self) -> tuple[Budget, ...]:
        return self._budgets.value

    def budget_progress(self) -> list[tuple[Budget, BudgetProgress]]:
        snapshot = self.snapshot
        service = BudgetService(snapshot.transactions)
        return service.progress_all(self.budgets, self._clock())

    def find_transaction(self, transaction_id: int) -> Transaction:
        for tx in self.transactions:
            if tx.id == transaction_id:
                return tx
        raise NotFoundError(f"Transaction {transaction_id} not found")

    # --- validation ---

    def _category(self, name: str) -> Category:
        for category in self.categories:
            if category.name == name:
                return category
        raise ValidationError(f"Unknown category: {name}")

    def _check_category(self, name: str, transaction_type: str) -> None:
        category = self._category(name)
        if not category.accepts(transaction_type):
            raise ValidationError(
                f"Category '{name}' cannot be used for {transaction_type} transactions"
            )

    # --- transaction mutations ---

    async def add_transaction(self, data: TransactionCreate | dict) -> int:
        data = _coerce(TransactionCreate, data)
        self._check_category(data.category, data.type.value)
        record = data.model_dump()
        record["created_at"] = self._clock()
        return await run_in_threadpool(self._store.add, "transactions", record)

    async def update_transaction(self, transaction_id: int, data: TransactionUpdate | dict) -> Transaction:
        data = _coerce(TransactionUpdate, data)
        changes = data.model_dump(exclude_unset=True)
        for field in ("amount", "type", "category", "date"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be empty")

        current = await run_in_threadpool(self._store.get, "transactions", transaction_id)
        if current is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        if "category" in changes or "type" in changes:
            category = changes.get("category", current.category)
            kind = changes.get("type", current.type)
            self._check_category(category, kind.value)

        return await run_in_threadpool(self._store.update, "transactions", transaction_id, changes)

    async def delete_transaction(self, transaction_id: int) -> None:
        await run_in_threadpool(self._store.delete, "transactions", transaction_id)

    # --- budget mutations ---

    def _check_budget_category(self, name: str) -> None:
        category = self._category(name)
        if category.type == CategoryType.INCOME:
            raise ValidationError(f"Budgets can only track expense categories, not '{name}'")

    async def add_budget(self, data: BudgetCreate | dict) -> int:
        data = _coerce(BudgetCreate, data)
        self._check_budget_category(data.category)
        record = data.model_dump()
        record["created_at"] = self._clock()
        return await run_in_threadpool(self._store.add, "budgets", record)

    async def update_budget(self, budget_id: int, data: BudgetUpdate | dict) -> Budget:
        data = _coerce(BudgetUpdate, data)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None:
                raise ValidationError(f"{field} cannot be empty")
        if "category" in changes:
            self._check_budget_category(changes["category"])
        return await run_in_threadpool(self._store.update, "budgets", budget_id, changes)

    async def delete_budget(self, budget_id: int) -> None:
        await run_in_threadpool(self._store.delete, "budgets", budget_id)

    # --- category mutations ---

    async def add_category(self, data: CategoryCreate | dict) -> int:
        data = _coerce(CategoryCreate, data)
        if any(c.name == data.name for c in self.categories):
            raise ValidationError(f"Category '{data.name}' already exists")
        return await run_in_threadpool(self._store.add, "categories", data.model_dump())

    async def delete_category(self, category_id: int) -> None:
        category = next((c for c in self.categories if c.id == category_id), None)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        if any(tx.category == category.name for tx in self.transactions):
            raise ValidationError(f"Category '{category.name}' is used by transactions")
        if any(b.category == category.name for b in self.budgets):
            raise ValidationError(f"Category '{category.name}' is used by a budget")
        await run_in_threadpool(self._store.delete, "categories", category_id)

    # --- bulk ---

    async def clear_all_data(self) -> None:
        """Remove every transaction and budget. Categories are kept."""
        await run_in_threadpool(
            self._store.replace_tables, {"transactions": [], "budgets": []}
        )
        logger.info("ledger_cleared")
