"""
Record store.

Table-level CRUD over the SQLAlchemy session factory plus live queries.
A live query remembers which tables it read while evaluating and is
re-evaluated after any commit that changed one of them. Notifications are
driven by the session's after_commit hook only, so a write that fails or
rolls back never triggers a refresh.
"""

from __future__ import annotations

import contextvars
import threading
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

import structlog
from sqlalchemy import delete, event, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import NotFoundError, StoreError
from .models import Base, Budget, Category, Transaction

logger = structlog.get_logger(__name__)

T = TypeVar("T")

TABLES: dict[str, type[Base]] = {
    "transactions": Transaction,
    "categories": Category,
    "budgets": Budget,
}

# Never overwritten by update()
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

# Tables read by the live query currently being evaluated
_reads: contextvars.ContextVar[set[str] | None] = contextvars.ContextVar("_reads", default=None)


class LiveQuery(Generic[T]):
    """The latest result of a query function, kept current by the store."""

    def __init__(self, store: "RecordStore", query_fn: Callable[[], T]):
        self._store = store
        self._query_fn = query_fn
        self._lock = threading.RLock()
        self._listeners: list[Callable[[T], None]] = []
        self.tables: frozenset[str] = frozenset()
        self._value: T = self._evaluate()

    @property
    def value(self) -> T:
        return self._value

    def _evaluate(self) -> T:
        token = _reads.set(set())
        try:
            value = self._query_fn()
            self.tables = frozenset(_reads.get())
        finally:
            _reads.reset(token)
        return value

    def refresh(self) -> T:
        """Re-run the query and push the result to listeners."""
        with self._lock:
            self._value = self._evaluate()
            value = self._value
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                # One failing listener must not starve the others
                logger.exception("live_query_listener_failed", tables=sorted(self.tables))
        return value

    def on_tables_changed(self, tables: set[str]) -> None:
        if self.tables & tables:
            self.refresh()

    def add_listener(self, listener: Callable[[T], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[T], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def close(self) -> None:
        """Stop receiving change notifications."""
        self._store.unsubscribe(self)


class RecordStore:
    """CRUD and subscriptions for the transactions, categories and budgets tables."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._subscriptions: list[LiveQuery] = []
        self._lock = threading.Lock()
        event.listen(session_factory, "after_commit", self.after_commit)
        event.listen(session_factory, "after_rollback", self.after_rollback)

    # --- session lifecycle ---

    def after_commit(self, session: Session) -> None:
        """Session hook: notify live queries about committed table changes."""
        tables = session.info.pop("changed_tables", None)
        if tables:
            self._notify(tables)

    def after_rollback(self, session: Session) -> None:
        """Session hook: discard pending change marks."""
        session.info.pop("changed_tables", None)

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("store_write_failed", error=str(e))
            raise StoreError(f"Record store failure: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _model(table: str) -> type[Base]:
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    @staticmethod
    def _mark_read(table: str) -> None:
        reads = _reads.get()
        if reads is not None:
            reads.add(table)

    @staticmethod
    def _mark_changed(session: Session, table: str) -> None:
        session.info.setdefault("changed_tables", set()).add(table)

    # --- reads ---

    def list(self, table: str) -> list[Any]:
        """All records of a table, in insertion (id) order."""
        model = self._model(table)
        self._mark_read(table)
        with self.session() as session:
            return list(session.scalars(select(model).order_by(model.id)).all())

    def get(self, table: str, record_id: int) -> Any | None:
        model = self._model(table)
        self._mark_read(table)
        with self.session() as session:
            return session.get(model, record_id)

    def count(self, table: str) -> int:
        model = self._model(table)
        self._mark_read(table)
        with self.session() as session:
            return session.scalar(select(func.count()).select_from(model))

    # --- writes ---

    def add(self, table: str, record: dict) -> int:
        model = self._model(table)
        with self.session() as session:
            obj = model(**record)
            session.add(obj)
            session.flush()
            self._mark_changed(session, table)
            record_id = obj.id
        logger.info("record_added", table=table, id=record_id)
        return record_id

    def update(self, table: str, record_id: int, partial: dict) -> Any:
        model = self._model(table)
        with self.session() as session:
            obj = session.get(model, record_id)
            if obj is None:
                raise NotFoundError(f"No record {record_id} in {table}")
            for field, value in partial.items():
                if field in IMMUTABLE_FIELDS:
                    continue
                setattr(obj, field, value)
            session.flush()
            self._mark_changed(session, table)
        logger.info("record_updated", table=table, id=record_id, fields=sorted(partial))
        return obj

    def delete(self, table: str, record_id: int) -> None:
        model = self._model(table)
        with self.session() as session:
            obj = session.get(model, record_id)
            if obj is None:
                raise NotFoundError(f"No record {record_id} in {table}")
            session.delete(obj)
            self._mark_changed(session, table)
        logger.info("record_deleted", table=table, id=record_id)

    def clear(self, table: str) -> None:
        model = self._model(table)
        with self.session() as session:
            session.execute(delete(model))
            self._mark_changed(session, table)
        logger.info("table_cleared", table=table)

    def bulk_add(self, table: str, records: list[dict]) -> list[int]:
        model = self._model(table)
        with self.session() as session:
            objs = [model(**record) for record in records]
            session.add_all(objs)
            session.flush()
            self._mark_changed(session, table)
            ids = [obj.id for obj in objs]
        logger.info("records_bulk_added", table=table, count=len(ids))
        return ids

    def replace_tables(self, tables: dict[str, list[dict]]) -> None:
        """
        Clear and repopulate several tables in a single database transaction.

        Either every listed table ends up with its new contents or none of
        them is touched.
        """
        models = {table: self._model(table) for table in tables}
        with self.session() as session:
            for table, records in tables.items():
                model = models[table]
                session.execute(delete(model))
                session.add_all([model(**record) for record in records])
                self._mark_changed(session, table)
            session.flush()
        logger.info(
            "tables_replaced",
            counts={table: len(records) for table, records in tables.items()},
        )

    # --- subscriptions ---

    def subscribe(self, query_fn: Callable[[], T]) -> LiveQuery[T]:
        """Evaluate query_fn now and again whenever a table it read changes."""
        live = LiveQuery(self, query_fn)
        with self._lock:
            self._subscriptions.append(live)
        return live

    def unsubscribe(self, live: LiveQuery) -> None:
        with self._lock:
            if live in self._subscriptions:
                self._subscriptions.remove(live)

    def close(self) -> None:
        """Drop every subscription."""
        with self._lock:
            self._subscriptions.clear()

    def _notify(self, tables: set[str]) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        logger.debug("tables_changed", tables=sorted(tables), subscribers=len(subscriptions))
        for live in subscriptions:
            try:
                live.on_tables_changed(tables)
            except StoreError as e:
                # The write is already committed; keep the previous value
                logger.error("live_query_refresh_failed", error=e.message)
            except Exception:
                logger.exception("live_query_refresh_failed", tables=sorted(live.tables))
