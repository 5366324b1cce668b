from pathlib import Path
import structlog
from sqlalchemy import create_engine, event, text, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine import Engine

from .models import Base, CategoryType
from .services.ledger_feed import LedgerFeed
from .store import RecordStore

logger = structlog.get_logger(__name__)

# Global state for the open store
_current_engine: Engine | None = None
_current_store: RecordStore | None = None
_current_feed: LedgerFeed | None = None

DEFAULT_CATEGORIES: list[dict] = [
    {"name": "Salary", "icon": "Banknote", "color": "#10b981", "type": CategoryType.INCOME},
    {"name": "Freelance", "icon": "Laptop", "color": "#22d3ee", "type": CategoryType.INCOME},
    {"name": "Investments", "icon": "TrendingUp", "color": "#8b5cf6", "type": CategoryType.INCOME},
    {"name": "Food & Dining", "icon": "Utensils", "color": "#f59e0b", "type": CategoryType.EXPENSE},
    {"name": "Transportation", "icon": "Car", "color": "#3b82f6", "type": CategoryType.EXPENSE},
    {"name": "Shopping", "icon": "ShoppingBag", "color": "#ec4899", "type": CategoryType.EXPENSE},
    {"name": "Entertainment", "icon": "Gamepad2", "color": "#8b5cf6", "type": CategoryType.EXPENSE},
    {"name": "Bills & Utilities", "icon": "Receipt", "color": "#ef4444", "type": CategoryType.EXPENSE},
    {"name": "Healthcare", "icon": "Heart", "color": "#14b8a6", "type": CategoryType.EXPENSE},
    {"name": "Education", "icon": "GraduationCap", "color": "#6366f1", "type": CategoryType.EXPENSE},
    {"name": "Travel", "icon": "Plane", "color": "#0ea5e9", "type": CategoryType.EXPENSE},
    {"name": "Subscriptions", "icon": "CreditCard", "color": "#a855f7", "type": CategoryType.EXPENSE},
]


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign keys for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def open_store(db_path: Path) -> RecordStore:
    """
    Open the record store (SQLite database file).

    Creates the file and tables if it doesn't exist, and seeds the default
    categories into an empty categories table.
    """
    global _current_engine, _current_store, _current_feed

    if _current_engine is not None:
        close_store()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_url = f"sqlite:///{db_path}"
    _current_engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )

    # Create tables if they don't exist
    Base.metadata.create_all(_current_engine)

    # Migrate existing tables: add missing columns
    _migrate_schema(_current_engine)

    # Loaded records stay readable after their session closes
    session_factory = sessionmaker(bind=_current_engine, expire_on_commit=False)
    _current_store = RecordStore(session_factory)
    seed_default_categories(_current_store)
    _current_feed = LedgerFeed(_current_store)

    logger.info("store_opened", path=str(db_path))
    return _current_store


def seed_default_categories(store: RecordStore) -> bool:
    """Insert the default categories only if the table is empty."""
    if store.count("categories") > 0:
        return False
    store.bulk_add("categories", [dict(c) for c in DEFAULT_CATEGORIES])
    logger.info("categories_seeded", count=len(DEFAULT_CATEGORIES))
    return True


def _migrate_schema(engine: Engine) -> None:
    """Add any missing columns to existing tables."""
    inspector = inspect(engine)

    # Define expected columns that may be missing from older databases
    # Format: (table_name, column_name, column_type_sql)
    migrations = [
        ("transactions", "description", "VARCHAR(1000) DEFAULT '' NOT NULL"),
        ("categories", "icon", "VARCHAR(100) DEFAULT 'Tag' NOT NULL"),
        ("categories", "color", "VARCHAR(32) DEFAULT '#64748b' NOT NULL"),
    ]

    with engine.connect() as conn:
        for table, column, col_type in migrations:
            if not inspector.has_table(table):
                continue
            existing = [c["name"] for c in inspector.get_columns(table)]
            if column not in existing:
                conn.execute(text(
                    f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"
                ))
                conn.commit()
                logger.info("column_added", table=table, column=column)


def close_store() -> None:
    """Close the current store."""
    global _current_engine, _current_store, _current_feed

    if _current_feed is not None:
        _current_feed.close()
        _current_feed = None

    if _current_store is not None:
        _current_store.close()
        _current_store = None

    if _current_engine is not None:
        _current_engine.dispose()
        _current_engine = None


def get_store() -> RecordStore:
    """Get the open record store."""
    if _current_store is None:
        raise RuntimeError("No store is currently open")
    return _current_store


def get_feed() -> LedgerFeed:
    """Get the live ledger view of the open store."""
    if _current_feed is None:
        raise RuntimeError("No store is currently open")
    return _current_feed


def is_store_open() -> bool:
    """Check if a store is currently open."""
    return _current_store is not None

