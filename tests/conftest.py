from datetime import datetime

import pytest

from tracker import config
from tracker.database import open_store, close_store
from tracker.models import Transaction, TransactionType
from tracker.services.ledger_feed import LedgerFeed

# A Sunday in the middle of the month
NOW = datetime(2026, 10, 18, 12, 0)


def make_tx(kind: str, amount: float, category: str, when: datetime, **extra) -> Transaction:
    """Build a transient transaction for pure engine tests."""
    return Transaction(
        type=TransactionType(kind),
        amount=amount,
        category=category,
        description=extra.pop("description", ""),
        date=when,
        **extra,
    )


@pytest.fixture
def store(tmp_path):
    store = open_store(tmp_path / "ledger.db")
    yield store
    close_store()


@pytest.fixture
def feed(store):
    feed = LedgerFeed(store, clock=lambda: NOW)
    yield feed
    feed.close()


@pytest.fixture(autouse=True)
def preferences_file(tmp_path, monkeypatch):
    """Keep preference writes inside the test's temp directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "PREFERENCES_FILE", config_dir / "preferences.json")
    return config_dir / "preferences.json"
