import json
from datetime import datetime

import pytest

from tracker.config import APP_NAME, APP_VERSION
from tracker.database import DEFAULT_CATEGORIES
from tracker.errors import ImportFormatError
from tracker.models import TransactionType
from tracker.services.backup_service import BackupService, backup_filename


@pytest.fixture
def service(store):
    return BackupService(store)


@pytest.fixture
async def populated(feed):
    await feed.add_transaction({
        "amount": 42.5,
        "type": "expense",
        "category": "Travel",
        "description": "Train",
        "date": datetime(2026, 10, 3, 8, 15),
    })
    await feed.add_budget({"category": "Travel", "amount": 300, "period": "weekly"})
    return feed


class TestExport:

    @pytest.mark.asyncio
    async def test_document_shape(self, service, populated):
        document = service.export_data()

        assert set(document) == {
            "transactions", "categories", "budgets", "exportedAt", "appVersion", "appName",
        }
        assert document["appName"] == APP_NAME
        assert document["appVersion"] == APP_VERSION
        assert len(document["categories"]) == len(DEFAULT_CATEGORIES)

        [tx] = document["transactions"]
        assert tx["amount"] == 42.5
        assert tx["type"] == "expense"
        assert tx["date"] == "2026-10-03T08:15:00"
        assert "createdAt" in tx

        [budget] = document["budgets"]
        assert budget["period"] == "weekly"

    def test_filename(self):
        assert backup_filename(datetime(2026, 10, 18)) == "ledgertracker-backup-2026-10-18.json"


class TestImport:

    @pytest.mark.asyncio
    async def test_restores_exported_document(self, service, populated, tmp_path):
        exported = json.dumps(service.export_data())
        await populated.clear_all_data()
        assert populated.transactions == ()

        summary = service.import_data(exported)

        assert summary.transactions == 1
        assert summary.budgets == 1
        [tx] = populated.transactions
        assert tx.category == "Travel"
        assert tx.date == datetime(2026, 10, 3, 8, 15)
        assert populated.stats.balance == -42.5

    def test_parses_iso_strings(self, service, store):
        service.import_data({
            "transactions": [{
                "id": 7,
                "amount": 12,
                "type": "income",
                "category": "Salary",
                "description": "",
                "date": "2026-10-03T00:00:00",
                "createdAt": "2026-10-03T00:00:01",
            }],
        })
        tx = store.get("transactions", 7)
        assert tx.type == TransactionType.INCOME
        assert tx.date == datetime(2026, 10, 3)
        assert tx.created_at == datetime(2026, 10, 3, 0, 0, 1)

    def test_missing_keys_leave_tables_untouched(self, service, store):
        service.import_data({"budgets": [{"category": "Travel", "amount": 10, "period": "monthly"}]})
        assert store.count("categories") == len(DEFAULT_CATEGORIES)
        assert store.count("budgets") == 1

    @pytest.mark.parametrize("raw", [
        b"{not json",
        "[1, 2, 3]",
        json.dumps({"transactions": [{"amount": -5, "type": "expense", "category": "Food", "date": "2026-10-01"}]}),
        json.dumps({"transactions": "nope"}),
        json.dumps({"budgets": [{"category": "Food", "amount": 10, "period": "daily"}]}),
    ])
    @pytest.mark.asyncio
    async def test_bad_input_changes_nothing(self, service, populated, raw):
        before = populated.snapshot

        with pytest.raises(ImportFormatError):
            service.import_data(raw)

        assert populated.snapshot is before
        assert len(populated.budgets) == 1
