import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from tracker.database import DEFAULT_CATEGORIES
from tracker.main import app


@pytest.fixture
def client(store):
    with TestClient(app) as client:
        yield client


def now_iso() -> str:
    return datetime.now().replace(microsecond=0).isoformat()


def create_tx(client, **overrides):
    payload = {
        "amount": 100,
        "type": "expense",
        "category": "Food & Dining",
        "description": "Groceries",
        "date": now_iso(),
    }
    payload.update(overrides)
    return client.post("/api/transactions/", json=payload)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestTransactionsApi:

    def test_create_and_stats(self, client):
        assert create_tx(client).status_code == 201
        assert create_tx(client, amount=1000, type="income", category="Salary").status_code == 201

        stats = client.get("/api/stats/").json()
        assert stats["balance"] == 900
        assert stats["monthly_income"] == 1000
        assert stats["monthly_expenses"] == 100
        assert stats["savings_rate"] == 90.0
        assert stats["category_breakdown"] == {"Food & Dining": 100}
        assert len(stats["monthly_trends"]) == 6

    def test_list_is_most_recent_first(self, client):
        create_tx(client, date="2026-01-01T10:00:00", description="old")
        create_tx(client, date="2026-03-01T10:00:00", description="new")
        descriptions = [t["description"] for t in client.get("/api/transactions/").json()]
        assert descriptions == ["new", "old"]

        recent = client.get("/api/transactions/recent", params={"limit": 1}).json()
        assert [t["description"] for t in recent] == ["new"]

    def test_filters(self, client):
        create_tx(client, description="Bus ticket", category="Transportation")
        create_tx(client, amount=5, type="income", category="Salary", description="Bonus")

        assert len(client.get("/api/transactions/", params={"type": "income"}).json()) == 1
        assert len(client.get("/api/transactions/", params={"search": "bus"}).json()) == 1
        assert len(client.get("/api/transactions/", params={"category": "Salary"}).json()) == 1

    def test_update_and_delete(self, client):
        tx = create_tx(client).json()

        response = client.patch(f"/api/transactions/{tx['id']}", json={"amount": 40})
        assert response.status_code == 200
        assert response.json()["amount"] == 40
        assert client.get("/api/stats/").json()["monthly_expenses"] == 40

        assert client.delete(f"/api/transactions/{tx['id']}").status_code == 204
        assert client.get("/api/stats/").json()["monthly_expenses"] == 0
        assert client.get(f"/api/transactions/{tx['id']}").status_code == 404

    def test_unknown_category_is_rejected(self, client):
        response = create_tx(client, category="Nope")
        assert response.status_code == 422
        assert "Unknown category" in response.json()["detail"]
        assert client.get("/api/transactions/").json() == []

    def test_negative_amount_is_rejected(self, client):
        assert create_tx(client, amount=-3).status_code == 422


class TestCategoriesApi:

    def test_seeded(self, client):
        assert len(client.get("/api/categories/").json()) == len(DEFAULT_CATEGORIES)

    def test_filter_by_transaction_type(self, client):
        income = client.get("/api/categories/", params={"for_type": "income"}).json()
        assert {c["name"] for c in income} == {"Salary", "Freelance", "Investments"}

    def test_create(self, client):
        response = client.post("/api/categories/", json={"name": "Pets", "type": "both"})
        assert response.status_code == 201
        assert response.json()["name"] == "Pets"
        assert client.post("/api/categories/", json={"name": "Pets"}).status_code == 422


class TestBudgetsApi:

    def test_progress(self, client):
        response = client.post("/api/budgets/", json={"category": "Food & Dining", "amount": 50})
        assert response.status_code == 201
        assert response.json()["status"] == "ok"
        budget_id = response.json()["id"]

        create_tx(client, amount=60)
        budget = client.get(f"/api/budgets/{budget_id}").json()
        assert budget["spent"] == 60
        assert budget["percentage"] == 100
        assert budget["overage"] == 10
        assert budget["status"] == "over"

    def test_non_positive_amount(self, client):
        response = client.post("/api/budgets/", json={"category": "Food & Dining", "amount": 0})
        assert response.status_code == 422

    def test_missing_budget(self, client):
        assert client.get("/api/budgets/99").status_code == 404
        assert client.delete("/api/budgets/99").status_code == 404


class TestDataApi:

    def test_export_then_import(self, client):
        create_tx(client, amount=12)
        response = client.get("/api/data/export")
        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        document = response.json()
        assert len(document["transactions"]) == 1

        assert client.delete("/api/data/").status_code == 204
        assert client.get("/api/transactions/").json() == []

        response = client.post(
            "/api/data/import",
            files={"file": ("backup.json", json.dumps(document), "application/json")},
        )
        assert response.status_code == 200
        assert response.json()["transactions"] == 1
        assert client.get("/api/stats/").json()["balance"] == -12

    def test_malformed_import(self, client):
        create_tx(client, amount=12)
        response = client.post(
            "/api/data/import",
            files={"file": ("backup.json", b"{broken", "application/json")},
        )
        assert response.status_code == 400
        assert len(client.get("/api/transactions/").json()) == 1


class TestPreferencesApi:

    def test_update_and_format(self, client):
        response = client.patch("/api/preferences/", json={"currency": "USD"})
        assert response.status_code == 200
        assert response.json()["currency"] == "USD"

        formatted = client.get("/api/preferences/format", params={"value": 1234.4}).json()
        assert formatted["formatted"] == "$1,234"

    def test_invalid_currency(self, client):
        assert client.patch("/api/preferences/", json={"currency": "XYZ"}).status_code == 422

    def test_summary_uses_preferences(self, client):
        client.patch("/api/preferences/", json={"currency": "GBP"})
        create_tx(client, amount=1000, type="income", category="Salary")
        summary = client.get("/api/stats/summary").json()
        assert summary["balance"]["formatted"] == "£1,000"

    def test_lists(self, client):
        assert len(client.get("/api/preferences/currencies").json()) == 8
        assert {t["id"] for t in client.get("/api/preferences/themes").json()} >= {"dark", "light"}


def test_unknown_path_is_not_served(client):
    assert client.get("/dashboard").status_code == 404
