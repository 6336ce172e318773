"""
API tests for the FastPOS endpoints

Uses FastAPI's TestClient against an app wired to the offline test POS.

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from fastpos.core.exceptions import ExchangeRateError
from fastpos.main import create_app


@pytest.fixture
def client(pos, test_settings):
    """Provides a TestClient for an app using the test POS"""
    return TestClient(create_app(pos=pos, settings=test_settings))


@pytest.fixture
def product_ids(menu):
    return {key: product.id for key, product in menu.items()}


class TestRoot:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "online"

    def test_health_reports_offline_sync(self, client):
        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["sync"]["status"] == "offline"
        assert data["exchange_rate"] == 45.0

    def test_pos_not_started_returns_503(self, test_settings):
        app = create_app(settings=test_settings)

        response = TestClient(app).get("/api/v1/products/")

        assert response.status_code == 503


class TestProductsAPI:
    """Test /api/v1/products endpoints"""

    def test_list_products(self, client, product_ids):
        response = client.get("/api/v1/products/")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        combo = next(p for p in data["data"] if p["name"] == "Combo de Perros")
        assert combo["price"] == 6.5
        assert combo["price_local"] == 292.5

    def test_search(self, client, product_ids):
        data = client.get("/api/v1/products/", params={"search": "bebi"}).json()

        assert [p["name"] for p in data["data"]] == ["Refresco 1L"]

    def test_create_update_delete(self, client):
        created = client.post("/api/v1/products/", json={"name": "Tequeños", "price": 4, "category": "Entradas"})
        assert created.status_code == 201
        product_id = created.json()["data"]["id"]

        updated = client.put(f"/api/v1/products/{product_id}", json={"price": 4.5})
        assert updated.json()["data"]["price"] == 4.5

        deleted = client.delete(f"/api/v1/products/{product_id}")
        assert deleted.json()["deleted"] is True
        assert client.delete(f"/api/v1/products/{product_id}").json()["deleted"] is False

    def test_update_unknown_returns_404(self, client):
        assert client.put("/api/v1/products/missing", json={"name": "X"}).status_code == 404

    def test_negative_price_rejected(self, client):
        assert client.post("/api/v1/products/", json={"name": "X", "price": -1}).status_code == 422


class TestSalesAPI:
    """Test /api/v1/sales endpoints"""

    def test_checkout(self, client, product_ids):
        response = client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": product_ids["combo"], "quantity": 2}],
            "payment_method": "cash",
        })

        assert response.status_code == 201
        sale = response.json()["data"]
        assert sale["total"] == 13.0
        assert sale["order_number"] == 1
        assert sale["status"] == "pending"
        assert sale["customer_name"] == "Cliente"
        assert sale["total_local"] == 585.0

    def test_checkout_unknown_product(self, client, product_ids):
        response = client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": "missing", "quantity": 1}],
            "payment_method": "cash",
        })

        assert response.status_code == 422

    def test_checkout_requires_items(self, client):
        response = client.post("/api/v1/sales/checkout", json={"items": [], "payment_method": "cash"})

        assert response.status_code == 422

    def test_checkout_rejects_unknown_payment_method(self, client, product_ids):
        response = client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": product_ids["soda"]}],
            "payment_method": "bitcoin",
        })

        assert response.status_code == 422

    def test_status_flow(self, client, product_ids):
        """Test pending -> ready -> completed, then a rejected reopen"""
        # Arrange
        sale = client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": product_ids["burger"]}],
            "payment_method": "mobile",
            "customer_name": "Ana",
        }).json()["data"]
        url = f"/api/v1/sales/{sale['id']}/status"

        # Act
        ready = client.patch(url, json={"status": "ready"}).json()
        active = client.get("/api/v1/sales/active").json()
        completed = client.patch(url, json={"status": "completed"}).json()
        reopened = client.patch(url, json={"status": "pending"}).json()

        # Assert
        assert ready["applied"] is True
        assert active["data"][0]["customer_name"] == "Ana"
        assert completed["data"]["status"] == "completed"
        assert reopened["applied"] is False
        assert reopened["data"]["status"] == "completed"
        assert client.get("/api/v1/sales/active").json()["count"] == 0

    def test_status_of_unknown_sale(self, client):
        data = client.patch("/api/v1/sales/missing/status", json={"status": "ready"}).json()

        assert data["applied"] is False
        assert data["data"] is None

    def test_list_and_get(self, client, product_ids):
        for _ in range(2):
            client.post("/api/v1/sales/checkout", json={
                "items": [{"product_id": product_ids["soda"]}],
                "payment_method": "zelle",
                "route_to_kitchen": False,
            })

        listed = client.get("/api/v1/sales/", params={"day": "2026-10-19", "status": "completed"}).json()
        assert listed["total"] == 2

        sale_id = listed["data"][0]["id"]
        assert client.get(f"/api/v1/sales/{sale_id}").json()["data"]["id"] == sale_id
        assert client.get("/api/v1/sales/missing").status_code == 404


class TestExpensesAPI:

    def test_create_list_delete(self, client):
        created = client.post("/api/v1/expenses/", json={"amount": 450, "description": "Hielo", "currency": "VES"})
        assert created.status_code == 201
        assert created.json()["data"]["amount"] == 10.0

        listed = client.get("/api/v1/expenses/", params={"start_date": "2026-10-19"}).json()
        assert listed["count"] == 1

        expense_id = created.json()["data"]["id"]
        assert client.delete(f"/api/v1/expenses/{expense_id}").json()["deleted"] is True
        assert client.get("/api/v1/expenses/").json()["count"] == 0

    def test_non_positive_amount_rejected(self, client):
        assert client.post("/api/v1/expenses/", json={"amount": 0, "description": "Gas"}).status_code == 422


class TestReportsAPI:

    def test_cash_cut_defaults_to_today(self, client, product_ids, pos):
        client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": product_ids["combo"], "quantity": 2}],
            "payment_method": "cash",
        })
        client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": product_ids["burger"]}],
            "payment_method": "mobile",
        })
        client.post("/api/v1/expenses/", json={"amount": 3, "description": "Hielo"})

        data = client.get("/api/v1/reports/cash-cut").json()["data"]

        assert data["start_day"] == "2026-10-19"
        assert data["total_revenue"] == 18.0
        assert data["net_profit"] == 15.0
        assert data["per_method"]["usd_cash"] == 13.0
        assert data["per_method"]["ves_mobile"] == 225.0
        assert data["formatted"]["ves_mobile"] == "Bs. 225,00"


class TestExchangeRateAPI:
    """Test /api/v1/exchange-rate endpoints"""

    def test_get(self, client):
        data = client.get("/api/v1/exchange-rate/").json()["data"]

        assert data["rate"] == 45.0
        assert data["origin"] == "default"

    def test_refresh(self, client):
        data = client.post("/api/v1/exchange-rate/refresh").json()["data"]

        assert data["rate"] == 36.5
        assert data["origin"] == "refresh"

    def test_refresh_failure_keeps_rate(self, client, rate_source, pos):
        rate_source.fetch_rate = AsyncMock(side_effect=ExchangeRateError("timeout"))

        response = client.post("/api/v1/exchange-rate/refresh")

        assert response.status_code == 502
        assert response.json()["detail"]["rate"] == 45.0
        assert pos.rates.rate == Decimal('45.00')

    def test_manual(self, client):
        assert client.put("/api/v1/exchange-rate/manual", json={"rate": 50}).json()["data"]["rate"] == 50.0
        assert client.put("/api/v1/exchange-rate/manual", json={"rate": 0}).status_code == 422

    def test_convert(self, client):
        data = client.get("/api/v1/exchange-rate/convert", params={"amount": 2, "to": "VES"}).json()["data"]

        assert data["value"] == 90.0
        assert data["formatted"] == "Bs. 90,00"


class TestBackupAPI:

    def test_export_then_import(self, client, product_ids):
        client.post("/api/v1/sales/checkout", json={
            "items": [{"product_id": product_ids["combo"]}],
            "payment_method": "card",
        })

        exported = client.get("/api/v1/backup/export")
        assert exported.status_code == 200
        assert "attachment" in exported.headers["content-disposition"]
        document = exported.json()

        imported = client.post("/api/v1/backup/import", json=document).json()["data"]
        assert imported == {"products": 3, "sales": 1, "expenses": 0, "exchange_rate_applied": True}

    def test_import_missing_sales_rejected(self, client, product_ids):
        response = client.post("/api/v1/backup/import", json={"products": []})

        assert response.status_code == 400
        assert client.get("/api/v1/products/").json()["count"] == 3


class TestSyncAPI:

    def test_status_log_flush_events(self, client, product_ids):
        assert client.get("/api/v1/sync/status").json()["data"]["status"] == "offline"
        assert client.get("/api/v1/sync/log").json()["count"] == 0
        assert client.post("/api/v1/sync/flush").json()["resolved"] == []

        events = client.get("/api/v1/sync/events").json()["data"]
        assert [event["name"] for event in events].count("product_added") == 3
