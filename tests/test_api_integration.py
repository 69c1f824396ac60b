"""
API Integration Tests
End-to-end tests of the audit endpoints through the FastAPI app
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from optical_retail.core.security import create_access_token, create_company_token
from tests.conftest import APITestHelper

AUDITS_URL = "/api/v1/audits/"


@pytest.fixture
def audit_body(shop):
    return {
        "auditDate": "2024-04-02T10:00:00",
        "startDate": "2024-03-01T15:30:00",
        "endDate": "2024-03-31T08:00:00",
        "period": "month",
        "notes": "Quarter-end count",
        "includeExpenses": False,
        "items": [
            {"inventoryItemId": shop["frame"].id, "actualQuantity": 10},
            {"inventoryItemId": shop["lens"].id, "expectedQuantity": 3, "actualQuantity": 40},
        ],
    }


@pytest.fixture
def created_audit(client: TestClient, auth_headers, audit_body, factory, shop):
    factory.sale(shop["company"], "1000", frame="Ray-Ban RB5154", lens="Single Vision 1.67")
    response = client.post(AUDITS_URL, json=audit_body, headers=auth_headers)
    assert response.status_code == 201
    return response.json()


class TestSystemEndpoints:

    def test_health_check(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_info(self, client: TestClient):
        response = client.get("/info")

        assert response.status_code == 200
        assert response.json()["api_version"] == "v1"


class TestAuthentication:
    """The tenant always comes from the bearer token"""

    def test_missing_token(self, client: TestClient):
        response = client.get(AUDITS_URL)

        assert response.status_code in (401, 403)

    def test_garbage_token(self, client: TestClient):
        response = client.get(AUDITS_URL, headers={"Authorization": "Bearer not-a-jwt"})

        APITestHelper.assert_error_response(response, 401, "Could not validate credentials")

    def test_token_without_company(self, client: TestClient):
        token = create_access_token({"sub": "someone@example.test"})

        response = client.get(AUDITS_URL, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_expired_token(self, client: TestClient, company):
        token = create_company_token(company.id, expires_delta=timedelta(minutes=-5))

        response = client.get(AUDITS_URL, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_inactive_company(self, client: TestClient, factory):
        closed = factory.company(name="Closed Branch", is_active=False)
        token = create_company_token(closed.id)

        response = client.get(AUDITS_URL, headers={"Authorization": f"Bearer {token}"})

        APITestHelper.assert_error_response(response, 403, "Company access denied")
        assert response.json()["type"] == "tenant_access"


class TestAuditEndpoints:
    """Audit CRUD over HTTP"""

    def test_inventory_items(self, client: TestClient, auth_headers, shop):
        response = client.get(f"{AUDITS_URL}inventory-items", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [item["name"] for item in data] == ["Ray-Ban RB5154", "Single Vision 1.67"]
        assert data[0]["category"]["name"] == "Frames"
        assert data[0]["unitPrice"] == 300.0
        assert data[0]["totalStock"] == 12

    def test_create_audit(self, client: TestClient, created_audit, shop):
        data = created_audit

        assert data["period"] == "month"
        assert data["startDate"] == "2024-03-01T00:00:00"
        assert data["endDate"].startswith("2024-03-31T23:59:59.999")
        assert data["grossSales"] == 1000.0
        assert data["totalSalesValue"] == 1000.0
        assert data["costOfGoodsSold"] == 500.0
        assert data["netProfit"] == 500.0
        assert data["profitMargin"] == 50.0
        assert data["finalNetProfit"] == 500.0
        assert data["totalInventoryValue"] == 11000.0

        breakdown = data["categoryBreakdown"]
        assert isinstance(breakdown, dict)
        frames = breakdown[shop["frames"].id]
        assert frames["categoryName"] == "Frames"
        assert frames["totalRevenue"] == 600.0
        assert frames["items"][0]["itemName"] == "Ray-Ban RB5154"
        assert breakdown[shop["lenses"].id]["totalRevenue"] == 400.0

        lens_line = next(i for i in data["items"] if i["inventoryItemId"] == shop["lens"].id)
        assert lens_line["expectedQuantity"] == 40
        assert lens_line["discrepancy"] == 0
        assert lens_line["inventoryItem"]["name"] == "Single Vision 1.67"

    def test_create_requires_items(self, client: TestClient, auth_headers, audit_body):
        audit_body["items"] = []

        response = client.post(AUDITS_URL, json=audit_body, headers=auth_headers)

        assert response.status_code == 422

    def test_create_rejects_negative_count(self, client: TestClient, auth_headers, audit_body):
        audit_body["items"][0]["actualQuantity"] = -1

        response = client.post(AUDITS_URL, json=audit_body, headers=auth_headers)

        assert response.status_code == 422

    def test_create_with_unknown_item(self, client: TestClient, auth_headers, audit_body):
        audit_body["items"].append({"inventoryItemId": "no-such-item", "actualQuantity": 1})

        response = client.post(AUDITS_URL, json=audit_body, headers=auth_headers)

        APITestHelper.assert_error_response(response, 404, "no-such-item")
        assert client.get(AUDITS_URL, headers=auth_headers).json()["summary"]["totalAudits"] == 0

    def test_get_audit(self, client: TestClient, auth_headers, created_audit):
        response = client.get(f"{AUDITS_URL}{created_audit['id']}", headers=auth_headers)

        APITestHelper.assert_success_response(response, ["id", "items", "categoryBreakdown"])
        assert response.json()["id"] == created_audit["id"]

    def test_get_missing_audit(self, client: TestClient, auth_headers, shop):
        response = client.get(f"{AUDITS_URL}missing", headers=auth_headers)

        APITestHelper.assert_error_response(response, 404, "Audit not found")

    def test_list_audits(self, client: TestClient, auth_headers, created_audit):
        response = client.get(AUDITS_URL, headers=auth_headers)

        APITestHelper.assert_success_response(response, ["audits", "summary"])
        data = response.json()
        assert [audit["id"] for audit in data["audits"]] == [created_audit["id"]]

        summary = data["summary"]
        assert summary["totalAudits"] == 1
        assert summary["totalCOGS"] == 500.0
        assert summary["totalGrossSales"] == 1000.0
        assert summary["totalSalesValue"] == 1000.0
        assert summary["avgProfitMargin"] == 50.0
        assert summary["totalDiscrepancies"] == 600.0

    def test_list_with_date_filter(self, client: TestClient, auth_headers, created_audit):
        response = client.get(
            AUDITS_URL,
            params={"startDate": "2024-05-01T00:00:00", "endDate": "2024-05-31T00:00:00"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["audits"] == []

    def test_list_rejects_unknown_period(self, client: TestClient, auth_headers, shop):
        response = client.get(AUDITS_URL, params={"period": "decade"}, headers=auth_headers)

        assert response.status_code == 422

    def test_update_notes(self, client: TestClient, auth_headers, created_audit):
        response = client.patch(
            f"{AUDITS_URL}{created_audit['id']}",
            json={"notes": "Recounted"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["notes"] == "Recounted"
        assert data["grossSales"] == created_audit["grossSales"]
        assert len(data["items"]) == 2

    def test_update_include_expenses(self, client: TestClient, auth_headers, created_audit, factory, shop):
        factory.bill(shop["company"], "250")

        response = client.patch(
            f"{AUDITS_URL}{created_audit['id']}",
            json={"includeExpenses": True},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["totalExpenses"] == 250.0
        assert data["finalNetProfit"] == 250.0

    def test_update_missing_audit(self, client: TestClient, auth_headers, shop):
        response = client.patch(f"{AUDITS_URL}missing", json={"notes": "x"}, headers=auth_headers)

        APITestHelper.assert_error_response(response, 404)

    def test_delete_audit(self, client: TestClient, auth_headers, created_audit):
        url = f"{AUDITS_URL}{created_audit['id']}"

        response = client.delete(url, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.get(url, headers=auth_headers).status_code == 404
        assert client.delete(url, headers=auth_headers).status_code == 404


class TestTenantIsolation:

    def test_other_company_sees_nothing(self, client: TestClient, created_audit, other_company):
        headers = {"Authorization": f"Bearer {create_company_token(other_company.id)}"}
        url = f"{AUDITS_URL}{created_audit['id']}"

        assert client.get(url, headers=headers).status_code == 404
        assert client.patch(url, json={"notes": "x"}, headers=headers).status_code == 404
        assert client.delete(url, headers=headers).status_code == 404
        assert client.get(AUDITS_URL, headers=headers).json()["audits"] == []
        assert client.get(f"{AUDITS_URL}inventory-items", headers=headers).json() == []
