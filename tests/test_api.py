import asyncio
from types import SimpleNamespace

import pytest

from errors import DairyError, NotFound, ValidationError
from main import http_error


def run(coro):
    return asyncio.run(coro)


# -----------------------------
# In-process API
# -----------------------------

def test_walk_in_invoice_scenario(api, repo):
    before = repo.get_product("cow-milk").stock

    invoice = run(api.create_invoice({"customer_name": "Walk-in",
                                      "items": [{"product_id": "cow-milk", "quantity": 2}],
                                      "submitted_by": "S002"}))

    assert invoice.id == "I002"
    assert invoice.total == 100
    assert repo.get_product("cow-milk").stock == before - 2


def test_expired_reset_message_differs_from_invalid(api, clock):
    issued = run(api.request_admin_password_reset("admin"))
    assert issued.success and len(issued.token) == 6
    assert "5 minutes" in issued.message

    clock.advance(minutes=6)
    expired = run(api.reset_admin_password(issued.token, "new-pass", "new-pass"))
    again = run(api.reset_admin_password(issued.token, "new-pass", "new-pass"))

    assert not expired.success and "expired" in expired.message.lower()
    assert not again.success and "invalid" in again.message.lower()


def test_change_password_reports_failure(api):
    result = run(api.change_admin_password("wrong", "x"))
    assert result.success is False
    assert result.message == "Incorrect current password."


def test_reset_request_for_unknown_id(api):
    result = run(api.request_admin_password_reset("root"))
    assert result.success is False
    assert result.token is None


def test_crud_errors_propagate(api):
    with pytest.raises(NotFound):
        run(api.update_staff_salary("S999", 100))


def test_simulated_latency_is_awaited(api, monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("api.asyncio", SimpleNamespace(sleep=fake_sleep))
    api.latency, api.dashboard_latency = 0.5, 0.8

    run(api.get_products())
    run(api.get_dashboard_data())

    assert delays == [0.5, 0.8]


# -----------------------------
# HTTP surface
# -----------------------------

def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["products"] == 11


def test_http_login(client):
    r = client.post("/auth/login", json={"id": "Admin", "password": "admin123"})
    assert r.json() == {"role": "admin", "user": {"name": "Admin"}}

    r = client.post("/auth/login", json={"id": "S003", "password": "nope"})
    assert r.json() == {"role": None, "user": None}


def test_http_reset_flow(client):
    token = client.post("/auth/reset-request", json={"adminId": "admin"}).json()["token"]

    r = client.post("/auth/reset", json={"token": token, "newPassword": "p2", "confirmPassword": "p2"})
    assert r.json()["success"] is True

    r = client.post("/auth/login", json={"id": "admin", "password": "p2"})
    assert r.json()["role"] == "admin"


def test_http_create_invoice_uses_camel_case(client):
    r = client.post("/invoices", json={"customerName": "Walk-in", "submittedBy": "S002",
                                       "items": [{"productId": "paneer", "quantity": 2}]})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 700
    assert body["items"] == [{"productId": "paneer", "quantity": 2, "price": 350}]
    assert client.get("/invoices").json()[0]["id"] == body["id"]


def test_http_invoice_without_items_is_rejected(client):
    r = client.post("/invoices", json={"customerName": "Walk-in", "submittedBy": "S002", "items": []})
    assert r.status_code == 422


def test_http_pricing_preview_does_not_touch_stock(client, repo):
    before = repo.get_product("mawa").stock
    r = client.post("/invoices/pricing", json={"items": [{"productId": "mawa", "quantity": 3}]})
    assert r.json()["total"] == 1200
    assert repo.get_product("mawa").stock == before


def test_http_staff_lifecycle(client):
    r = client.post("/staff", json={"name": "Kavita Rao", "role": "Production", "password": "pw"})
    staff_id = r.json()["id"]
    assert staff_id == "S006"

    r = client.put(f"/staff/{staff_id}/salary", json={"salary": 16000})
    assert r.json()["salary"] == 16000

    assert client.delete(f"/staff/{staff_id}").json()["success"] is True
    assert client.delete(f"/staff/{staff_id}").status_code == 404


def test_http_deliveries_filter_and_update(client):
    mine = client.get("/deliveries", params={"staff_id": "S005"}).json()
    assert [d["id"] for d in mine] == ["D002", "D004"]

    pending = mine[0]
    r = client.put(f"/deliveries/{pending['id']}", json={**pending, "status": "Returned"})
    assert r.status_code == 400

    r = client.put(f"/deliveries/{pending['id']}",
                   json={**pending, "status": "Returned", "reason": "Door locked"})
    assert r.status_code == 200
    assert r.json()["reason"] == "Door locked"


def test_http_route_validation(client):
    r = client.post("/routes", json={"name": "Shop", "staffId": "S002", "zone": "Counter"})
    assert r.status_code == 400
    r = client.post("/routes", json={"name": "Ghost", "staffId": "S999"})
    assert r.status_code == 404


def test_http_conversion_and_dashboard(client, repo):
    before = repo.get_product("curd").stock
    r = client.post("/conversions", json={"fromProduct": "Buffalo Milk", "fromQuantity": 20,
                                          "toProduct": "Curd (Dahi)", "toQuantity": 18, "staffId": "S003"})
    assert r.status_code == 200
    assert repo.get_product("curd").stock == before + 18

    stats = client.get("/dashboard").json()["deliveryStats"]
    assert stats == {"delivered": 1, "pending": 2, "returned": 1}


def test_http_salary_payment(client):
    r = client.post("/salaries", json={"staffId": "S004", "amount": 25000, "forMonth": "2024-07"})
    assert r.json()["id"] == "SR002"
    assert r.json()["paymentDate"] == "2024-07-15"


def test_http_update_product_stock(client):
    product = client.get("/products").json()[0]
    r = client.put(f"/products/{product['id']}", json={**product, "stock": 999})
    assert r.json()["stock"] == 999


def test_http_error_maps_crud_errors_only():
    assert http_error(NotFound("gone")).status_code == 404
    assert http_error(ValidationError("bad")).detail == "bad"
    assert http_error(DairyError()).status_code == 500
