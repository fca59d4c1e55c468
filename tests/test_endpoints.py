"""
HTTP tests for Pulse API endpoints
"""

import pytest

INVALID_TOKEN = {"ok": False, "msg": "invalid token"}
TOKEN_REQUIRED = {"ok": False, "msg": "token required"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["message"] == "Pulse API OK"
    assert data["version"]
    assert "X-Request-ID" in response.headers


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


@pytest.mark.parametrize("path", ["/stats/today", "/stats/reservations", "/events"])
class TestQueryTokenAuth:

    def test_missing_token(self, client, path):
        response = client.get(path)
        assert response.status_code == 401
        assert response.json() == TOKEN_REQUIRED

    def test_unknown_token(self, client, path):
        response = client.get(path, params={"token": "nobody"})
        assert response.status_code == 401
        assert response.json() == INVALID_TOKEN

    def test_malformed_profile_looks_like_unknown_token(self, client, path):
        response = client.get(path, params={"token": "broken"})
        assert response.status_code == 401
        assert response.json() == INVALID_TOKEN

    @pytest.mark.parametrize("token", ["shop\x00A", "x" * 300])
    def test_unusable_token_looks_like_unknown_token(self, client, path, token):
        response = client.get(path, params={"token": token})
        assert response.status_code == 401
        assert response.json() == INVALID_TOKEN


@pytest.mark.parametrize("path", ["/ingest/tx", "/ingest/reservation"])
class TestBearerAuth:

    def test_missing_header(self, client, path):
        response = client.post(path, json={"amount": 5})
        assert response.status_code == 401
        assert response.json() == TOKEN_REQUIRED

    def test_non_bearer_header(self, client, path):
        response = client.post(path, json={"amount": 5}, headers={"Authorization": "Token shopA"})
        assert response.status_code == 401
        assert response.json() == TOKEN_REQUIRED

    def test_unknown_token(self, client, path):
        response = client.post(path, json={"amount": 5}, headers={"Authorization": "Bearer nobody"})
        assert response.status_code == 401
        assert response.json() == INVALID_TOKEN


def test_ingest_then_today_stats(client, shop_headers):
    response = client.post("/ingest/tx", json={"amount": 50, "currency": "EUR", "item": "Coffee"},
                           headers=shop_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["transaction"]["amount"] == 50
    assert data["transaction"]["currency"] == "EUR"
    assert data["totalAmount"] == 50
    assert data["transactionCount"] == 1

    stats = client.get("/stats/today", params={"token": "shopA"})
    assert stats.status_code == 200
    assert stats.json() == {
        "ok": True,
        "totalAmount": 50,
        "transactionCount": 1,
        "date": data["transaction"]["timestamp"][:10],
    }


@pytest.mark.parametrize("amount", [0, -1, True])
def test_non_positive_amount_is_rejected(client, shop_headers, amount):
    response = client.post("/ingest/tx", json={"amount": amount}, headers=shop_headers)
    assert response.status_code == 400
    body = response.json()
    assert body["ok"] is False
    assert "amount" in body["msg"]

    stats = client.get("/stats/today", params={"token": "shopA"}).json()
    assert stats["totalAmount"] == 0
    assert stats["transactionCount"] == 0


def test_invalid_json_body(client, shop_headers):
    response = client.post("/ingest/tx", content=b"{amount: 5",
                           headers={**shop_headers, "Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"ok": False, "msg": "invalid JSON body"}


def test_reservation_missing_time_is_rejected(app, client, shop_headers):
    store = app.state.registry.get_or_create("shopA")
    listener = app.state.hub.subscribe(store, {})
    listener.get_nowait()

    response = client.post("/ingest/reservation",
                           json={"name": "Awa", "phone": "771234567", "persons": 2},
                           headers=shop_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["ok"] is False
    assert "time" in body["msg"]
    assert body["fields"] == ["time"]
    assert store.all_reservations() == ()
    assert listener.pending() == 0


def test_reservations_listed_in_time_order(client, shop_headers):
    for time in ("18:30", "09:00"):
        response = client.post("/ingest/reservation",
                               json={"name": "Awa", "phone": "771234567", "persons": 2, "time": time},
                               headers=shop_headers)
        assert response.status_code == 200
        reservation = response.json()["reservation"]
        assert reservation["status"] == "confirmed"
        assert reservation["table"] == "unassigned"

    data = client.get("/stats/reservations", params={"token": "shopA"}).json()
    assert data["ok"] is True
    assert data["count"] == 2
    assert data["date"] == reservation["date"]
    assert [r["time"] for r in data["reservations"]] == ["09:00", "18:30"]


def test_ingest_is_broadcast_to_live_subscribers(app, client, shop_headers):
    store = app.state.registry.get_or_create("shopA")
    listener = app.state.hub.subscribe(store, {})
    assert listener.get_nowait().startswith("event: bootstrap\n")

    client.post("/ingest/tx", json={"amount": 50, "item": "Coffee"}, headers=shop_headers)

    message = listener.get_nowait()
    assert message.startswith("event: tx\ndata: ")
    assert '"item":"Coffee"' in message
    assert listener.pending() == 0


def test_tenants_do_not_see_each_other(client, shop_headers):
    client.post("/ingest/tx", json={"amount": 75}, headers=shop_headers)
    client.post("/ingest/reservation",
                json={"name": "Awa", "phone": "1", "persons": 2, "time": "12:00"},
                headers=shop_headers)

    assert client.get("/stats/today", params={"token": "shopB"}).json()["transactionCount"] == 0
    assert client.get("/stats/reservations", params={"token": "shopB"}).json()["count"] == 0


def test_apps_do_not_share_state(config_dir, shop_headers):
    from fastapi.testclient import TestClient
    from pulse.main import create_app

    first = TestClient(create_app(config_dir=config_dir))
    second = TestClient(create_app(config_dir=config_dir))
    first.post("/ingest/tx", json={"amount": 10}, headers=shop_headers)

    assert second.get("/stats/today", params={"token": "shopA"}).json()["transactionCount"] == 0


def test_metrics_endpoint(client, shop_headers):
    client.post("/ingest/tx", json={"amount": 10}, headers=shop_headers)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "pulse_records_ingested_total" in response.text
    assert "pulse_requests_total" in response.text
