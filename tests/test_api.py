from fastapi.testclient import TestClient

from clinic_queue.domain.errors import StoreUnavailable
from clinic_queue.main import create_app
from clinic_queue.service.queue_engine import QueueEngine, reset_engine
from clinic_queue.store import InMemoryTokenStore


def post_token(client, name, vip=False, phone="(555) 123-4567"):
    r = client.post("/api/tokens", json={"patientName": name, "phoneNumber": phone, "isVIP": vip})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_create_token_returns_camel_case_record(client):
    r = client.post("/api/tokens", json={"patientName": " Alice ", "phoneNumber": "(555) 123-4567"})
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["tokenNumber"] == 1
    assert data["patientName"] == "Alice"
    assert data["phoneNumber"] == "5551234567"
    assert data["isVIP"] is False
    assert data["status"] == "waiting"
    assert data["id"] and data["createdAt"]


def test_create_token_validation_error_names_the_field(client):
    r = client.post("/api/tokens", json={"patientName": "Al", "phoneNumber": "5551234567"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["error_code"] == "validation_failed"
    assert "patientName" in body["fields"]
    assert client.get("/api/tokens").json()["data"] == []


def test_create_token_missing_field_is_rejected(client):
    r = client.post("/api/tokens", json={"patientName": "Alice"})
    assert r.status_code == 422
    assert r.json()["fields"].keys() == {"phoneNumber"}


def test_create_token_reports_missing_name_and_bad_phone_together(client):
    r = client.post("/api/tokens", json={"phoneNumber": "123"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["error_code"] == "validation_failed"
    assert set(body["fields"]) == {"patientName", "phoneNumber"}
    assert client.get("/api/tokens").json()["data"] == []


def test_create_token_non_string_name_uses_error_envelope(client):
    r = client.post("/api/tokens", json={"patientName": 12345, "phoneNumber": "5551234567", "isVIP": "yes"})
    assert r.status_code == 422
    body = r.json()
    assert body["error_code"] == "validation_failed"
    assert set(body["fields"]) == {"patientName", "isVIP"}


def test_list_tokens_in_number_order(client):
    for name in ("Alice", "Bobby", "Carol"):
        post_token(client, name)
    data = client.get("/api/tokens").json()["data"]
    assert [t["tokenNumber"] for t in data] == [1, 2, 3]


def test_current_is_null_until_advance(client):
    post_token(client, "Alice")
    r = client.get("/api/tokens/current")
    assert r.status_code == 200
    assert r.json()["data"] is None


def test_advance_flow_serves_vip_first(client):
    a = post_token(client, "Alice")
    b = post_token(client, "Bobby", vip=True)

    first = client.patch("/api/tokens/next").json()["data"]
    assert first["id"] == b["id"]
    assert first["status"] == "serving"
    assert client.get("/api/tokens/current").json()["data"]["id"] == b["id"]

    second = client.patch("/api/tokens/next").json()["data"]
    assert second["id"] == a["id"]
    statuses = {t["id"]: t["status"] for t in client.get("/api/tokens").json()["data"]}
    assert statuses == {a["id"]: "serving", b["id"]: "completed"}


def test_advance_on_empty_queue_is_not_an_error(client):
    r = client.patch("/api/tokens/next")
    assert r.status_code == 200
    body = r.json()
    assert body["data"] is None
    assert body["message"] == "No more patients in queue"


def test_update_status(client):
    a = post_token(client, "Alice")
    r = client.patch(f"/api/tokens/{a['id']}", json={"status": "skipped"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "skipped"


def test_update_status_unknown_id_is_404(client):
    r = client.patch("/api/tokens/does-not-exist", json={"status": "skipped"})
    assert r.status_code == 404
    assert r.json()["error_code"] == "not_found"


def test_update_status_out_of_terminal_is_409(client):
    a = post_token(client, "Alice")
    client.patch(f"/api/tokens/{a['id']}", json={"status": "canceled"})
    r = client.patch(f"/api/tokens/{a['id']}", json={"status": "waiting"})
    assert r.status_code == 409
    assert r.json()["error_code"] == "invalid_transition"


def test_update_status_rejects_unknown_status_value(client):
    a = post_token(client, "Alice")
    r = client.patch(f"/api/tokens/{a['id']}", json={"status": "done"})
    assert r.status_code == 422
    assert r.json()["error_code"] == "validation_failed"
    assert "status" in r.json()["fields"]


def test_reorder_sets_vip_and_changes_next(client):
    post_token(client, "Alice")
    c = post_token(client, "Carol")
    r = client.patch(f"/api/tokens/reorder/{c['id']}", json={"isVIP": True})
    assert r.status_code == 200
    body = r.json()
    assert body["data"]["isVIP"] is True
    assert body["message"] == "VIP status updated successfully"
    assert client.patch("/api/tokens/next").json()["data"]["id"] == c["id"]


def test_reorder_unknown_id_is_404(client):
    r = client.patch("/api/tokens/reorder/nope", json={"isVIP": True})
    assert r.status_code == 404


def test_summary(client):
    post_token(client, "Alice")
    b = post_token(client, "Bobby", vip=True)
    client.patch("/api/tokens/next")
    data = client.get("/api/tokens/summary").json()["data"]
    assert data["total"] == 2
    assert data["counts"]["serving"] == 1
    assert data["counts"]["waiting"] == 1
    assert data["current"]["id"] == b["id"]
    assert data["nextUp"]["patientName"] == "Alice"


def test_health_and_request_id(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.json()["store"] == "connected"
    assert r.headers["X-Request-ID"] == "req-123"


class DownStore(InMemoryTokenStore):
    def _down(self, *args, **kwargs):
        raise StoreUnavailable("connection refused")

    ping = list_all = find_by_status = max_token_number = _down


def test_store_unavailable_maps_to_503():
    app = create_app(QueueEngine(DownStore(), number_retries=2))
    try:
        with TestClient(app) as c:
            r = c.get("/api/tokens")
            assert r.status_code == 503
            assert r.json()["error_code"] == "store_unavailable"

            health = c.get("/api/health").json()
            assert health["status"] == "degraded"
            assert health["store"] == "disconnected"
    finally:
        reset_engine()
