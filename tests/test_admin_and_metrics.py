# tests/test_admin_and_metrics.py
import uuid

from fastapi.testclient import TestClient

from auth_service.config import Settings
from auth_service.main import create_app


def test_admin_users_lists_newest_first(client):
    emails = [f"admin_{i}_{uuid.uuid4()}@example.com" for i in range(3)]
    for email in emails:
        assert client.post("/api/auth/signup", json={"email": email, "password": "x"}).status_code == 201

    r = client.get("/api/admin/users")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert [u["email"] for u in body["users"]] == list(reversed(emails))
    assert all("password_hash" not in u for u in body["users"])
    assert all(u["created_at"] for u in body["users"])


def test_admin_users_filter_by_email(client, test_user_token):
    client.post("/api/auth/signup", json={"email": f"other_{uuid.uuid4()}@example.com", "password": "x"})

    r = client.get("/api/admin/users", params={"email": test_user_token["email"]})
    users = r.json()["users"]
    assert len(users) == 1
    assert users[0]["id"] == test_user_token["id"]


def test_admin_users_disabled_by_default():
    app = create_app(Settings(secret_key="s", database_url="sqlite://"))
    with TestClient(app) as client:
        r = client.get("/api/admin/users")
    assert r.status_code == 404


def test_metrics_endpoint_counts_requests(client):
    client.get("/api/health")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "auth_requests_total" in r.text
    assert 'endpoint="/api/health"' in r.text


def test_metrics_do_not_label_unmatched_paths(client):
    unique = uuid.uuid4().hex
    assert client.get(f"/no-such-route/{unique}").status_code == 404
    r = client.get("/metrics")
    assert unique not in r.text
    assert 'endpoint="unmatched"' in r.text
