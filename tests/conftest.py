# tests/conftest.py
import os

# La app a nivel de módulo se construye al importar; usamos SQLite en memoria
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "clave-de-pruebas")

import uuid

import pytest
from fastapi.testclient import TestClient

from auth_service.config import Settings
from auth_service.main import create_app

TEST_PASSWORD = "password123"


@pytest.fixture
def settings():
    """Cada prueba usa su propia base en memoria y su propia clave de firma."""
    return Settings(
        secret_key=f"secret-{uuid.uuid4()}",
        database_url="sqlite://",
        enable_admin_endpoints=True,
    )


@pytest.fixture
def api_app(settings):
    return create_app(settings)


@pytest.fixture
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture
def test_user_token(client):
    """
    Registra un usuario único y devuelve su id, email y token de signup.
    """
    email = f"testuser_{uuid.uuid4()}@example.com"
    r = client.post("/api/auth/signup", json={"email": email, "password": TEST_PASSWORD})
    assert r.status_code == 201, r.text
    data = r.json()
    return {"id": data["id"], "email": email, "token": data["token"]}


# Fixture de utilidad para las cabeceras de autorización
@pytest.fixture
def auth_headers(test_user_token):
    return {"Authorization": f"Bearer {test_user_token['token']}"}
