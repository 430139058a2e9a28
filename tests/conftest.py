"""Pytest configuration and fixtures."""
import os
import tempfile

# Settings are read at import time, so the environment must be ready first
_DB_DIR = tempfile.mkdtemp(prefix="finance-tracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["DEFAULT_BASE_CURRENCY"] = "THB"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from finance_tracker.database import engine, init_db
from finance_tracker.main import app
from finance_tracker.routers.convert import get_converter
from finance_tracker.services.currency import CurrencyConverter


RATES_URL = "https://rates.test/latest"


@pytest.fixture
def client():
    """A test client on a freshly created schema."""
    SQLModel.metadata.drop_all(engine)
    init_db()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(client, email="ana@example.com", password="secret123", base_currency="THB"):
    resp = client.post(
        "/auth/register",
        json={"email": email, "password": password, "base_currency": base_currency},
    )
    assert resp.status_code == 201, resp.text
    token = client.post("/auth/token", data={"username": email, "password": password})
    assert token.status_code == 200, token.text
    return {"Authorization": f"Bearer {token.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)


@pytest.fixture
def category_ids(client, auth_headers):
    """Name -> id of the default categories of the registered user."""
    resp = client.get("/categories", headers=auth_headers)
    return {c["name"]: c["id"] for c in resp.json()}


@pytest.fixture
def rate_provider():
    """Stub rate provider recording every request it receives.

    Set ``status`` or ``rates`` on the returned object to shape the reply.
    """

    class Provider:
        def __init__(self):
            self.requests = []
            self.status = 200
            self.rates = {"EUR": 0.9}

        def handler(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if self.status != 200:
                return httpx.Response(self.status, json={"message": "boom"})
            return httpx.Response(200, json={"amount": 1.0, "base": request.url.params["from"], "rates": self.rates})

        def converter(self) -> CurrencyConverter:
            return CurrencyConverter(httpx.Client(transport=httpx.MockTransport(self.handler)), base_url=RATES_URL)

    return Provider()


@pytest.fixture
def stub_converter(client, rate_provider):
    app.dependency_overrides[get_converter] = rate_provider.converter
    return rate_provider


@pytest.fixture
def register_user(client):
    """Register an account and return bearer headers for it."""

    def _register(**kwargs):
        return register(client, **kwargs)

    return _register
