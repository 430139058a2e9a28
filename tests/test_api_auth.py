def test_register_seeds_default_categories(client, register_user):
    headers = register_user(base_currency="usd")

    me = client.get("/auth/me", headers=headers).json()
    assert me["email"] == "ana@example.com"
    assert me["base_currency"] == "USD"

    categories = client.get("/categories", headers=headers).json()
    assert all(c["is_default"] for c in categories)
    assert {"Salary", "Food", "Other"} <= {c["name"] for c in categories}

    expense_only = client.get("/categories", params={"type": "expense"}, headers=headers).json()
    assert expense_only and all(c["type"] == "expense" for c in expense_only)


def test_register_defaults_base_currency(client):
    resp = client.post("/auth/register", json={"email": "bo@example.com", "password": "secret123"})
    assert resp.status_code == 201
    assert resp.json()["base_currency"] == "THB"


def test_register_duplicate_email(client, register_user):
    register_user()
    resp = client.post("/auth/register", json={"email": "ANA@example.com", "password": "secret123"})
    assert resp.status_code == 409


def test_register_unsupported_currency(client):
    resp = client.post(
        "/auth/register",
        json={"email": "bo@example.com", "password": "secret123", "base_currency": "XYZ"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unsupported currency: XYZ"}


def test_login_sets_cookie_and_rejects_bad_password(client, register_user):
    register_user()

    bad = client.post("/auth/login", json={"email": "ana@example.com", "password": "wrongpass"})
    assert bad.status_code == 401

    ok = client.post("/auth/login", json={"email": "ana@example.com", "password": "secret123"})
    assert ok.status_code == 200
    assert "access_token" in ok.cookies
    # The cookie alone authenticates later requests
    assert client.get("/auth/me").status_code == 200


def test_protected_routes_need_a_token(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/budgets").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_update_base_currency(client, auth_headers):
    resp = client.patch("/auth/me", json={"base_currency": "eur"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["base_currency"] == "EUR"
