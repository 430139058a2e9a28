import pytest


@pytest.fixture
def add_tx(client, auth_headers):
    def _add(amount, category_id=None, type="expense", date="2025-03-15"):
        resp = client.post(
            "/transactions",
            json={"amount": amount, "type": type, "category_id": category_id, "date": date},
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _add


def create_budget(client, headers, amount, category_id=None, month=3, year=2025):
    return client.post(
        "/budgets",
        json={"amount": amount, "category_id": category_id, "month": month, "year": year},
        headers=headers,
    )


def test_total_budget_progress_counts_only_month_expenses(client, auth_headers, category_ids, add_tx):
    add_tx(400, category_ids["Food"])
    add_tx(350, category_ids["Bills"], date="2025-03-31")
    add_tx(5000, category_ids["Salary"], type="income")
    add_tx(999, category_ids["Food"], date="2025-04-01")

    resp = create_budget(client, auth_headers, 1000)
    assert resp.status_code == 201, resp.text
    body = resp.json()

    assert body["category_id"] is None
    assert body["currency"] == "THB"
    assert body["progress"] == {"spent": 750.0, "remaining": 250.0, "percent_used": 75.0}


def test_category_budget_scoping_and_overspend(client, auth_headers, category_ids, add_tx):
    add_tx(700, category_ids["Food"])
    add_tx(500, category_ids["Food"])
    add_tx(300, category_ids["Transport"])

    food = create_budget(client, auth_headers, 1000, category_ids["Food"]).json()
    assert food["category_name"] == "Food"
    assert food["progress"]["spent"] == 1200
    assert food["progress"]["remaining"] == 0
    assert food["progress"]["percent_used"] == pytest.approx(120)

    create_budget(client, auth_headers, 2000)
    listed = client.get("/budgets", params={"month": 3, "year": 2025}, headers=auth_headers).json()

    assert [b["category_name"] for b in listed] == [None, "Food"]
    assert listed[0]["progress"]["spent"] == 1500


@pytest.mark.parametrize("amount", [0, -50])
def test_non_positive_amount_rejected(client, auth_headers, amount):
    resp = create_budget(client, auth_headers, amount)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Budget amount must be a positive number"}


def test_invalid_month_rejected(client, auth_headers):
    resp = create_budget(client, auth_headers, 100, month=13)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid month: 13"}


def test_month_zero_is_not_current_month(client, auth_headers):
    resp = client.get("/budgets", params={"month": 0, "year": 2025}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid month: 0"}

    resp = client.get("/dashboard", params={"month": 0, "year": 2025}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid month: 0"}


def test_duplicate_total_budget_conflicts(client, auth_headers, category_ids):
    assert create_budget(client, auth_headers, 1000).status_code == 201
    resp = create_budget(client, auth_headers, 500)
    assert resp.status_code == 409

    # A different month is fine, and so are category budgets
    assert create_budget(client, auth_headers, 500, month=4).status_code == 201
    assert create_budget(client, auth_headers, 100, category_ids["Food"]).status_code == 201


def test_income_category_budget_rejected(client, auth_headers, category_ids):
    resp = create_budget(client, auth_headers, 100, category_ids["Salary"])
    assert resp.status_code == 400


def test_update_and_delete_budget(client, auth_headers, category_ids, add_tx):
    add_tx(300, category_ids["Food"])
    budget = create_budget(client, auth_headers, 1000).json()

    resp = client.patch(f"/budgets/{budget['id']}", json={"amount": 600}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["progress"]["percent_used"] == pytest.approx(50)

    assert client.patch(f"/budgets/{budget['id']}", json={"amount": 0}, headers=auth_headers).status_code == 400
    assert client.patch(f"/budgets/{budget['id']}", json={}, headers=auth_headers).status_code == 400

    assert client.delete(f"/budgets/{budget['id']}", headers=auth_headers).status_code == 204
    resp = client.get(f"/budgets/{budget['id']}", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Budget not found"}


def test_budgets_are_private(client, auth_headers, register_user):
    budget = create_budget(client, auth_headers, 1000).json()
    other = register_user(email="bo@example.com")

    assert client.get(f"/budgets/{budget['id']}", headers=other).status_code == 404
    assert client.delete(f"/budgets/{budget['id']}", headers=other).status_code == 404
    assert client.get("/budgets", params={"month": 3, "year": 2025}, headers=other).json() == []
