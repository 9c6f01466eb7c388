from urllib.parse import quote

FOOD = "Food & Dining"


def _add_expense(client, headers, category, amount, when, title="Item"):
    r = client.post(
        "/api/expenses",
        json={"title": title, "amount": amount, "category": category, "date": when},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _set_budget(client, headers, category, amount, **extra):
    return client.post("/api/budgets", json={"category": category, "amount": amount, **extra}, headers=headers)


def test_budgets_require_auth(client):
    assert client.get("/api/budgets").status_code == 401
    assert client.get("/api/budgets/comparison").status_code == 401


def test_set_budget_upserts(client, auth_headers, db_session):
    r = _set_budget(client, auth_headers, FOOD, 300, alerts={"threshold": 70})
    assert r.status_code == 201
    created = r.json()["data"]
    assert created["alerts"] == {"enabled": True, "threshold": 70.0}
    assert created["period"] == "monthly"

    r2 = _set_budget(client, auth_headers, FOOD, 450.25, period="weekly")
    assert r2.status_code == 200
    updated = r2.json()["data"]
    assert updated["id"] == created["id"]
    assert updated["amount"] == 450.25
    assert updated["period"] == "weekly"
    # Threshold not sent on update keeps its stored value
    assert updated["alerts"]["threshold"] == 70.0

    from models.budget import Budget
    assert db_session.query(Budget).count() == 1


def test_put_budget_uses_path_category(client, auth_headers):
    r = client.put(f"/api/budgets/{quote('Bills & Utilities')}", json={"amount": 120}, headers=auth_headers)
    assert r.status_code == 201
    assert r.json()["data"]["category"] == "Bills & Utilities"


def test_set_budget_validation(client, auth_headers):
    assert _set_budget(client, auth_headers, "Groceries", 100).status_code == 422
    assert _set_budget(client, auth_headers, FOOD, -1).status_code == 422
    assert _set_budget(client, auth_headers, FOOD, 100, period="daily").status_code == 422
    assert _set_budget(client, auth_headers, FOOD, 100, alerts={"threshold": 120}).status_code == 422


def test_comparison_summary_and_rows(client, auth_headers):
    _set_budget(client, auth_headers, FOOD, 300)
    _set_budget(client, auth_headers, "Shopping", 200)
    _set_budget(client, auth_headers, "Travel", 50, period="weekly")  # not part of the monthly view

    _add_expense(client, auth_headers, FOOD, 100, "2024-03-05T12:00:00")
    _add_expense(client, auth_headers, FOOD, 160, "2024-03-31T23:30:00")
    _add_expense(client, auth_headers, "Shopping", 270, "2024-03-10T10:00:00")
    _add_expense(client, auth_headers, "Travel", 120, "2024-03-20T08:00:00")
    _add_expense(client, auth_headers, FOOD, 999, "2024-04-01T00:00:00")

    r = client.get("/api/budgets/comparison?period=monthly&date=2024-03-15", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()["data"]

    assert data["period"] == {"type": "monthly", "start": "2024-03-01T00:00:00", "end": "2024-03-31T00:00:00"}
    assert data["summary"] == {
        "totalBudget": 500.0,
        "totalSpent": 650.0,
        "totalRemaining": 0.0,
        "overallPercentage": 130.0,
    }
    food, shopping = data["categories"]
    assert food["category"] == FOOD
    assert food["spent"] == 260.0
    assert food["percentage"] == 86.67
    assert food["status"] == "warning"
    assert food["remaining"] == 40.0
    assert shopping["status"] == "over"
    assert shopping["overage"] == 70.0


def test_comparison_unknown_period_falls_back_to_monthly(client, auth_headers):
    r = client.get("/api/budgets/comparison?period=fortnightly&date=2024-03-15", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["period"]["type"] == "monthly"
    assert r.json()["data"]["summary"]["overallPercentage"] == 0


def test_get_single_budget_with_period(client, auth_headers):
    _set_budget(client, auth_headers, FOOD, 300)
    _add_expense(client, auth_headers, FOOD, 260, "2024-03-31T23:59:00")

    r = client.get(f"/api/budgets/{quote(FOOD)}?date=2024-03-15", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["spent"] == 260.0
    assert data["status"] == "warning"
    assert data["period"] == {"type": "monthly", "start": "2024-03-01T00:00:00", "end": "2024-03-31T00:00:00"}


def test_list_budgets_uses_each_budget_period(client, auth_headers):
    _set_budget(client, auth_headers, "Travel", 100, period="weekly")
    _set_budget(client, auth_headers, FOOD, 300)
    _set_budget(client, auth_headers, "Entertainment", 0)

    _add_expense(client, auth_headers, "Travel", 50, "2024-03-12T09:00:00")
    _add_expense(client, auth_headers, "Travel", 70, "2024-03-05T09:00:00")  # previous week
    _add_expense(client, auth_headers, FOOD, 90, "2024-03-02T09:00:00")
    _add_expense(client, auth_headers, "Entertainment", 20, "2024-03-12T20:00:00")

    r = client.get("/api/budgets?date=2024-03-13", headers=auth_headers)
    assert r.status_code == 200
    rows = {row["category"]: row for row in r.json()["data"]}

    assert list(rows) == [FOOD, "Entertainment", "Travel"]
    assert rows["Travel"]["spent"] == 50.0
    assert rows["Travel"]["status"] == "good"
    assert rows[FOOD]["spent"] == 90.0
    assert rows[FOOD]["percentage"] == 30.0
    assert rows["Entertainment"]["status"] == "no-budget"


def test_delete_budget(client, auth_headers):
    _set_budget(client, auth_headers, FOOD, 300)
    path = f"/api/budgets/{quote(FOOD)}"

    assert client.delete(path, headers=auth_headers).status_code == 200
    assert client.get(path, headers=auth_headers).status_code == 404
    assert client.delete(path, headers=auth_headers).status_code == 404


def test_budgets_are_scoped_to_user(client, register):
    alice = register(email="alice@example.com")
    bob = register(email="bob@example.com")
    _set_budget(client, alice, FOOD, 300)

    assert client.get("/api/budgets", headers=bob).json()["data"] == []
    assert client.get(f"/api/budgets/{quote(FOOD)}", headers=bob).status_code == 404


def test_invalid_reference_date(client, auth_headers):
    r = client.get("/api/budgets/comparison?date=not-a-date", headers=auth_headers)
    assert r.status_code == 400
