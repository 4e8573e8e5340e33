"""
Tests for Wallets API endpoints
"""


def test_create_wallet_defaults(client):
    response = client.post("/wallets", json={"name": "Наличные"})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["type"] == "other"
    assert data["currency"] == "IDR"
    assert data["balance"] == 0
    assert data["is_archived"] is False


def test_create_wallet_with_negative_initial_balance(client, make_wallet):
    data = make_wallet("Кредитка", -5000, type="credit")
    assert data["type"] == "credit"
    assert data["balance"] == -5000
    assert data["initial_balance"] == -5000


def test_create_wallet_invalid_type(client):
    response = client.post("/wallets", json={"name": "X", "type": "CREDIT"})
    assert response.status_code == 400
    assert response.json()["field"] == "type"


def test_update_ignores_balance(client, make_wallet):
    wallet = make_wallet("BCA", 1000)
    response = client.put(f"/wallets/{wallet['id']}", json={"name": "BCA Main", "balance": 1})

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "BCA Main"
    assert response.json()["data"]["balance"] == 1000


def test_archive_hides_wallet_and_blocks_new_transactions(client, make_wallet):
    wallet = make_wallet()
    assert client.delete(f"/wallets/{wallet['id']}").json() == {"success": True}

    assert client.get("/wallets").json()["data"] == []
    assert len(client.get("/wallets", params={"include_archived": True}).json()["data"]) == 1

    response = client.post("/transactions", json={
        "type": "income", "amount": 10, "wallet_id": wallet["id"], "date": "2024-03-15",
    })
    assert response.status_code == 400


def test_note_edit_after_archive(client, make_wallet):
    wallet = make_wallet()
    body = {"type": "expense", "amount": 40, "wallet_id": wallet["id"], "date": "2024-03-15"}
    tx = client.post("/transactions", json=body).json()["data"]
    client.delete(f"/wallets/{wallet['id']}")

    response = client.put(f"/transactions/{tx['id']}", json={**body, "note": "такси"})

    assert response.status_code == 200
    assert response.json()["data"]["note"] == "такси"


def test_initial_balance_beyond_bigint_is_400(client):
    response = client.post("/wallets", json={"name": "X", "initial_balance": 2**63})
    assert response.status_code == 400


def test_reconcile_endpoints(client, make_wallet):
    wallet = make_wallet("BCA", 1000)
    client.post("/transactions", json={
        "type": "expense", "amount": 100, "wallet_id": wallet["id"], "date": "2024-03-15",
    })

    response = client.post(f"/wallets/{wallet['id']}/reconcile")
    assert response.status_code == 200
    assert response.json()["data"] == {
        "wallet_id": wallet["id"],
        "previous_balance": 900,
        "calculated_balance": 900,
        "corrected": False,
        "removed_synthetic": 0,
    }

    reports = client.post("/wallets/reconcile").json()["data"]
    assert [r["wallet_id"] for r in reports] == [wallet["id"]]

    assert client.post("/wallets/missing/reconcile").status_code == 404


def test_get_missing_wallet(client):
    response = client.get("/wallets/missing")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Кошелёк не найден"}
