from conftest import ALICE, BOB, CAROL, GROUP_ID, OUTSIDER

EXPENSES = "/api/v1/expense/"


def equal_expense(payer, amount, users, **extra):
    return {
        "group_id": GROUP_ID,
        "payer_id": payer,
        "amount": amount,
        "split_policy": "EQUAL",
        "splits": [{"user_id": u} for u in users],
        **extra,
    }


async def test_root(client):
    res = await client.get("/")
    assert res.status_code == 200


async def test_create_expense(client, auth_headers):
    res = await client.post(
        EXPENSES, json=equal_expense(ALICE, "100.00", [ALICE, BOB, CAROL], title="Dinner"),
        headers=auth_headers(ALICE),
    )

    assert res.status_code == 201
    body = res.json()
    assert body["amount"] == "100.00"
    assert [s["amount"] for s in body["splits"]] == ["33.34", "33.33", "33.33"]
    assert {(d["debtor_id"], d["amount"]) for d in body["debts"]} == {(BOB, "33.33"), (CAROL, "33.33")}


async def test_requires_token(client):
    res = await client.post(EXPENSES, json=equal_expense(ALICE, "10.00", [ALICE, BOB]))
    assert res.status_code == 401


async def test_rejects_bad_token(client):
    res = await client.get(f"{EXPENSES}1", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


async def test_unknown_expense_is_404(client, auth_headers):
    res = await client.get(f"{EXPENSES}999", headers=auth_headers(ALICE))

    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


async def test_business_validation_is_400_with_field(client, auth_headers):
    res = await client.post(
        EXPENSES, json=equal_expense(ALICE, "10.00", [ALICE, OUTSIDER]), headers=auth_headers(ALICE)
    )

    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"
    assert res.json()["field"] == "splits.user_id"


async def test_schema_validation_is_422(client, auth_headers):
    res = await client.post(
        EXPENSES, json=equal_expense(ALICE, "-5.00", [ALICE, BOB]), headers=auth_headers(ALICE)
    )
    assert res.status_code == 422


async def test_outsider_is_403(client, auth_headers):
    res = await client.get(f"/api/v1/groups/{GROUP_ID}/expenses", headers=auth_headers(OUTSIDER))

    assert res.status_code == 403
    assert res.json()["code"] == "AUTHORIZATION_DENIED"


async def test_update_and_delete(client, auth_headers):
    created = (await client.post(
        EXPENSES, json=equal_expense(ALICE, "30.00", [ALICE, BOB]), headers=auth_headers(ALICE)
    )).json()

    res = await client.patch(
        f"{EXPENSES}{created['id']}", json={"amount": "40.00"}, headers=auth_headers(ALICE)
    )
    assert res.status_code == 200
    assert res.json()["debts"][0]["amount"] == "20.00"

    res = await client.delete(f"{EXPENSES}{created['id']}", headers=auth_headers(ALICE))
    assert res.status_code == 200

    res = await client.get(f"{EXPENSES}{created['id']}", headers=auth_headers(ALICE))
    assert res.status_code == 404


async def test_settlement_flow(client, auth_headers):
    await client.post(
        EXPENSES, json=equal_expense(ALICE, "90.00", [ALICE, BOB, CAROL]), headers=auth_headers(ALICE)
    )
    base = f"/api/v1/groups/{GROUP_ID}/settlements"

    available = (await client.get(f"{base}/available", headers=auth_headers(BOB))).json()
    assert available["mode"] == "DETAILED"
    assert available["count"] == 2
    assert available["total_amount"] == "60.00"

    bob_pays = next(t for t in available["transactions"] if t["from_user_id"] == BOB)
    res = await client.post(
        f"{base}/execute",
        json={"transaction_ids": [bob_pays["id"]], "payment_method": "cash"},
        headers=auth_headers(BOB),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["executed_count"] == 1
    assert body["executed"][0]["status"] == "SETTLED"
    assert body["total_settled_amount"] == "30.00"
    assert [t["from_user_id"] for t in body["remaining"]] == [CAROL]

    res = await client.post(
        f"{base}/execute", json={"transaction_ids": [bob_pays["id"]]}, headers=auth_headers(BOB)
    )
    assert res.status_code == 404
    assert res.json()["code"] == "SETTLEMENT_TRANSACTION_NOT_FOUND"

    summary = (await client.get(f"{base}/summary", headers=auth_headers(CAROL))).json()
    assert summary["settled_debts"] == 1
    assert summary["unsettled_amount"] == "30.00"

    history = (await client.get(f"{base}/history?size=1", headers=auth_headers(CAROL))).json()
    assert history["total"] == 2
    assert history["has_next"] is True

    analytics = (await client.get(f"/api/v1/users/{BOB}/settlements/analytics", headers=auth_headers(BOB))).json()
    assert analytics["settled_count"] == 1


async def test_execute_without_ids_is_400(client, auth_headers):
    res = await client.post(
        f"/api/v1/groups/{GROUP_ID}/settlements/execute", json={}, headers=auth_headers(ALICE)
    )
    assert res.status_code == 400


async def test_simplified_mode_query_param(client, auth_headers):
    await client.post(
        EXPENSES, json=equal_expense(ALICE, "90.00", [ALICE, BOB, CAROL]), headers=auth_headers(ALICE)
    )
    res = await client.get(
        f"/api/v1/groups/{GROUP_ID}/settlements/available?mode=SIMPLIFIED", headers=auth_headers(ALICE)
    )
    assert res.json()["mode"] == "SIMPLIFIED"


async def test_balances(client, auth_headers):
    await client.post(
        EXPENSES, json=equal_expense(ALICE, "90.00", [ALICE, BOB, CAROL]), headers=auth_headers(ALICE)
    )

    group = (await client.get(f"/api/v1/groups/{GROUP_ID}/balances", headers=auth_headers(BOB))).json()
    assert {n["user_id"]: n["balance"] for n in group["net"]} == {ALICE: "60.00", BOB: "-30.00", CAROL: "-30.00"}
    assert [(s["from_name"], s["to_name"]) for s in group["settlements"]] == [("Bob", "Alice"), ("Carol", "Alice")]

    mine = (await client.get(f"/api/v1/users/{ALICE}/balance", headers=auth_headers(ALICE))).json()
    assert mine["net_balance"] == "60.00"

    res = await client.get(f"/api/v1/users/{BOB}/balance", headers=auth_headers(ALICE))
    assert res.status_code == 403


async def test_other_users_analytics_forbidden(client, auth_headers):
    res = await client.get(f"/api/v1/users/{BOB}/settlements/summary", headers=auth_headers(ALICE))
    assert res.status_code == 403
