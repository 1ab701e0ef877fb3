from __future__ import annotations

from datetime import timedelta

from coinstore import crud
from coinstore.core import security
from coinstore.enums import FulfillmentReason
from coinstore.integrations.rcon import FulfillmentOutcome


def _login(client, identifier: str = "steve@example.com", password: str = "diamond-pickaxe"):
    r = client.post(
        "/api/v1/auth/login", json={"identifier": identifier, "password": password}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["code"] == 0
    return {"Authorization": f"Bearer {body['data']['access_token']}"}


def _buy(client, headers, product_id) -> dict:
    r = client.post(f"/api/v1/shop/buy/{product_id}", headers=headers)
    assert r.status_code == 200
    return r.json()["data"]


def _pack_id(products, price) -> int:
    return next(p.id for p in products if p.price_inr == price)


def test_login_with_email_or_name(client, steve):
    r = client.post(
        "/api/v1/auth/login", json={"identifier": "STEVE@example.com", "password": "diamond-pickaxe"}
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["user"]["minecraft_username"] == "Steve"
    assert data["user"]["coin_balance"] == 0
    assert data["expires_in"] == 7 * 24 * 3600

    headers = _login(client, identifier="Steve Player")
    r = client.get("/api/v1/user/profile", headers=headers)
    assert r.json()["data"]["email"] == "steve@example.com"


def test_login_wrong_password(client, steve):
    r = client.post(
        "/api/v1/auth/login", json={"identifier": "steve@example.com", "password": "nope"}
    )
    assert r.status_code == 401
    assert r.json() == {"code": 401001, "message": "Wrong credentials", "data": None}


def test_login_validation_error(client):
    r = client.post("/api/v1/auth/login", json={})
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == 422000
    assert body["data"]["errors"]


def test_shop_lists_active_packs_by_price(client, db, products, steve):
    retired = products[-1]
    retired.active = False
    db.add(retired)
    db.commit()

    r = client.get("/api/v1/shop", headers=_login(client))

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["coin_rate"] == 9
    prices = [p["price_inr"] for p in data["products"]]
    assert prices == [45, 99, 149, 249, 399, 599, 999]


def test_buy_creates_pending_order_with_snapshot(client, products, steve):
    headers = _login(client)

    order = _buy(client, headers, _pack_id(products, 99))

    assert order["status"] == "PENDING_VERIFICATION"
    assert order["price_inr"] == 99
    assert order["coins"] == 174
    assert order["payment_method"] == "UPI_GPAY"
    assert order["order_no"].startswith("NC-")
    assert order["paid_at"] is None


def test_buy_unknown_or_inactive_product(client, db, products, steve):
    headers = _login(client)
    r = client.post("/api/v1/shop/buy/1", headers=headers)
    assert r.status_code == 404
    assert r.json()["code"] == 404201

    pack = products[0]
    pack.active = False
    db.add(pack)
    db.commit()
    r = client.post(f"/api/v1/shop/buy/{pack.id}", headers=headers)
    assert r.json()["code"] == 404201


def test_payment_page_and_proof(client, products, steve):
    headers = _login(client)
    order = _buy(client, headers, _pack_id(products, 149))

    r = client.get(f"/api/v1/order/{order['id']}/pay-upi", headers=headers)
    assert r.status_code == 200
    info = r.json()["data"]
    assert info["upi_id"] == "yourupiid@okaxis"
    assert info["order"]["product_name"] == "NamoCoins Pack 149"

    r = client.post(
        f"/api/v1/order/{order['id']}/proof",
        headers=headers,
        json={"upi_txn_id": "  412345678901 ", "payment_proof_url": "https://cdn.example.com/p.png"},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["upi_txn_id"] == "412345678901"
    assert data["payment_proof_url"] == "https://cdn.example.com/p.png"
    assert data["status"] == "PENDING_VERIFICATION"

    # a second submission without a screenshot keeps the first one
    r = client.post(
        f"/api/v1/order/{order['id']}/proof", headers=headers, json={"upi_txn_id": "412345678902"}
    )
    assert r.json()["data"]["payment_proof_url"] == "https://cdn.example.com/p.png"


def test_orders_are_private(client, db, products, steve):
    crud.create_user(session=db, email="alex@example.com", name="Alex", password="alex-pass")
    order = _buy(client, _login(client), _pack_id(products, 45))
    alex = _login(client, identifier="alex@example.com", password="alex-pass")

    for path in (f"/api/v1/order/{order['id']}", f"/api/v1/order/{order['id']}/pay-upi"):
        r = client.get(path, headers=alex)
        assert r.status_code == 404
        assert r.json()["code"] == 404101

    r = client.post(f"/api/v1/order/{order['id']}/proof", headers=alex, json={"upi_txn_id": "x"})
    assert r.json()["code"] == 404101

    r = client.get("/api/v1/order/list", headers=alex)
    assert r.json()["data"] == {"data": [], "count": 0}


def test_order_list_newest_first(client, products, steve):
    headers = _login(client)
    first = _buy(client, headers, _pack_id(products, 45))
    second = _buy(client, headers, _pack_id(products, 999))

    r = client.get("/api/v1/order/list", headers=headers)
    data = r.json()["data"]
    assert data["count"] == 2
    ids = {o["id"] for o in data["data"]}
    assert ids == {first["id"], second["id"]}

    r = client.get("/api/v1/order/list?page=2&page_size=1", headers=headers)
    assert len(r.json()["data"]["data"]) == 1


def test_admin_login(client):
    r = client.post(
        "/api/v1/auth/admin/login", json={"email": "admin@example.com", "password": "wrong"}
    )
    assert r.status_code == 401
    assert r.json()["code"] == 401001

    r = client.post(
        "/api/v1/auth/admin/login",
        json={"email": "admin@example.com", "password": "admin-secret"},
    )
    data = r.json()["data"]
    assert data["user"] is None
    assert data["access_token"]


def test_admin_routes_reject_customer_tokens(client, products, steve):
    headers = _login(client)

    for method, path, body in (
        ("get", "/api/v1/admin/dashboard", None),
        ("post", "/api/v1/admin/settings/rate", {"coin_rate": 12}),
        ("post", "/api/v1/admin/order/1/status", {"status": "PAID"}),
        ("post", f"/api/v1/admin/product/{products[0].id}/recalc", None),
    ):
        r = client.request(method, path, headers=headers, json=body)
        assert r.status_code == 403
        assert r.json()["code"] == 403001


def test_admin_token_is_not_a_user_token(client, admin_headers):
    r = client.get("/api/v1/user/profile", headers=admin_headers)
    assert r.status_code == 401


def test_forged_admin_subject_is_rejected(client):
    token = security.create_access_token(
        "12345", expires_delta=timedelta(minutes=5), scope=security.ADMIN_SCOPE
    )
    r = client.get("/api/v1/admin/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_admin_marks_order_paid_end_to_end(client, products, steve, admin_headers, fulfillment, mail):
    headers = _login(client)
    order = _buy(client, headers, _pack_id(products, 99))

    r = client.post(
        f"/api/v1/admin/order/{order['id']}/status",
        headers=admin_headers,
        json={"status": "PAID"},
    )

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["previous_status"] == "PENDING_VERIFICATION"
    assert data["status"] == "PAID"
    assert data["balance_credited"] is True
    assert data["fulfillment"]["ok"] is True
    assert data["fulfillment"]["command"] == "playerpoints give Steve 174"
    assert data["notification"] == {"ok": True, "detail": None}
    assert fulfillment.calls == [("Steve", 174)]
    assert len(mail.sent) == 1
    assert order["order_no"] in mail.sent[0]["subject"]
    assert mail.sent[0]["to"] == "steve@example.com"

    profile = client.get("/api/v1/user/profile", headers=headers).json()["data"]
    assert profile["coin_balance"] == 174
    detail = client.get(f"/api/v1/order/{order['id']}", headers=headers).json()["data"]
    assert detail["status"] == "PAID"
    assert detail["paid_at"] is not None

    r = client.post(
        f"/api/v1/admin/order/{order['id']}/status",
        headers=admin_headers,
        json={"status": "PAID"},
    )
    data = r.json()["data"]
    assert data["balance_credited"] is False
    assert data["fulfillment"] is None
    assert fulfillment.calls == [("Steve", 174)]
    assert len(mail.sent) == 1
    profile = client.get("/api/v1/user/profile", headers=headers).json()["data"]
    assert profile["coin_balance"] == 174


def test_admin_paid_with_failed_grant(client, products, steve, admin_headers, fulfillment):
    fulfillment.outcome = FulfillmentOutcome(
        ok=False, reason=FulfillmentReason.RCON_ERROR, detail="Connection refused"
    )
    headers = _login(client)
    order = _buy(client, headers, _pack_id(products, 45))

    r = client.post(
        f"/api/v1/admin/order/{order['id']}/status",
        headers=admin_headers,
        json={"status": "PAID"},
    )

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["fulfillment"]["reason"] == "RCON_ERROR"
    profile = client.get("/api/v1/user/profile", headers=headers).json()["data"]
    assert profile["coin_balance"] == 79


def test_admin_invalid_status_and_unknown_order(client, products, steve, admin_headers):
    order = _buy(client, _login(client), _pack_id(products, 45))

    r = client.post(
        f"/api/v1/admin/order/{order['id']}/status",
        headers=admin_headers,
        json={"status": "SHIPPED"},
    )
    assert r.status_code == 400
    assert r.json()["code"] == 400101

    r = client.post(
        "/api/v1/admin/order/987654321/status", headers=admin_headers, json={"status": "PAID"}
    )
    assert r.status_code == 404
    assert r.json()["code"] == 404101


def test_admin_rate_update(client, products, admin_headers):
    for bad in (0, 1001):
        r = client.post(
            "/api/v1/admin/settings/rate",
            headers=admin_headers,
            json={"coin_rate": bad, "recalc": True},
        )
        assert r.status_code == 400
        assert r.json()["code"] == 400201

    r = client.post(
        "/api/v1/admin/settings/rate",
        headers=admin_headers,
        json={"coin_rate": 12, "recalc": True},
    )
    assert r.json()["data"] == {"coin_rate": 12, "repriced": 8}

    dashboard = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()["data"]
    assert dashboard["coin_rate"] == 12
    coins = {p["price_inr"]: p["coins"] for p in dashboard["products"]}
    assert coins[45] == 540
    assert coins[99] == 1198


def test_admin_product_edit_and_recalc(client, products, admin_headers):
    pack_id = _pack_id(products, 249)

    r = client.post(
        f"/api/v1/admin/product/{pack_id}/update",
        headers=admin_headers,
        json={"name": "Big Pack", "price_inr": 250, "coins": 0, "active": True, "best_seller": True},
    )
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Big Pack"
    assert r.json()["data"]["coins"] == 0

    r = client.post(
        f"/api/v1/admin/product/{pack_id}/update",
        headers=admin_headers,
        json={"name": "Big Pack", "price_inr": 0, "coins": 10},
    )
    assert r.status_code == 400
    assert r.json()["code"] == 400202

    r = client.post(
        "/api/v1/admin/product/1/update",
        headers=admin_headers,
        json={"name": "Ghost", "price_inr": 10, "coins": 10},
    )
    assert r.json()["code"] == 404201

    r = client.post(f"/api/v1/admin/product/{pack_id}/recalc", headers=admin_headers)
    assert r.json()["data"]["coins"] == 250 * 9 + 10

    r = client.post("/api/v1/admin/product/1/recalc", headers=admin_headers)
    assert r.status_code == 404


def test_admin_dashboard_shows_orders_with_users(client, products, steve, admin_headers):
    order = _buy(client, _login(client), _pack_id(products, 99))

    data = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()["data"]

    (row,) = data["orders"]
    assert row["id"] == order["id"]
    assert row["user_email"] == "steve@example.com"
    assert row["minecraft_username"] == "Steve"
    assert row["product_name"] == "NamoCoins Pack 99"
    assert len(data["products"]) == 8


def test_health_check(client):
    r = client.get("/api/v1/utils/health-check/")
    assert r.status_code == 200
    assert r.json() is True


def test_admin_recalc_with_out_of_range_stored_rate(client, db, products, admin_headers):
    crud.set_coin_rate(session=db, rate=5000)
    db.commit()

    r = client.post(
        f"/api/v1/admin/product/{_pack_id(products, 99)}/recalc", headers=admin_headers
    )

    assert r.status_code == 400
    assert r.json()["code"] == 400201
