import logging

from fakes import OTHER_USER_ID, PRODUCT_ID, USER_ID


def _create(client, headers, quantity=None):
    payload = {"product_id": PRODUCT_ID, "shipping_address": "1 Main St"}
    if quantity is not None:
        payload["quantity"] = quantity
    return client.post("/orders/", json=payload, headers=headers)


def test_requests_without_token_are_rejected(client):
    resp = client.get("/orders/")
    assert resp.status_code == 401


def test_requests_with_bad_token_are_rejected(client):
    resp = client.get("/orders/", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_create_order(client, user_headers):
    resp = _create(client, user_headers, quantity=3)

    assert resp.status_code == 201
    data = resp.json()
    assert data["total_amount"] == 30
    assert data["order_status"] == "pending"
    assert data["account"] == {"id": USER_ID, "email": "user@example.com"}
    assert data["product"]["name"] == "Desk Lamp"
    assert "X-Request-ID" in resp.headers


def test_create_order_insufficient_stock(client, user_headers):
    resp = _create(client, user_headers, quantity=9)

    assert resp.status_code == 409
    assert resp.json() == {
        "detail": "Insufficient stock. Only 5 items available.",
        "code": "insufficient_stock",
        "available": 5,
    }


def test_create_order_rejects_zero_quantity(client, user_headers):
    resp = _create(client, user_headers, quantity=0)
    assert resp.status_code == 422


def test_listing_is_role_gated(client, user_headers, other_user_headers, admin_headers):
    _create(client, user_headers)
    _create(client, other_user_headers)

    mine = client.get("/orders/", headers=user_headers).json()
    everyone = client.get("/orders/", headers=admin_headers).json()

    assert [o["account_id"] for o in mine] == [USER_ID]
    assert mine[0]["account"] is None
    assert {o["account_id"] for o in everyone} == {USER_ID, OTHER_USER_ID}


def test_get_missing_order_is_404(client, user_headers):
    resp = client.get("/orders/404", headers=user_headers)
    assert resp.status_code == 404


def test_users_read_only_their_own_order(client, user_headers, other_user_headers, admin_headers):
    order_id = _create(client, user_headers).json()["id"]

    resp = client.get(f"/orders/{order_id}", headers=other_user_headers)
    assert resp.status_code == 404
    assert "user@example.com" not in resp.text

    own = client.get(f"/orders/{order_id}", headers=user_headers)
    assert own.status_code == 200
    assert own.json()["account_id"] == USER_ID
    assert own.json()["account"] is None

    full = client.get(f"/orders/{order_id}", headers=admin_headers)
    assert full.json()["account"] == {"id": USER_ID, "email": "user@example.com"}


def test_caller_id_reaches_service_logs(client, other_user_headers, caplog):
    caplog.set_level(logging.INFO)

    _create(client, other_user_headers)

    records = [r for r in caplog.records if r.name == "orderflow.application.service"]
    assert records
    assert all(getattr(r, "user_id", None) == str(OTHER_USER_ID) for r in records)


def test_plain_users_cannot_drive_fulfilment(client, user_headers):
    order_id = _create(client, user_headers).json()["id"]

    for action in ("process", "ship", "deliver"):
        resp = client.post(f"/orders/{order_id}/{action}", headers=user_headers)
        assert resp.status_code == 403
    resp = client.put(f"/orders/{order_id}", json={"shipping_address": "x"}, headers=user_headers)
    assert resp.status_code == 403


def test_admin_fulfilment_flow(client, user_headers, admin_headers):
    order_id = _create(client, user_headers).json()["id"]

    assert client.post(f"/orders/{order_id}/process", headers=admin_headers).json()["order_status"] == "processing"
    assert client.post(f"/orders/{order_id}/ship", headers=admin_headers).json()["order_status"] == "shipped"

    resp = client.post(f"/orders/{order_id}/cancel", headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "order_not_cancellable"
    assert resp.json()["from_status"] == "shipped"

    assert client.post(f"/orders/{order_id}/deliver", headers=admin_headers).json()["order_status"] == "delivered"


def test_update_rejects_protected_fields(client, user_headers, admin_headers):
    order_id = _create(client, user_headers).json()["id"]

    resp = client.put(f"/orders/{order_id}", json={"total_amount": 1}, headers=admin_headers)
    assert resp.status_code == 422

    resp = client.put(f"/orders/{order_id}", json={"shipping_address": "2 Side St"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["shipping_address"] == "2 Side St"


def test_owner_can_cancel_but_other_user_cannot(client, user_headers, other_user_headers):
    order_id = _create(client, user_headers).json()["id"]

    resp = client.post(f"/orders/{order_id}/cancel", headers=other_user_headers)
    assert resp.status_code == 403

    resp = client.post(f"/orders/{order_id}/cancel", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["order_status"] == "cancelled"

    resp = client.post(f"/orders/{order_id}/cancel", headers=user_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "order_already_cancelled"


def test_track_status_is_ownership_scoped(client, user_headers, other_user_headers, admin_headers):
    order_id = _create(client, user_headers).json()["id"]

    resp = client.get(f"/orders/{order_id}/status", headers=user_headers)
    assert resp.json() == {"order_id": order_id, "order_status": "pending"}

    for headers in (other_user_headers, admin_headers):
        resp = client.get(f"/orders/{order_id}/status", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == "unauthorized_access"


def test_activities_endpoint(client, user_headers, admin_headers):
    order_id = _create(client, user_headers, quantity=2).json()["id"]
    client.post(f"/orders/{order_id}/process", headers=admin_headers)

    own = client.get(f"/orders/{order_id}/activities", headers=user_headers).json()
    full = client.get(f"/orders/{order_id}/activities", headers=admin_headers).json()
    filtered = client.get(f"/orders/{order_id}/activities", params={"action": "processed"}, headers=admin_headers).json()

    assert [a["action"] for a in own] == ["created"]
    assert [a["action"] for a in full] == ["created", "processed"]
    assert [a["action"] for a in filtered] == ["processed"]
    assert own[0]["browser_info"] == "testclient"


def test_activities_for_missing_order(client, admin_headers):
    resp = client.get("/orders/404/activities", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "order_not_found"


def test_health_endpoints(client):
    assert client.get("/health").json()["status"] == "pass"
    assert client.get("/health/live").json() == {"status": "alive"}
    ready = client.get("/health/ready")
    assert ready.status_code in (200, 503)
    assert "database:connectivity" in ready.json()["checks"]
    assert "system" in client.get("/metrics").json()
