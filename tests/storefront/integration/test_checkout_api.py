"""Integration tests for checkout, order and balance endpoints via TestClient."""

CUSTOMER = {"email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace"}


def _add(client, currency_code="dust", amount=5000, variant_id=None, cart_id=None):
    payload = {
        "action": "add",
        "product_id": f"prod-{currency_code}",
        "variant_id": variant_id or f"var-{currency_code}",
        "title": "Item",
        "price": {"amount": amount, "currency_code": currency_code},
    }
    if cart_id:
        payload["cart_id"] = cart_id
    return client.post("/cart", json=payload).json()["cart"]["id"]


def _credit(client, user_id="user_test_1"):
    return client.post("/balance/test-credit", json={"user_id": user_id})


class TestBalanceEndpoints:
    def test_default_balance(self, client):
        response = client.get("/balance")
        assert response.json() == {"user_id": "user_test_1", "balance": 0}

    def test_test_credit(self, client):
        response = _credit(client)
        assert response.status_code == 200
        assert response.json()["balance"] == 10000
        assert client.get("/balance", params={"user_id": "user_test_1"}).json()["balance"] == 10000

    def test_test_credit_without_body(self, client):
        assert client.post("/balance/test-credit").json()["user_id"] == "user_test_1"

    def test_test_credit_refused_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        response = _credit(client)
        assert response.status_code == 403
        assert response.json()["code"] == "operation_not_allowed"


class TestCheckoutEndpoint:
    def test_points_checkout(self, client):
        _credit(client)
        cart_id = _add(client, amount=4000)

        response = client.post("/checkout", json={"cart_id": cart_id, "customer": CUSTOMER})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Order placed successfully with dust payment!"
        assert body["balance"] == 6000
        assert body["order"]["payment_method"] == "points"
        assert body["order"]["formatted_total"] == "4,000 ⚡ Dust"
        assert body["order"]["customer"]["email"] == "ada@example.com"

    def test_dust_alias_accepted(self, client):
        _credit(client)
        cart_id = _add(client)
        response = client.post("/checkout", json={"cart_id": cart_id, "payment_method": "dust"})
        assert response.status_code == 200

    def test_fiat_checkout(self, client):
        cart_id = _add(client, currency_code="usd", amount=1999)
        response = client.post("/checkout", json={"cart_id": cart_id})
        body = response.json()
        assert body["message"] == "Order placed successfully!"
        assert "balance" not in body
        assert body["order"]["transaction_id"].startswith("fiat_tx_")

    def test_cart_cookie_used_when_no_id_given(self, client):
        _add(client, currency_code="usd", amount=1999)
        response = client.post("/checkout", json={})
        assert response.status_code == 200

    def test_insufficient_balance(self, client):
        cart_id = _add(client, amount=5000)
        response = client.post("/checkout", json={"cart_id": cart_id})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Insufficient dust balance"
        assert body["balance"] == 0
        assert body["required"] == 5000

    def test_mixed_currencies(self, client):
        cart_id = _add(client, currency_code="usd", amount=1000)
        _add(client, currency_code="eur", amount=1000, cart_id=cart_id)
        response = client.post("/checkout", json={"cart_id": cart_id})
        assert response.status_code == 400
        assert response.json()["currencies"] == ["eur", "usd"]

    def test_empty_cart(self, client):
        cart_id = client.get("/cart").json()["cart"]["id"]
        response = client.post("/checkout", json={"cart_id": cart_id})
        assert response.status_code == 400
        assert response.json()["error"] == "Cart is empty or not found"

    def test_missing_cart_id(self, client):
        client.cookies.clear()
        response = client.post("/checkout", json={})
        assert response.status_code == 400


class TestOrderEndpoints:
    def _order(self, client):
        cart_id = _add(client, currency_code="usd", amount=2500)
        return client.post("/checkout", json={"cart_id": cart_id}).json()["order"]

    def test_list_orders(self, client):
        order = self._order(client)
        response = client.get("/orders")
        assert [o["id"] for o in response.json()["orders"]] == [order["id"]]

    def test_list_orders_for_other_user(self, client):
        self._order(client)
        assert client.get("/orders", params={"user_id": "nobody"}).json()["orders"] == []

    def test_get_order(self, client):
        order = self._order(client)
        response = client.get(f"/orders/{order['id']}")
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "confirmed"

    def test_get_unknown_order(self, client):
        response = client.get("/orders/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "Order not found"

    def test_update_status(self, client):
        order = self._order(client)
        response = client.patch(f"/orders/{order['id']}/status", json={"status": "processing"})
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "processing"

    def test_illegal_status(self, client):
        order = self._order(client)
        response = client.patch(f"/orders/{order['id']}/status", json={"status": "completed"})
        assert response.status_code == 400
        assert response.json()["code"] == "illegal_transition"

    def test_merge_tracking(self, client):
        order = self._order(client)
        response = client.patch(
            f"/orders/{order['id']}/tracking",
            json={"tracking_number": "1Z999", "carrier": "UPS", "shipped_at": "2026-03-01T09:00:00Z"},
        )
        body = response.json()["order"]
        assert body["status"] == "shipped"
        assert body["tracking"]["tracking_number"] == "1Z999"

    def test_tracking_for_unknown_order(self, client):
        response = client.patch("/orders/missing/tracking", json={"carrier": "UPS"})
        assert response.status_code == 404


class TestMaintenanceEndpoint:
    def test_release_abandoned_carts(self, client):
        _add(client, currency_code="usd", amount=1000)
        response = client.post("/maintenance/release-abandoned-carts", json={"idle_minutes": 60})
        assert response.json() == {"released": 0}
