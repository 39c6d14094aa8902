"""
Tests for the admin panel endpoints: dashboard, orders, products, logs.
"""
from decimal import Decimal
from unittest.mock import patch

from models.log import Log
from models.order import OrderStatus
from models.product import Product
from models.users import User
from services.errors import OrderNotFoundError
from utils.hashing import get_password_hash


class TestAdminGate:

    def test_requires_token(self, client):
        for path in ("/admin/dashboard", "/admin/orders", "/admin/products", "/logs"):
            assert client.get(path).status_code in (401, 403)

    def test_rejects_bad_token(self, client):
        resp = client.get("/admin/dashboard", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_rejects_non_admin_role(self, client, db):
        db.add(User(email="picker@harvesthub.com", password_hash=get_password_hash("pick-pick"), role="staff"))
        db.commit()
        token = client.post("/login", json={"email": "picker@harvesthub.com", "password": "pick-pick"}).json()
        headers = {"Authorization": f"Bearer {token['access_token']}"}

        assert client.get("/admin/dashboard", headers=headers).status_code == 403


class TestAdminOrders:

    def test_dashboard(self, client, admin_headers, make_order, apples):
        make_order([(apples, 1)], status=OrderStatus.PENDING)
        make_order([(apples, 1)], status=OrderStatus.DELIVERED)

        body = client.get("/admin/dashboard", headers=admin_headers).json()

        assert body["total_orders"] == 2
        assert body["by_status"] == {"pending": 1, "in_progress": 0, "delivered": 1}
        assert body["total_products"] == 1
        assert len(body["recent_orders"]) == 2

    def test_list_with_status_filter(self, client, admin_headers, make_order, apples):
        make_order([(apples, 1)], status=OrderStatus.PENDING)
        make_order([(apples, 1)], status=OrderStatus.IN_PROGRESS)

        body = client.get("/admin/orders", params={"status": "in_progress"}, headers=admin_headers).json()
        assert body["total"] == 1
        assert body["items"][0]["status"] == "in_progress"

        body = client.get("/admin/orders", params={"status": "all"}, headers=admin_headers).json()
        assert body["total"] == 2

    def test_order_detail(self, client, admin_headers, make_order, apples, carrots):
        order = make_order([(apples, 5), (carrots, 3)])

        resp = client.get(f"/admin/orders/{order.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert Decimal(resp.json()["total"]) == Decimal("19.42")

    def test_order_detail_not_found(self, client, admin_headers):
        resp = client.get("/admin/orders/999", headers=admin_headers)
        assert resp.status_code == 404

    def test_delivered_back_to_pending_is_allowed(self, client, db, admin_headers, make_order, apples):
        order = make_order([(apples, 1)], status=OrderStatus.DELIVERED)

        resp = client.patch(f"/admin/orders/{order.id}/status", json={"status": "pending"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["status"] == "pending"
        log = db.query(Log).filter(Log.action == "ORDER_STATUS_CHANGE").one()
        assert log.meta == {"order_id": order.id, "old": "delivered", "new": "pending"}

    def test_invalid_status_value(self, client, admin_headers, make_order, apples):
        order = make_order([(apples, 1)])
        resp = client.patch(f"/admin/orders/{order.id}/status", json={"status": "shipped"}, headers=admin_headers)
        assert resp.status_code == 422

    def test_status_of_unknown_order(self, client, admin_headers):
        resp = client.patch("/admin/orders/31337/status", json={"status": "delivered"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_order_gone_after_status_change(self, client, admin_headers, make_order, apples):
        order = make_order([(apples, 1)])

        with patch("services.orders.get_order_by_id", side_effect=OrderNotFoundError(order.id)):
            resp = client.patch(f"/admin/orders/{order.id}/status", json={"status": "delivered"},
                                headers=admin_headers)

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Order not found"


class TestAdminProducts:

    NEW = {
        "name": "Blueberries",
        "price": "6.50",
        "image_url": "https://images.example.org/blueberries.jpeg",
        "description": "Plump summer blueberries.",
        "category": "fruit",
    }

    def test_create_edit_delete(self, client, db, admin_headers):
        resp = client.post("/admin/products", json=self.NEW, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        pid = resp.json()["id"]

        resp = client.patch(f"/admin/products/{pid}", json={"price": "5.75"}, headers=admin_headers)
        assert resp.status_code == 200
        assert Decimal(resp.json()["price"]) == Decimal("5.75")
        assert resp.json()["name"] == "Blueberries"

        resp = client.delete(f"/admin/products/{pid}", headers=admin_headers)
        assert resp.status_code == 200
        assert db.query(Product).filter(Product.id == pid).first() is None

        actions = [a for (a,) in db.query(Log.action).filter(Log.resource == "products").order_by(Log.id)]
        assert actions == ["PRODUCT_CREATE", "PRODUCT_EDIT", "PRODUCT_DELETE"]

    def test_create_validates_payload(self, client, admin_headers):
        resp = client.post("/admin/products", json={**self.NEW, "category": "dairy"}, headers=admin_headers)
        assert resp.status_code == 422
        resp = client.post("/admin/products", json={**self.NEW, "price": "-1"}, headers=admin_headers)
        assert resp.status_code == 422

    def test_list_products(self, client, admin_headers, apples, carrots):
        body = client.get("/admin/products", params={"category": "vegetable"}, headers=admin_headers).json()
        assert [p["name"] for p in body["items"]] == ["Organic Carrots"]

    def test_edit_unknown_product(self, client, admin_headers):
        resp = client.patch("/admin/products/999", json={"name": "Nope"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_deleted_product_leaves_history_intact(self, client, admin_headers, make_order, apples):
        order = make_order([(apples, 3)])

        assert client.delete(f"/admin/products/{apples.id}", headers=admin_headers).status_code == 200

        body = client.get(f"/orders/track/{order.tracking_id}").json()
        assert body["items"][0]["product_name"] is None
        assert Decimal(body["items"][0]["price_at_purchase"]) == Decimal("2.99")
        assert Decimal(body["total"]) == Decimal("8.97")


class TestLogs:

    def test_logs_listing(self, client, admin_headers):
        body = client.get("/logs", params={"action": "LOGIN"}, headers=admin_headers).json()
        assert body["total"] == 1
        assert body["items"][0]["status"] == "SUCCESS"

    def test_failed_login_is_logged(self, client, admin_headers):
        client.post("/login", json={"email": "admin@harvesthub.com", "password": "wrong"})
        body = client.get("/logs", params={"status": "fail"}, headers=admin_headers).json()
        assert body["total"] == 1
        assert body["items"][0]["action"] == "LOGIN"
