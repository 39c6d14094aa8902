"""
Tests for checkout and buyer-facing order tracking.
"""
import re
from decimal import Decimal

from config import settings
from models.log import Log
from models.order import Order
from models.product import Product

from conftest import DELIVERY

HEADER = settings.CART_SESSION_HEADER


def _fill_cart(client, key, *lines):
    headers = {HEADER: key}
    for product, quantity in lines:
        resp = client.post("/cart/add", json={"product_id": product.id, "quantity": quantity}, headers=headers)
        assert resp.status_code == 200, resp.text
    return headers


class TestCheckout:

    def test_checkout_and_track(self, client, db, apples, carrots):
        headers = _fill_cart(client, "buyer-1", (apples, 5), (carrots, 3))

        resp = client.post("/orders", json=DELIVERY, headers=headers)

        assert resp.status_code == 201, resp.text
        placed = resp.json()
        assert re.fullmatch(r"HH-[A-Z0-9]{7}", placed["tracking_id"])
        assert client.get("/cart", headers=headers).json()["items"] == []

        tracked = client.get(f"/orders/track/{placed['tracking_id']}")
        assert tracked.status_code == 200
        body = tracked.json()
        assert body["id"] == placed["order_id"]
        assert body["status"] == "pending"
        assert len(body["items"]) == 2
        assert [Decimal(i["price_at_purchase"]) for i in body["items"]] == [Decimal("2.99"), Decimal("1.49")]
        assert Decimal(body["total"]) == Decimal("19.42")

        log = db.query(Log).filter(Log.action == "ORDER_PLACE").one()
        assert log.status == "SUCCESS"
        assert log.meta["tracking_id"] == placed["tracking_id"]

    def test_empty_cart(self, client, db):
        resp = client.post("/orders", json=DELIVERY, headers={HEADER: "empty-buyer"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Your cart is empty"
        assert db.query(Order).count() == 0

    def test_invalid_email(self, client, apples):
        headers = _fill_cart(client, "buyer-2", (apples, 1))
        resp = client.post("/orders", json={**DELIVERY, "email": "jane-at-farmmail"}, headers=headers)
        assert resp.status_code == 422

    def test_missing_required_field(self, client, apples):
        headers = _fill_cart(client, "buyer-3", (apples, 1))
        data = dict(DELIVERY)
        del data["zip_code"]
        resp = client.post("/orders", json=data, headers=headers)
        assert resp.status_code == 422

    def test_unavailable_product(self, client, db, apples, carrots):
        headers = _fill_cart(client, "buyer-4", (apples, 1), (carrots, 2))
        db.delete(db.query(Product).filter(Product.id == carrots.id).one())
        db.commit()

        resp = client.post("/orders", json=DELIVERY, headers=headers)

        assert resp.status_code == 409
        assert resp.json()["detail"]["unavailable"] == ["Organic Carrots"]
        assert db.query(Order).count() == 0
        assert client.get("/cart", headers=headers).json()["total_items"] == 3


class TestTracking:

    def test_unknown_code(self, client):
        resp = client.get("/orders/track/HH-ZZZZZZZ")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Order not found"

    def test_tracking_shows_current_status(self, client, db, make_order, apples):
        from models.order import OrderStatus
        order = make_order([(apples, 2)], status=OrderStatus.IN_PROGRESS)

        resp = client.get(f"/orders/track/{order.tracking_id}")

        assert resp.json()["status"] == "in_progress"
        assert resp.json()["items"][0]["product_name"] == "Red Apples"
