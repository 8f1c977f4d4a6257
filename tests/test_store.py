from types import SimpleNamespace

import pytest
import stripe
from conftest import ADMIN
from fastapi.testclient import TestClient

from valentino.domain.store.repository import StoreRepository
from valentino.domain.store.stripe_service import (
    CheckoutSession,
    MockPaymentGateway,
    PaymentGateway,
    StripePaymentGateway,
)
from valentino.errors import PaymentProviderError, SignatureError
from valentino.main import create_app
from valentino.models import Order, Product


class FakeGateway(PaymentGateway):
    """Enabled gateway that trusts the ``good`` signature and replays a canned event"""

    def __init__(self):
        self.event = {}
        self.sessions = 0

    def create_checkout_session(self, product, customer_email, customer_name=None):
        self.sessions += 1
        return CheckoutSession(
            session_id=f"cs_live_{self.sessions}",
            redirect_url=f"https://pay.example/{self.sessions}",
            price_id="price_123",
        )

    def construct_event(self, payload, signature):
        if signature != "good":
            raise SignatureError("Invalid signature")
        return self.event


def create_product(client, **overrides):
    payload = {"name": "Maple Sapling", "description": "Red maple", "price": 19.99, **overrides}
    response = client.post("/api/store/admin/products", json=payload, headers=ADMIN)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def live_gateway():
    return FakeGateway()


@pytest.fixture
def live_client(database, email_sender, live_gateway):
    app = create_app(database=database, email_sender=email_sender, payment_gateway=live_gateway)
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Catalog
# ============================================================================


def test_price_is_stored_in_cents_and_served_in_dollars(client, db_session):
    product = create_product(client, price="19.99")

    assert product["price"] == 19.99
    assert db_session.get(Product, product["id"]).price == 1999
    assert client.get(f"/api/store/products/{product['id']}").json()["price"] == 19.99


def test_price_rounds_half_up(client, db_session):
    product = create_product(client, price=0.125)

    assert db_session.get(Product, product["id"]).price == 13


@pytest.mark.parametrize("price", ["abc", -1, True])
def test_invalid_price_is_rejected(client, price):
    response = client.post(
        "/api/store/admin/products", json={"name": "Bad", "price": price}, headers=ADMIN
    )

    assert response.status_code == 400


def test_price_too_large_to_store_is_rejected(client, db_session):
    response = client.post(
        "/api/store/admin/products", json={"name": "x", "price": 1e17}, headers=ADMIN
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Price is too large"}
    assert db_session.query(Product).count() == 0


def test_name_and_price_are_required(client):
    response = client.post("/api/store/admin/products", json={"name": "Mulch"}, headers=ADMIN)

    assert response.status_code == 400
    assert response.json()["detail"] == "Name and price are required"


def test_inactive_products_are_hidden_from_public(client):
    visible = create_product(client, name="Visible")
    hidden = create_product(client, name="Hidden", active=False)

    public = client.get("/api/store/products").json()
    admin = client.get("/api/store/admin/products", headers=ADMIN).json()

    assert [p["id"] for p in public] == [visible["id"]]
    assert {p["id"] for p in admin} == {visible["id"], hidden["id"]}
    assert client.get(f"/api/store/products/{hidden['id']}").status_code == 404


def test_update_product(client):
    product = create_product(client)

    response = client.put(
        f"/api/store/admin/products/{product['id']}",
        json={"name": "Maple Sapling", "price": 24.5, "in_stock": False},
        headers=ADMIN,
    )

    assert response.status_code == 200
    assert response.json()["price"] == 24.5
    assert response.json()["in_stock"] is False


def test_update_unknown_product(client):
    response = client.put(
        "/api/store/admin/products/999", json={"name": "x", "price": 1}, headers=ADMIN
    )

    assert response.status_code == 404


def test_admin_catalog_requires_password(client):
    assert client.get("/api/store/admin/products").status_code == 401
    assert client.post("/api/store/admin/products", json={"name": "x", "price": 1}).status_code == 401


# ============================================================================
# Checkout
# ============================================================================


def test_mock_checkout_creates_pending_order(client, db_session):
    product = create_product(client)

    response = client.post(
        "/api/store/checkout",
        json={"productId": product["id"], "customerEmail": "c@d.com", "customerName": "Cy"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["mock"] is True
    assert body["sessionId"].startswith("cs_test_")
    assert body["url"] == f"http://testserver/store/success?session_id={body['sessionId']}"
    order = db_session.query(Order).one()
    assert order.status == "pending"
    assert order.amount == 1999
    assert order.stripe_session_id == body["sessionId"]


def test_order_amount_is_a_snapshot(client):
    product = create_product(client)
    client.post("/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"})

    client.put(
        f"/api/store/admin/products/{product['id']}",
        json={"name": "Maple Sapling", "price": 30},
        headers=ADMIN,
    )

    orders = client.get("/api/store/admin/orders", headers=ADMIN).json()
    assert orders[0]["amount"] == 19.99


def test_checkout_out_of_stock(client, db_session):
    product = create_product(client, in_stock=False)

    response = client.post(
        "/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"}
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found or out of stock"
    assert db_session.query(Order).count() == 0


def test_checkout_requires_product_and_email(client):
    response = client.post("/api/store/checkout", json={"productId": 1})

    assert response.status_code == 400
    assert response.json()["detail"] == "Product ID and customer email are required"


def test_orders_list_includes_product_details(client):
    product = create_product(client, image_url="https://img.example/maple.png")
    client.post("/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"})

    orders = client.get("/api/store/admin/orders", headers=ADMIN).json()

    assert len(orders) == 1
    assert orders[0]["product_name"] == "Maple Sapling"
    assert orders[0]["product_image"] == "https://img.example/maple.png"
    assert orders[0]["customer_email"] == "c@d.com"


def test_live_checkout_remembers_created_price(live_client, db_session):
    product = create_product(live_client)

    response = live_client.post(
        "/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"}
    )

    assert response.json() == {
        "sessionId": "cs_live_1",
        "url": "https://pay.example/1",
        "mock": False,
    }
    assert db_session.get(Product, product["id"]).stripe_price_id == "price_123"


def test_product_with_orders_cannot_be_deleted(client, db_session):
    product = create_product(client)
    client.post("/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"})

    response = client.delete(f"/api/store/admin/products/{product['id']}", headers=ADMIN)

    assert response.status_code == 400
    assert "Mark it inactive instead" in response.json()["detail"]
    assert db_session.query(Product).count() == 1


def test_delete_product(client):
    product = create_product(client)

    response = client.delete(f"/api/store/admin/products/{product['id']}", headers=ADMIN)

    assert response.json() == {"message": "Product deleted successfully"}
    assert client.delete(f"/api/store/admin/products/{product['id']}", headers=ADMIN).status_code == 404


# ============================================================================
# Webhooks
# ============================================================================


def test_webhook_is_acknowledged_when_payments_are_mocked(client):
    response = client.post("/api/store/webhook", content=b"{}")

    assert response.status_code == 200
    assert response.json() == {"received": True, "mock": True}


def test_completed_session_marks_order_paid(live_client, live_gateway, db_session):
    product = create_product(live_client)
    session_id = live_client.post(
        "/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"}
    ).json()["sessionId"]
    live_gateway.event = {
        "type": "checkout.session.completed",
        "data": {"object": {"id": session_id, "payment_intent": "pi_42"}},
    }

    response = live_client.post(
        "/api/store/webhook", content=b"{}", headers={"stripe-signature": "good"}
    )

    assert response.json() == {"received": True}
    order = db_session.query(Order).one()
    assert order.status == "completed"
    assert order.stripe_payment_intent_id == "pi_42"


def test_failed_async_payment_marks_order_failed(live_client, live_gateway, db_session):
    product = create_product(live_client)
    session_id = live_client.post(
        "/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"}
    ).json()["sessionId"]
    live_gateway.event = {
        "type": "checkout.session.async_payment_failed",
        "data": {"object": {"id": session_id}},
    }

    live_client.post("/api/store/webhook", content=b"{}", headers={"stripe-signature": "good"})

    assert db_session.query(Order).one().status == "failed"


def test_unhandled_event_is_acknowledged(live_client, live_gateway):
    live_gateway.event = {"type": "customer.created", "data": {"object": {"id": "cus_1"}}}

    response = live_client.post(
        "/api/store/webhook", content=b"{}", headers={"stripe-signature": "good"}
    )

    assert response.json() == {"received": True}


def test_bad_signature_is_rejected(live_client):
    response = live_client.post(
        "/api/store/webhook", content=b"{}", headers={"stripe-signature": "forged"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Webhook Error: Invalid signature"


def test_order_status_must_be_known(client, db_session):
    product = create_product(client)
    session_id = client.post(
        "/api/store/checkout", json={"productId": product["id"], "customerEmail": "c@d.com"}
    ).json()["sessionId"]

    with pytest.raises(ValueError, match="Unknown order status"):
        StoreRepository.update_order_by_session(db_session, session_id, status="shipped")

    assert db_session.query(Order).one().status == "pending"


# ============================================================================
# Gateways
# ============================================================================


def test_stripe_gateway_creates_price_and_session(monkeypatch):
    calls = {}

    def create_price(**kwargs):
        calls["price"] = kwargs
        return SimpleNamespace(id="price_new")

    def create_session(**kwargs):
        calls["session"] = kwargs
        return SimpleNamespace(id="cs_1", url="https://checkout.stripe.com/cs_1")

    monkeypatch.setattr(stripe.Price, "create", create_price)
    monkeypatch.setattr(stripe.checkout.Session, "create", create_session)
    gateway = StripePaymentGateway("sk_test", "whsec", "https://shop.example", "usd")
    product = Product(id=3, name="Maple Sapling", price=1999, stripe_price_id=None)

    session = gateway.create_checkout_session(product, "c@d.com", "Cy")

    assert session == CheckoutSession("cs_1", "https://checkout.stripe.com/cs_1", "price_new")
    assert calls["price"]["unit_amount"] == 1999
    assert calls["session"]["line_items"] == [{"price": "price_new", "quantity": 1}]
    assert calls["session"]["customer_email"] == "c@d.com"
    assert calls["session"]["metadata"] == {"product_id": "3", "customer_name": "Cy"}
    assert "{CHECKOUT_SESSION_ID}" in calls["session"]["success_url"]


def test_stripe_gateway_reuses_existing_price(monkeypatch):
    def fail_price(**kwargs):
        raise AssertionError("price should not be created")

    monkeypatch.setattr(stripe.Price, "create", fail_price)
    monkeypatch.setattr(
        stripe.checkout.Session, "create", lambda **kwargs: SimpleNamespace(id="cs_2", url="u")
    )
    gateway = StripePaymentGateway("sk_test", "whsec", "https://shop.example", "usd")
    product = Product(id=3, name="Maple Sapling", price=1999, stripe_price_id="price_old")

    assert gateway.create_checkout_session(product, "c@d.com").price_id is None


def test_stripe_gateway_wraps_provider_errors(monkeypatch):
    def boom(**kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", boom)
    gateway = StripePaymentGateway("sk_test", "whsec", "https://shop.example", "usd")
    product = Product(id=3, name="Maple Sapling", price=1999, stripe_price_id="price_old")

    with pytest.raises(PaymentProviderError):
        gateway.create_checkout_session(product, "c@d.com")


def test_stripe_gateway_requires_webhook_secret():
    gateway = StripePaymentGateway("sk_test", None, "https://shop.example", "usd")

    with pytest.raises(SignatureError):
        gateway.construct_event(b"{}", "t=1,v1=abc")


def test_stripe_gateway_rejects_bad_signature(monkeypatch):
    def reject(payload, signature, secret):
        raise stripe.SignatureVerificationError("No signatures found", signature)

    monkeypatch.setattr(stripe.Webhook, "construct_event", reject)
    gateway = StripePaymentGateway("sk_test", "whsec", "https://shop.example", "usd")

    with pytest.raises(SignatureError):
        gateway.construct_event(b"{}", "t=1,v1=abc")


def test_mock_gateway_session_ids_are_unique():
    gateway = MockPaymentGateway("http://testserver")
    product = Product(id=1, name="Mulch", price=500)

    first = gateway.create_checkout_session(product, "c@d.com")
    second = gateway.create_checkout_session(product, "c@d.com")

    assert first.session_id != second.session_id
    assert first.price_id is None
