"""Store service - Catalog, checkout and order business logic"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...database import storage_errors
from ...errors import Conflict, NotFound, ValidationError
from ...models import Order, Product
from ...shared.validators import cents_to_dollars, dollars_to_cents
from .repository import StoreRepository
from .schemas import CheckoutRequest, ProductRequest
from .stripe_service import PaymentGateway

logger = logging.getLogger(__name__)


def product_to_dict(product: Product) -> dict:
    """Serialize a product, converting price from cents to dollars"""
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": cents_to_dollars(product.price),
        "image_url": product.image_url,
        "active": product.active,
        "in_stock": product.in_stock,
        "stripe_price_id": product.stripe_price_id,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def order_to_dict(order: Order, product_name: str, product_image: Optional[str]) -> dict:
    return {
        "id": order.id,
        "product_id": order.product_id,
        "product_name": product_name,
        "product_image": product_image,
        "stripe_session_id": order.stripe_session_id,
        "stripe_payment_intent_id": order.stripe_payment_intent_id,
        "customer_email": order.customer_email,
        "customer_name": order.customer_name,
        "amount": cents_to_dollars(order.amount),
        "status": order.status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class StoreService:
    """Service layer for the storefront"""

    def __init__(self, db: Session, payment_gateway: PaymentGateway):
        self.db = db
        self.gateway = payment_gateway
        self.repo = StoreRepository()

    # ------------------------------------------------------------------
    # Public catalog
    # ------------------------------------------------------------------

    def list_active_products(self) -> list[dict]:
        with storage_errors(self.db, "Failed to fetch products"):
            products = self.repo.get_products(self.db, active_only=True)
        return [product_to_dict(p) for p in products]

    def get_active_product(self, product_id: int) -> dict:
        with storage_errors(self.db, "Failed to fetch product"):
            product = self.repo.get_product_by_id(self.db, product_id, active_only=True)
        if not product:
            raise NotFound("Product not found")
        return product_to_dict(product)

    # ------------------------------------------------------------------
    # Checkout & webhooks
    # ------------------------------------------------------------------

    def checkout(self, data: CheckoutRequest) -> dict:
        """Start a checkout and record a pending order for it"""
        if not data.product_id or not data.customer_email:
            raise ValidationError("Product ID and customer email are required")

        with storage_errors(self.db, "Failed to fetch product"):
            product = self.repo.get_product_by_id(
                self.db, data.product_id, active_only=True, in_stock_only=True
            )
        if not product:
            raise NotFound("Product not found or out of stock")

        # PaymentProviderError propagates and fails the checkout
        session = self.gateway.create_checkout_session(
            product, data.customer_email, data.customer_name
        )

        with storage_errors(self.db, "Failed to create checkout session"):
            if session.price_id:
                self.repo.set_stripe_price_id(self.db, product.id, session.price_id)
            try:
                self.repo.create_order(
                    self.db,
                    product_id=product.id,
                    stripe_session_id=session.session_id,
                    customer_email=data.customer_email,
                    customer_name=data.customer_name or None,
                    amount=product.price,
                    status="pending",
                )
            except IntegrityError as e:
                self.db.rollback()
                logger.error(f"❌ Duplicate checkout session {session.session_id}: {e}")
                raise Conflict("Checkout session already recorded") from e

        logger.info(f"🛒 Pending order created for session {session.session_id}")
        return {
            "sessionId": session.session_id,
            "url": session.redirect_url,
            "mock": not self.gateway.enabled,
        }

    def handle_webhook(self, payload: bytes, signature: Optional[str]) -> dict:
        """
        Apply a payment provider event to its order.
        Raises SignatureError when the delivery cannot be trusted.
        """
        if not self.gateway.enabled:
            logger.info("[MOCK] Webhook received (payments disabled)")
            return {"received": True, "mock": True}

        event = self.gateway.construct_event(payload, signature)
        event_type = event.get("type")
        session = (event.get("data") or {}).get("object") or {}
        session_id = session.get("id")

        logger.info(f"📥 Received payment webhook: {event_type}")

        if event_type == "checkout.session.completed" and session_id:
            with storage_errors(self.db, "Failed to update order"):
                count = self.repo.update_order_by_session(
                    self.db,
                    session_id,
                    status="completed",
                    stripe_payment_intent_id=session.get("payment_intent"),
                )
            logger.info(f"Order updated for session {session_id} ({count} row)")
        elif event_type == "checkout.session.async_payment_failed" and session_id:
            with storage_errors(self.db, "Failed to update order"):
                self.repo.update_order_by_session(self.db, session_id, status="failed")
            logger.info(f"Order marked failed for session {session_id}")
        else:
            logger.info(f"ℹ️ Unhandled event type: {event_type}")

        return {"received": True}

    # ------------------------------------------------------------------
    # Admin catalog & orders
    # ------------------------------------------------------------------

    @staticmethod
    def _product_values(data: ProductRequest) -> dict:
        if not data.name or not data.name.strip() or data.price is None:
            raise ValidationError("Name and price are required")
        try:
            price = dollars_to_cents(data.price)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return {
            "name": data.name,
            "description": data.description or None,
            "price": price,
            "image_url": data.image_url or None,
            "active": True if data.active is None else data.active,
            "in_stock": True if data.in_stock is None else data.in_stock,
        }

    def list_all_products(self) -> list[dict]:
        with storage_errors(self.db, "Failed to fetch products"):
            products = self.repo.get_products(self.db, active_only=False)
        return [product_to_dict(p) for p in products]

    def get_product(self, product_id: int) -> dict:
        with storage_errors(self.db, "Failed to fetch product"):
            product = self.repo.get_product_by_id(self.db, product_id)
        if not product:
            raise NotFound("Product not found")
        return product_to_dict(product)

    def create_product(self, data: ProductRequest) -> dict:
        values = self._product_values(data)
        with storage_errors(self.db, "Failed to create product"):
            product = self.repo.create_product(self.db, **values)
        logger.info(f"Product {product.id} created")
        return product_to_dict(product)

    def update_product(self, product_id: int, data: ProductRequest) -> dict:
        values = self._product_values(data)
        with storage_errors(self.db, "Failed to update product"):
            count = self.repo.update_product(self.db, product_id, **values)
        if count == 0:
            raise NotFound("Product not found")
        return self.get_product(product_id)

    def delete_product(self, product_id: int) -> dict:
        with storage_errors(self.db, "Failed to delete product"):
            if self.repo.count_orders_for_product(self.db, product_id):
                raise Conflict("Product has orders and cannot be deleted. Mark it inactive instead.")
            count = self.repo.delete_product(self.db, product_id)
        if count == 0:
            raise NotFound("Product not found")
        return {"message": "Product deleted successfully"}

    def list_orders(self) -> list[dict]:
        with storage_errors(self.db, "Failed to fetch orders"):
            rows = self.repo.get_orders_with_products(self.db)
        return [order_to_dict(order, name, image) for order, name, image in rows]

