"""Stripe payment service - Checkout sessions and webhook verification"""

import logging
import secrets
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import stripe

from ... import config
from ...errors import PaymentProviderError, SignatureError
from ...models import Product

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    session_id: str
    redirect_url: str
    # Set when the gateway created a new price the product should remember
    price_id: Optional[str] = None


class PaymentGateway(ABC):
    """Payment capability consumed by the store service"""

    enabled = True

    @abstractmethod
    def create_checkout_session(
        self, product: Product, customer_email: str, customer_name: Optional[str] = None
    ) -> CheckoutSession:
        """Start a checkout for one unit of ``product``. Raises PaymentProviderError."""

    @abstractmethod
    def construct_event(self, payload: bytes, signature: Optional[str]) -> dict:
        """Verify and parse a webhook delivery. Raises SignatureError."""


class StripePaymentGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: Optional[str], base_url: str, currency: str):
        stripe.api_key = api_key
        self.webhook_secret = webhook_secret
        self.base_url = base_url
        self.currency = currency
        logger.info("Stripe client initialized")

    def _ensure_price(self, product: Product) -> tuple[str, bool]:
        if product.stripe_price_id:
            return product.stripe_price_id, False
        price = stripe.Price.create(
            unit_amount=product.price,  # cents
            currency=self.currency,
            product_data={"name": product.name},
        )
        return price.id, True

    def create_checkout_session(
        self, product: Product, customer_email: str, customer_name: Optional[str] = None
    ) -> CheckoutSession:
        try:
            price_id, created = self._ensure_price(product)
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                mode="payment",
                success_url=f"{self.base_url}/store/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self.base_url}/store/cancel",
                customer_email=customer_email,
                metadata={
                    "product_id": str(product.id),
                    "customer_name": customer_name or "",
                },
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe checkout failed for product {product.id}: {e}")
            raise PaymentProviderError() from e

        logger.info(f"✅ Created Stripe checkout session {session.id} for product {product.id}")
        return CheckoutSession(
            session_id=session.id,
            redirect_url=session.url,
            price_id=price_id if created else None,
        )

    def construct_event(self, payload: bytes, signature: Optional[str]) -> dict:
        if not self.webhook_secret:
            logger.error("STRIPE_WEBHOOK_SECRET not set")
            raise SignatureError("Webhook secret not configured")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as e:
            logger.warning("Invalid webhook payload")
            raise SignatureError("Invalid payload") from e
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise SignatureError("Invalid signature") from e
        return event.to_dict() if hasattr(event, "to_dict") else dict(event)


class MockPaymentGateway(PaymentGateway):
    """Synthesizes checkout sessions that redirect straight to the success page"""

    enabled = False

    def __init__(self, base_url: str):
        self.base_url = base_url

    def create_checkout_session(
        self, product: Product, customer_email: str, customer_name: Optional[str] = None
    ) -> CheckoutSession:
        suffix = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(9))
        session_id = f"cs_test_{int(time.time() * 1000)}_{suffix}"

        logger.info(f"[MOCK] Would create Stripe checkout for product {product.id} ({product.name})")
        logger.info(f"[MOCK] Customer: {customer_email} ({customer_name or 'N/A'})")
        logger.info(f"[MOCK] Amount: ${product.price / 100:.2f}")

        return CheckoutSession(
            session_id=session_id,
            redirect_url=f"{self.base_url}/store/success?session_id={session_id}",
        )

    def construct_event(self, payload: bytes, signature: Optional[str]) -> dict:
        raise SignatureError("Payment webhooks are disabled")


def create_payment_gateway() -> PaymentGateway:
    """Select the payment implementation from configuration"""
    if config.STRIPE_SECRET_KEY:
        return StripePaymentGateway(
            api_key=config.STRIPE_SECRET_KEY,
            webhook_secret=config.STRIPE_WEBHOOK_SECRET,
            base_url=config.BASE_URL,
            currency=config.STRIPE_CURRENCY,
        )
    logger.warning("STRIPE_SECRET_KEY not set; checkout will use mock sessions")
    return MockPaymentGateway(config.BASE_URL)
