from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled")
ORDER_STATUSES = ("pending", "completed", "failed")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    service_type = Column(String(100), nullable=False)
    date = Column(String(20), nullable=False)  # As submitted by the booking form
    time = Column(String(20), nullable=False)
    address = Column(String(500), nullable=False)
    message = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # see APPOINTMENT_STATUSES
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    subscribed_at = Column(DateTime, server_default=func.now(), nullable=False)
    active = Column(Boolean, default=True, nullable=False)


class NewsletterDraft(Base):
    __tablename__ = "newsletter_drafts"

    id = Column(Integer, primary_key=True, index=True)
    subject = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class NewsletterSend(Base):
    """Append-only broadcast history. A draft may appear here at most once."""

    __tablename__ = "newsletter_sends"

    id = Column(Integer, primary_key=True, index=True)
    # NULL for ad-hoc sends; NULLs never collide on the unique constraint
    draft_id = Column(
        Integer,
        ForeignKey("newsletter_drafts.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )
    subject = Column(String(500), nullable=False)
    recipient_count = Column(Integer, nullable=False)
    sent_at = Column(DateTime, server_default=func.now(), nullable=False)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)  # cents
    image_url = Column(String(1000), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    in_stock = Column(Boolean, default=True, nullable=False)
    stripe_price_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    orders = relationship("Order", back_populates="product")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    stripe_session_id = Column(String(255), unique=True, index=True, nullable=False)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=True)
    amount = Column(Integer, nullable=False)  # cents, snapshot of product price at checkout
    status = Column(String(20), default="pending", nullable=False)  # see ORDER_STATUSES
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    product = relationship("Product", back_populates="orders")
