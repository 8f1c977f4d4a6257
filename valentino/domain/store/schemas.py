"""Store domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ProductRequest(BaseModel):
    """Schema for creating or updating a product. Price is in dollars."""

    name: Optional[str] = None
    description: Optional[str] = None
    # Validated by the service so non-numeric input gets a 400, not a schema error
    price: Optional[Any] = None
    image_url: Optional[str] = None
    active: Optional[bool] = None
    in_stock: Optional[bool] = None


class ProductResponse(BaseModel):
    """Product with price converted to dollars"""

    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    active: bool
    in_stock: bool
    stripe_price_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CheckoutRequest(BaseModel):
    product_id: Optional[int] = Field(None, alias="productId")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    customer_name: Optional[str] = Field(None, alias="customerName")

    class Config:
        populate_by_name = True


class CheckoutResponse(BaseModel):
    sessionId: str
    url: str
    mock: bool = False


class OrderResponse(BaseModel):
    """Order with amount converted to dollars"""

    id: int
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    stripe_session_id: str
    stripe_payment_intent_id: Optional[str] = None
    customer_email: str
    customer_name: Optional[str] = None
    amount: float
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
