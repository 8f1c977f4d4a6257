"""Store router - public catalog, checkout, payment webhook and admin management"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...errors import SignatureError, ValidationError
from .schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderResponse,
    ProductRequest,
    ProductResponse,
)
from .service import StoreService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/store", tags=["Store"])

admin = [Depends(require_admin)]


def get_store_service(request: Request, db: Session = Depends(get_db)) -> StoreService:
    """Dependency injection for StoreService"""
    return StoreService(db, request.app.state.payment_gateway)


# ============================================================================
# PUBLIC ROUTES - Product Viewing & Checkout
# ============================================================================


@router.get("/products", response_model=list[ProductResponse])
async def get_products(service: StoreService = Depends(get_store_service)):
    """Active products, newest first"""
    return service.list_active_products()


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, service: StoreService = Depends(get_store_service)):
    return service.get_active_product(product_id)


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    data: CheckoutRequest,
    service: StoreService = Depends(get_store_service),
):
    """Create a checkout session and a pending order"""
    return service.checkout(data)


@router.post("/webhook")
async def payment_webhook(request: Request, service: StoreService = Depends(get_store_service)):
    """Payment provider callback, trusted only through its signature"""
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    try:
        return service.handle_webhook(payload, signature)
    except SignatureError as e:
        raise ValidationError(f"Webhook Error: {e}") from e


# ============================================================================
# ADMIN ROUTES - Product Management & Orders
# ============================================================================


@router.get("/admin/products", response_model=list[ProductResponse], dependencies=admin)
async def get_all_products(service: StoreService = Depends(get_store_service)):
    """All products, including inactive ones"""
    return service.list_all_products()


@router.get("/admin/products/{product_id}", response_model=ProductResponse, dependencies=admin)
async def get_product_admin(product_id: int, service: StoreService = Depends(get_store_service)):
    return service.get_product(product_id)


@router.post(
    "/admin/products", response_model=ProductResponse, status_code=201, dependencies=admin
)
async def create_product(data: ProductRequest, service: StoreService = Depends(get_store_service)):
    return service.create_product(data)


@router.put("/admin/products/{product_id}", response_model=ProductResponse, dependencies=admin)
async def update_product(
    product_id: int,
    data: ProductRequest,
    service: StoreService = Depends(get_store_service),
):
    return service.update_product(product_id, data)


@router.delete("/admin/products/{product_id}", dependencies=admin)
async def delete_product(product_id: int, service: StoreService = Depends(get_store_service)):
    return service.delete_product(product_id)


@router.get("/admin/orders", response_model=list[OrderResponse], dependencies=admin)
async def get_orders(service: StoreService = Depends(get_store_service)):
    return service.list_orders()
