"""Store repository - Database operations for products and orders"""

from typing import Any, Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ...models import ORDER_STATUSES, Order, Product


class StoreRepository:
    """Repository for product and order database operations"""

    # Product Methods
    @staticmethod
    def get_products(db: Session, active_only: bool = True) -> list[Product]:
        query = db.query(Product)
        if active_only:
            query = query.filter(Product.active.is_(True))
        return query.order_by(Product.created_at.desc(), Product.id.desc()).all()

    @staticmethod
    def get_product_by_id(
        db: Session, product_id: int, active_only: bool = False, in_stock_only: bool = False
    ) -> Optional[Product]:
        query = db.query(Product).filter(Product.id == product_id)
        if active_only:
            query = query.filter(Product.active.is_(True))
        if in_stock_only:
            query = query.filter(Product.in_stock.is_(True))
        return query.first()

    @staticmethod
    def create_product(db: Session, **product_data) -> Product:
        product = Product(**product_data)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def update_product(db: Session, product_id: int, **updates: Any) -> int:
        values = {getattr(Product, key): value for key, value in updates.items()}
        values[Product.updated_at] = func.now()
        count = (
            db.query(Product)
            .filter(Product.id == product_id)
            .update(values, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def delete_product(db: Session, product_id: int) -> int:
        count = db.query(Product).filter(Product.id == product_id).delete(synchronize_session=False)
        db.commit()
        return count

    @staticmethod
    def set_stripe_price_id(db: Session, product_id: int, price_id: str) -> int:
        count = (
            db.query(Product)
            .filter(Product.id == product_id)
            .update({Product.stripe_price_id: price_id}, synchronize_session=False)
        )
        db.commit()
        return count

    # Order Methods
    @staticmethod
    def create_order(db: Session, **order_data) -> Order:
        order = Order(**order_data)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def get_orders_with_products(db: Session) -> list[tuple[Order, str, Optional[str]]]:
        """Orders joined with their product's name and image, newest first"""
        return (
            db.query(Order, Product.name, Product.image_url)
            .join(Product, Order.product_id == Product.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def update_order_by_session(db: Session, session_id: str, **updates: Any) -> int:
        """Update the order for a checkout session. Returns rows affected."""
        if "status" in updates and updates["status"] not in ORDER_STATUSES:
            raise ValueError(f"Unknown order status: {updates['status']}")
        values = {getattr(Order, key): value for key, value in updates.items()}
        values[Order.updated_at] = func.now()
        count = (
            db.query(Order)
            .filter(Order.stripe_session_id == session_id)
            .update(values, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def count_orders_for_product(db: Session, product_id: int) -> int:
        return db.query(func.count(Order.id)).filter(Order.product_id == product_id).scalar()
