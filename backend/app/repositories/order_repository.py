"""Order repository for data access."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Query, Session

from app.core.sorting import apply_order_by
from app.models.order import Order, OrderItem, OrderStatus
from app.schemas.order import OrderCreate


class OrderRepository:
    """Repository for Order and OrderItem models."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(self, status: str | None = None, is_paid: bool | None = None) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        if is_paid is not None:
            query = query.filter(Order.is_paid == is_paid)
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        status: str | None = None,
        is_paid: bool | None = None,
    ) -> list[Order]:
        """Get all orders with optional filters."""
        query = self._filtered(status=status, is_paid=is_paid)
        query = apply_order_by(query, Order, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, status: str | None = None, is_paid: bool | None = None) -> int:
        """Count orders matching the same filters as get_all."""
        return self._filtered(status=status, is_paid=is_paid).count()

    def get_by_id(self, order_id: UUID) -> Order | None:
        """Get an order by ID."""
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_by_user_id(self, user_id: UUID, skip: int = 0, limit: int = 100) -> list[Order]:
        """Get a user's orders, newest first."""
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_items(self, order_id: UUID) -> list[OrderItem]:
        """Get the line items of an order."""
        return (
            self.db.query(OrderItem)
            .filter(OrderItem.order_id == order_id)
            .order_by(OrderItem.product_name.asc())
            .all()
        )

    def add(self, user_id: UUID, data: OrderCreate) -> Order:
        """Stage a new order and its items without committing.

        Money columns other than ``shipping_price`` are left at zero; the
        caller derives them.
        """
        order = Order(
            user_id=user_id,
            shipping_price=data.shipping_price,
            payment_method=data.payment_method,
        )
        if data.shipping:
            order.shipping_address = data.shipping.address  # type: ignore[assignment]
            order.shipping_city = data.shipping.city  # type: ignore[assignment]
            order.shipping_postal_code = data.shipping.postal_code  # type: ignore[assignment]
            order.shipping_country = data.shipping.country  # type: ignore[assignment]
        self.db.add(order)
        self.db.flush()

        for item in data.items:
            self.db.add(
                OrderItem(
                    order_id=order.id,
                    product_name=item.product_name,
                    product_sku=item.product_sku,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
            )
        self.db.flush()
        return order

    def mark_paid(self, order: Order, payment_result: dict[str, Any], now: datetime) -> Order:
        """Record a successful payment."""
        order.is_paid = True  # type: ignore[assignment]
        order.paid_at = now  # type: ignore[assignment]
        order.payment_result = payment_result  # type: ignore[assignment]
        if order.status == OrderStatus.PENDING.value:
            order.status = OrderStatus.PROCESSING.value  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(order)
        return order

    def mark_delivered(self, order: Order, now: datetime) -> Order:
        """Record delivery of an order."""
        order.is_delivered = True  # type: ignore[assignment]
        order.delivered_at = now  # type: ignore[assignment]
        order.status = OrderStatus.DELIVERED.value  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(order)
        return order

    def mark_coupon_generated_if_unset(self, order_id: UUID, coupon_id: UUID) -> bool:
        """Set the reward-issuance guard in a single conditional UPDATE.

        The caller owns the commit.

        Returns:
            True if this call flipped the flag; False if another issuance
            already did.
        """
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.coupon_generated.is_(False))
            .values(coupon_generated=True, generated_coupon_id=coupon_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
