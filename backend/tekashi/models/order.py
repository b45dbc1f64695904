"""
Order tables
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, DECIMAL, ForeignKey, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tekashi.core.database import Base


class Order(Base):
    """
    Customer and guest orders
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_orders_total"),
        CheckConstraint("loyalty_points_used >= 0", name="ck_orders_points_used"),
        CheckConstraint("loyalty_points_earned >= 0", name="ck_orders_points_earned"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Identification (unique number doubles as duplicate-submission guard)
    order_number = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)

    # Delivery and payment snapshots
    shipping_address = Column(JSONB, nullable=False)
    payment_info = Column(JSONB, nullable=False)
    shipping_method = Column(String(20), nullable=False, server_default="standard")

    # Amounts
    subtotal = Column(DECIMAL(12, 2), nullable=False)
    tax = Column(DECIMAL(12, 2), nullable=False)
    shipping_cost = Column(DECIMAL(12, 2), nullable=False, server_default="0")
    discount = Column(DECIMAL(12, 2), nullable=False, server_default="0")
    total = Column(DECIMAL(12, 2), nullable=False)

    # Status
    status = Column(String(20), nullable=False, server_default="pending", index=True)
    ordered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    estimated_delivery_at = Column(DateTime(timezone=True))
    delivered_at = Column(DateTime(timezone=True))
    tracking_number = Column(String(100))
    notes = Column(String(500))

    # Loyalty
    loyalty_points_used = Column(Integer, nullable=False, server_default="0")
    loyalty_points_earned = Column(Integer, nullable=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """
    Line items, priced at placement time
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    product_name = Column(String(200))
    quantity = Column(Integer, nullable=False)
    unit_price = Column(DECIMAL(12, 2), nullable=False)
    subtotal = Column(DECIMAL(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
