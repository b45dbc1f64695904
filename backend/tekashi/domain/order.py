"""
Order Domain Models

Represents orders, their line items and the pricing rules applied when an
order is placed.

Author: Tekashi
Date: 2025-10-22
"""
import secrets
import string
from pydantic import BaseModel, Field, ConfigDict, EmailStr, model_validator
from typing import Optional, List, Iterable, NamedTuple
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from tekashi.domain.common import utcnow, to_money, decimals_to_float

ORDER_NUMBER_PREFIX = "TK"
_BASE36 = string.digits + string.ascii_uppercase


class OrderStatus(str, Enum):
    """Order lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# Customers may only cancel before the order is being prepared
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

# No transition leaves these states
TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash_on_delivery"


CARD_METHODS = frozenset({PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD})


class ShippingMethod(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ShippingAddress(BaseModel):
    """Where the order is delivered"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field("Colombia", max_length=100)
    coordinates: Optional[Coordinates] = None


class PaymentInfo(BaseModel):
    """Payment data kept on the order (never the full card number)"""
    method: PaymentMethod
    card_last4: Optional[str] = None
    holder_name: Optional[str] = Field(None, max_length=100)
    transaction_id: Optional[str] = None


class PaymentDetails(BaseModel):
    """Payment data as submitted by the checkout"""
    method: PaymentMethod
    card_number: Optional[str] = Field(None, min_length=12, max_length=19, pattern=r"^[0-9 ]+$")
    holder_name: Optional[str] = Field(None, max_length=100)
    expiry: Optional[str] = Field(None, max_length=7)
    security_code: Optional[str] = Field(None, min_length=3, max_length=4)
    transaction_id: Optional[str] = None

    @model_validator(mode="after")
    def card_methods_need_card(self):
        if self.method in CARD_METHODS and not self.card_number:
            raise ValueError("card_number is required for card payments")
        return self

    def to_payment_info(self) -> PaymentInfo:
        """Drop sensitive card data, keep the last four digits"""
        last4 = None
        if self.card_number:
            last4 = self.card_number.replace(" ", "")[-4:]
        return PaymentInfo(
            method=self.method,
            card_last4=last4,
            holder_name=self.holder_name,
            transaction_id=self.transaction_id,
        )


class OrderItem(BaseModel):
    """
    Order Item domain model - represents a line item in an order

    Fields:
        id: Internal order item ID
        order_id: Parent order ID
        product_id: Reference to product catalog
        product_name: Product name at time of order
        quantity: Number of units ordered
        unit_price: Price per unit at time of order
        subtotal: quantity * unit_price
    """

    id: Optional[int] = Field(None, description="Order item ID")
    order_id: Optional[int] = Field(None, description="Parent order ID")
    product_id: int = Field(..., description="Product catalog ID")
    product_name: Optional[str] = Field(None, description="Product name at order time")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    unit_price: Decimal = Field(..., description="Price per unit", ge=0)
    subtotal: Decimal = Field(..., description="Line subtotal", ge=0)

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        return decimals_to_float(self.model_dump(), ['unit_price', 'subtotal'])


class Order(BaseModel):
    """
    Order domain model - represents a customer (or guest) order

    Fields:
        id: Internal order ID (primary key)
        order_number: Human-readable unique number (TK...)
        user_id: Owner account, None for guest checkouts
        items: Line items

        # Financial information
        subtotal: Sum of line subtotals
        tax: Tax on the subtotal
        shipping_cost: Delivery cost
        discount: Discount applied
        total: subtotal + tax + shipping_cost - discount

        # Status tracking
        status: Lifecycle state
        ordered_at: When the order was placed
        estimated_delivery_at: Set when the order is confirmed
        delivered_at: Set when the order is delivered
        tracking_number: Carrier tracking code

        loyalty_points_used: Points debited from the account at placement
        loyalty_points_earned: Points granted by this order
    """

    id: int = Field(..., description="Internal order ID")
    order_number: str = Field(..., description="Human-readable order number")
    user_id: Optional[int] = Field(None, description="Owner user ID (None for guests)")
    items: List[OrderItem] = Field(default_factory=list)

    shipping_address: ShippingAddress
    payment_info: PaymentInfo

    subtotal: Decimal = Field(..., ge=0)
    tax: Decimal = Field(..., ge=0)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    total: Decimal = Field(..., ge=0)

    status: OrderStatus = OrderStatus.PENDING
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    ordered_at: Optional[datetime] = None
    estimated_delivery_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)
    tracking_number: Optional[str] = None

    loyalty_points_used: int = Field(0, ge=0)
    loyalty_points_earned: int = Field(0, ge=0)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    @property
    def item_count(self) -> int:
        """Number of line items"""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def to_dict(self) -> dict:
        data = self.model_dump()

        data['items'] = [item.to_dict() for item in self.items]
        data['item_count'] = self.item_count
        data['total_quantity'] = self.total_quantity
        data['is_cancellable'] = self.is_cancellable

        return decimals_to_float(data, ['subtotal', 'tax', 'shipping_cost', 'discount', 'total'])


class OrderItemCreate(BaseModel):
    """Line item as requested by the checkout"""
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    """Schema for placing an order"""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    shipping_address: ShippingAddress
    payment: PaymentDetails
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    loyalty_points_used: int = Field(0, ge=0, description="Points to redeem as a discount")
    notes: Optional[str] = Field(None, max_length=500)
    order_number: Optional[str] = Field(
        None,
        pattern=r"^TK[0-9A-Z]{6,40}$",
        description="Client-generated number; resubmitting it returns the existing order",
    )


class OrderStatusUpdate(BaseModel):
    """Schema for an admin changing an order's status"""
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)
    tracking_number: Optional[str] = Field(None, max_length=100)


class OrderTotals(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    shipping_cost: Decimal
    discount: Decimal
    total: Decimal


def generate_order_number(now: Optional[datetime] = None) -> str:
    """TK + epoch milliseconds + 5 random base-36 characters"""
    now = now or utcnow()
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{ORDER_NUMBER_PREFIX}{millis}{suffix}"


def compute_totals(
    line_subtotals: Iterable[Decimal],
    tax_rate: Decimal,
    shipping_cost: Decimal = Decimal("0"),
    discount: Decimal = Decimal("0"),
) -> OrderTotals:
    """
    Price an order.

    subtotal = sum of lines, tax = subtotal * tax_rate,
    total = subtotal + tax + shipping - discount (all rounded to cents).

    Raises:
        ValueError: if the discount exceeds the amount due
    """
    subtotal = to_money(sum(line_subtotals, Decimal("0")))
    tax = to_money(subtotal * Decimal(str(tax_rate)))
    shipping_cost = to_money(shipping_cost)
    discount = to_money(discount)
    total = subtotal + tax + shipping_cost - discount
    if total < 0:
        raise ValueError("Discount exceeds the order amount")
    return OrderTotals(subtotal, tax, shipping_cost, discount, to_money(total))


def points_discount(points: int, point_value: Decimal) -> Decimal:
    """Money value of redeemed loyalty points"""
    return to_money(Decimal(points) * Decimal(str(point_value)))


def points_earned(total: Decimal, spend_per_point: Decimal) -> int:
    """One point per full spend_per_point of the order total"""
    spend_per_point = Decimal(str(spend_per_point))
    if spend_per_point <= 0:
        return 0
    return int(total // spend_per_point)


def estimated_delivery(confirmed_at: datetime, days: int) -> datetime:
    return confirmed_at + timedelta(days=days)
