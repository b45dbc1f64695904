"""
Order Service
Places, cancels and advances orders while keeping stock and loyalty points consistent

Every operation that touches stock runs in a single database transaction:
product rows are locked (in id order) before being checked, and all stock
and points updates are guarded so a concurrent order can never drive a
balance below zero.

Author: Tekashi
Date: 2025-10-30
"""
import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from tekashi.core.config import settings
from tekashi.core.database import transaction
from tekashi.core.exceptions import (
    DuplicateOrderNumberError,
    InsufficientStockError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tekashi.domain.common import utcnow, to_money
from tekashi.domain.order import (
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    Order,
    OrderCreate,
    OrderItem,
    OrderStatus,
    OrderStatusUpdate,
    ShippingMethod,
    compute_totals,
    estimated_delivery,
    generate_order_number,
    points_discount,
    points_earned,
)
from tekashi.domain.user import User
from tekashi.repositories.order_repository import OrderRepository
from tekashi.repositories.product_repository import ProductRepository
from tekashi.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def aggregate_quantities(data: OrderCreate) -> Dict[int, int]:
    """Merge repeated products into one line, keeping first-seen order"""
    quantities: Dict[int, int] = OrderedDict()
    for item in data.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


def shipping_cost_for(method: ShippingMethod):
    costs = {
        ShippingMethod.STANDARD: settings.SHIPPING_COST_STANDARD,
        ShippingMethod.EXPRESS: settings.SHIPPING_COST_EXPRESS,
        ShippingMethod.OVERNIGHT: settings.SHIPPING_COST_OVERNIGHT,
    }
    return costs[method]


class OrderService:
    """
    Service for the order lifecycle

    Handles:
    - Placement (price lookup, stock reservation, points redemption)
    - Idempotent resubmission by order number
    - Customer cancellation and admin status changes
    """

    def __init__(
        self,
        order_repository: Optional[OrderRepository] = None,
        product_repository: Optional[ProductRepository] = None,
        user_repository: Optional[UserRepository] = None
    ):
        self.orders = order_repository or OrderRepository()
        self.products = product_repository or ProductRepository()
        self.users = user_repository or UserRepository()

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place_order(self, data: OrderCreate, account: Optional[User] = None) -> Tuple[Order, bool]:
        """
        Place an order for an account or a guest.

        Returns:
            Tuple of (order, created). created is False when the order number
            was already used by the same caller and the stored order is returned.

        Raises:
            ValidationError: unavailable product, bad totals, points misuse
            InsufficientStockError: a line asks for more than is in stock
            DuplicateOrderNumberError: the number belongs to someone else's order
        """
        if data.loyalty_points_used and account is None:
            raise ValidationError("Guest orders cannot redeem loyalty points")

        if data.order_number:
            existing = self.orders.find_by_number(data.order_number)
            if existing is not None:
                return self._replay(existing, account), False

        order_number = data.order_number or generate_order_number()

        try:
            with transaction() as conn:
                order_id = self._reserve_and_insert(data, account, order_number, conn)
                order = self.orders.find_by_id(order_id, conn=conn)
        except DuplicateOrderNumberError:
            # A concurrent submission with the same number won the insert
            existing = self.orders.find_by_number(order_number)
            if existing is None:
                raise
            return self._replay(existing, account), False

        logger.info(
            f"Order {order.order_number} placed: {order.total_quantity} units, "
            f"total {order.total} ({'user ' + str(account.id) if account else 'guest'})"
        )
        return order, True

    def _replay(self, existing: Order, account: Optional[User]) -> Order:
        caller_id = account.id if account else None
        if existing.user_id != caller_id:
            raise DuplicateOrderNumberError(existing.order_number)
        logger.info(f"Order {existing.order_number} resubmitted, returning stored order")
        return existing

    def _price_lines(self, quantities: Dict[int, int], conn) -> List[OrderItem]:
        locked = self.products.lock_for_order(list(quantities.keys()), conn)
        lines = []

        for product_id, quantity in quantities.items():
            product = locked.get(product_id)
            if product is None or not product.is_active:
                raise ValidationError(f"Product {product_id} is not available")
            if product.stock < quantity:
                raise InsufficientStockError(product_id, quantity, product.stock, product.name)

            unit_price = product.final_price
            lines.append(OrderItem(
                product_id=product_id,
                product_name=product.name,
                quantity=quantity,
                unit_price=unit_price,
                subtotal=to_money(unit_price * quantity)
            ))

        return lines

    def _reserve_and_insert(self, data: OrderCreate, account: Optional[User], order_number: str, conn) -> int:
        lines = self._price_lines(aggregate_quantities(data), conn)

        try:
            totals = compute_totals(
                [line.subtotal for line in lines],
                settings.TAX_RATE,
                shipping_cost_for(data.shipping_method),
                points_discount(data.loyalty_points_used, settings.LOYALTY_POINT_VALUE)
            )
        except ValueError as e:
            raise ValidationError(str(e))

        earned = points_earned(totals.total, settings.LOYALTY_SPEND_PER_POINT) if account else 0

        order_id = self.orders.insert(
            order_number=order_number,
            user_id=account.id if account else None,
            shipping_address=data.shipping_address,
            payment_info=data.payment.to_payment_info(),
            shipping_method=data.shipping_method.value,
            totals=totals,
            items=lines,
            loyalty_points_used=data.loyalty_points_used,
            loyalty_points_earned=earned,
            notes=data.notes,
            conn=conn
        )
        if order_id is None:
            raise DuplicateOrderNumberError(order_number)

        for line in lines:
            if not self.products.decrement_stock(line.product_id, line.quantity, conn):
                raise InsufficientStockError(line.product_id, line.quantity, 0, line.product_name)

        if data.loyalty_points_used:
            if not self.users.debit_points(account.id, data.loyalty_points_used, conn):
                raise ValidationError("Insufficient loyalty points")

        return order_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_order(self, order_id: int, account: Optional[User] = None) -> Order:
        """
        Account orders are visible to their owner and administrators.
        Guest orders are visible to anyone holding the id.
        """
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        if account is not None and account.is_admin:
            return order
        caller_id = account.id if account else None
        if order.user_id is not None and order.user_id != caller_id:
            raise PermissionDeniedError("You can only view your own orders")
        return order

    def lookup_guest_orders(
        self,
        email: Optional[str] = None,
        order_number: Optional[str] = None,
        limit: int = 10
    ) -> List[Order]:
        if not email and not order_number:
            raise ValidationError("Provide an email or an order number")
        orders, _ = self.orders.find_all(email=email, order_number=order_number, limit=limit)
        return orders

    # ------------------------------------------------------------------
    # Cancellation and status changes
    # ------------------------------------------------------------------

    def _restore_inventory(self, order: Order, conn) -> None:
        for item in order.items:
            self.products.restore_stock(item.product_id, item.quantity, conn)
        if order.user_id is not None and order.loyalty_points_used:
            self.users.credit_points(order.user_id, order.loyalty_points_used, conn)

    def cancel_order(self, order_id: int, account: User, reason: Optional[str] = None) -> Order:
        """
        Cancel one of the caller's orders while it is still pending or confirmed.

        Stock and redeemed points are returned in the same transaction.
        """
        with transaction() as conn:
            order = self.orders.find_by_id(order_id, conn=conn, for_update=True)
            if order is None:
                raise NotFoundError(f"Order {order_id} not found")
            if order.user_id is None or order.user_id != account.id:
                raise PermissionDeniedError("You can only cancel your own orders")
            if order.status not in CANCELLABLE_STATUSES:
                raise ValidationError(
                    f"Order in status '{order.status.value}' can no longer be cancelled"
                )

            self._restore_inventory(order, conn)
            self.orders.update_fields(
                order.id,
                {'status': OrderStatus.CANCELLED.value, 'notes': reason or order.notes},
                conn=conn
            )
            order = self.orders.find_by_id(order_id, conn=conn)

        logger.info(f"Order {order.order_number} cancelled by user {account.id}")
        return order

    def update_status(self, order_id: int, update: OrderStatusUpdate) -> Order:
        """
        Admin status change.

        Cancelled and refunded orders are final. Cancelling returns stock and
        points; delivered orders must be refunded instead.
        """
        with transaction() as conn:
            order = self.orders.find_by_id(order_id, conn=conn, for_update=True)
            if order is None:
                raise NotFoundError(f"Order {order_id} not found")

            if order.status in TERMINAL_STATUSES and update.status != order.status:
                raise ValidationError(
                    f"Order is {order.status.value}; its status can no longer change"
                )

            now = utcnow()
            fields = {'status': update.status.value}

            if update.status == OrderStatus.CANCELLED and order.status != OrderStatus.CANCELLED:
                if order.status == OrderStatus.DELIVERED:
                    raise ValidationError("Delivered orders must be refunded, not cancelled")
                self._restore_inventory(order, conn)
            elif update.status == OrderStatus.CONFIRMED and order.status != OrderStatus.CONFIRMED:
                fields['estimated_delivery_at'] = estimated_delivery(now, settings.ESTIMATED_DELIVERY_DAYS)
            elif update.status == OrderStatus.DELIVERED and order.status != OrderStatus.DELIVERED:
                fields['delivered_at'] = now

            if update.notes is not None:
                fields['notes'] = update.notes
            if update.tracking_number is not None:
                fields['tracking_number'] = update.tracking_number

            self.orders.update_fields(order.id, fields, conn=conn)
            updated = self.orders.find_by_id(order_id, conn=conn)

        logger.info(
            f"Order {updated.order_number} status {order.status.value} -> {updated.status.value}"
        )
        return updated
