"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and their line items.
Items are batch-loaded for list queries to avoid N+1.

Author: Tekashi
Date: 2025-10-27
"""
from typing import Any, List, Optional, Tuple, Dict
from datetime import datetime

from psycopg2.extras import Json

from tekashi.domain.order import (
    Order, OrderItem, OrderStatus, OrderTotals, PaymentInfo, ShippingAddress
)
from tekashi.repositories.base import BaseRepository, like_pattern

ORDER_COLUMNS = """
    o.id, o.order_number, o.user_id, o.shipping_address, o.payment_info,
    o.shipping_method, o.subtotal, o.tax, o.shipping_cost, o.discount, o.total,
    o.status, o.ordered_at, o.estimated_delivery_at, o.delivered_at,
    o.tracking_number, o.notes, o.loyalty_points_used, o.loyalty_points_earned,
    o.created_at, o.updated_at
"""


class OrderRepository(BaseRepository):
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    Returns Order domain models with their items.
    """

    @staticmethod
    def _map_row_to_item(row: dict) -> OrderItem:
        return OrderItem(
            id=row['id'],
            order_id=row['order_id'],
            product_id=row['product_id'],
            product_name=row['product_name'],
            quantity=row['quantity'],
            unit_price=row['unit_price'],
            subtotal=row['subtotal']
        )

    @staticmethod
    def _map_row_to_order(row: dict, items: List[OrderItem]) -> Order:
        return Order(
            id=row['id'],
            order_number=row['order_number'],
            user_id=row['user_id'],
            items=items,
            shipping_address=row['shipping_address'],
            payment_info=row['payment_info'],
            shipping_method=row['shipping_method'],
            subtotal=row['subtotal'],
            tax=row['tax'],
            shipping_cost=row['shipping_cost'],
            discount=row['discount'],
            total=row['total'],
            status=row['status'],
            ordered_at=row['ordered_at'],
            estimated_delivery_at=row['estimated_delivery_at'],
            delivered_at=row['delivered_at'],
            tracking_number=row['tracking_number'],
            notes=row['notes'],
            loyalty_points_used=row['loyalty_points_used'],
            loyalty_points_earned=row['loyalty_points_earned'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _load_items(self, cursor, order_ids: List[int]) -> Dict[int, List[OrderItem]]:
        """Fetch the items of several orders in one query"""
        items_by_order = {order_id: [] for order_id in order_ids}
        if not order_ids:
            return items_by_order

        cursor.execute("""
            SELECT id, order_id, product_id, product_name, quantity, unit_price, subtotal
            FROM order_items
            WHERE order_id = ANY(%s)
            ORDER BY id
        """, (order_ids,))

        for row in cursor.fetchall():
            items_by_order[row['order_id']].append(self._map_row_to_item(row))
        return items_by_order

    def _select_one(self, cursor, column: str, value, for_update: bool = False) -> Optional[Order]:
        lock = "FOR UPDATE" if for_update else ""
        cursor.execute(f"""
            SELECT {ORDER_COLUMNS}
            FROM orders o
            WHERE o.{column} = %s
            {lock}
        """, (value,))

        row = cursor.fetchone()
        if not row:
            return None

        items = self._load_items(cursor, [row['id']])
        return self._map_row_to_order(row, items[row['id']])

    def find_by_id(self, order_id: int, conn=None, for_update: bool = False) -> Optional[Order]:
        """
        Find order by ID with its items

        Args:
            order_id: Internal order ID
            conn: Join the caller's transaction
            for_update: Lock the order row until the transaction ends

        Returns:
            Order or None if not found
        """
        with self._cursor(conn) as cursor:
            return self._select_one(cursor, "id", order_id, for_update=for_update)

    def find_by_number(self, order_number: str, conn=None) -> Optional[Order]:
        with self._cursor(conn) as cursor:
            return self._select_one(cursor, "order_number", order_number)

    def find_all(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        email: Optional[str] = None,
        order_number: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Args:
            user_id: Orders of one account
            status: Filter by status
            email: Shipping email (exact, case-insensitive)
            order_number: Exact order number
            date_from / date_to: Placement date range
            search: Partial match on order number, recipient name or email
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of orders, total count)
        """
        conditions = []
        params = []

        if user_id is not None:
            conditions.append("o.user_id = %s")
            params.append(user_id)

        if status:
            conditions.append("o.status = %s")
            params.append(status)

        if email:
            conditions.append("LOWER(o.shipping_address->>'email') = LOWER(%s)")
            params.append(email)

        if order_number:
            conditions.append("o.order_number = %s")
            params.append(order_number)

        if date_from:
            conditions.append("o.ordered_at >= %s")
            params.append(date_from)

        if date_to:
            conditions.append("o.ordered_at <= %s")
            params.append(date_to)

        if search:
            conditions.append("""(
                o.order_number ILIKE %s
                OR o.shipping_address->>'name' ILIKE %s
                OR o.shipping_address->>'email' ILIKE %s
            )""")
            search_term = like_pattern(search)
            params.extend([search_term, search_term, search_term])

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM orders o
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                WHERE {where_clause}
                ORDER BY o.ordered_at DESC, o.id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])
            rows = cursor.fetchall()

            items = self._load_items(cursor, [row['id'] for row in rows])
            orders = [self._map_row_to_order(row, items[row['id']]) for row in rows]

            return orders, total

    def insert(
        self,
        order_number: str,
        user_id: Optional[int],
        shipping_address: ShippingAddress,
        payment_info: PaymentInfo,
        shipping_method: str,
        totals: OrderTotals,
        items: List[OrderItem],
        loyalty_points_used: int,
        loyalty_points_earned: int,
        notes: Optional[str],
        conn
    ) -> Optional[int]:
        """
        Insert an order and its items inside the caller's transaction

        Returns:
            New order id, or None if the order number already exists
        """
        with self._cursor(conn) as cursor:
            cursor.execute("""
                INSERT INTO orders (
                    order_number, user_id, shipping_address, payment_info, shipping_method,
                    subtotal, tax, shipping_cost, discount, total,
                    status, loyalty_points_used, loyalty_points_earned, notes
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 'pending', %s, %s, %s
                )
                ON CONFLICT (order_number) DO NOTHING
                RETURNING id
            """, (
                order_number, user_id,
                Json(shipping_address.model_dump(mode="json")),
                Json(payment_info.model_dump(mode="json")),
                shipping_method,
                totals.subtotal, totals.tax, totals.shipping_cost, totals.discount, totals.total,
                loyalty_points_used, loyalty_points_earned, notes
            ))
            row = cursor.fetchone()
            if not row:
                return None
            order_id = row['id']

            for item in items:
                cursor.execute("""
                    INSERT INTO order_items (
                        order_id, product_id, product_name, quantity, unit_price, subtotal
                    ) VALUES (%s, %s, %s, %s, %s, %s)
                """, (
                    order_id, item.product_id, item.product_name, item.quantity,
                    item.unit_price, item.subtotal
                ))

            return order_id

    def update_fields(self, order_id: int, fields: dict, conn=None) -> bool:
        set_clause, params = self._set_clause(fields)
        with self._cursor(conn, commit=True) as cursor:
            cursor.execute(f"""
                UPDATE orders SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [order_id])
            return cursor.fetchone() is not None

    def has_delivered_product(self, user_id: int, product_id: int) -> bool:
        """True when the user received an order containing the product"""
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT 1
                FROM orders o
                JOIN order_items oi ON oi.order_id = o.id
                WHERE o.user_id = %s AND oi.product_id = %s AND o.status = 'delivered'
                LIMIT 1
            """, (user_id, product_id))
            return cursor.fetchone() is not None

    @staticmethod
    def _date_range(date_from: Optional[datetime], date_to: Optional[datetime]) -> Tuple[str, List]:
        conditions = []
        params = []
        if date_from:
            conditions.append("o.ordered_at >= %s")
            params.append(date_from)
        if date_to:
            conditions.append("o.ordered_at <= %s")
            params.append(date_to)
        return (" AND ".join(conditions) if conditions else "1=1"), params

    def get_stats(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Get order statistics for a placement date range

        Revenue and average order value leave out cancelled and refunded
        orders; the status breakdown counts every order.

        Returns:
            Dict with total_orders, total_revenue, average_order_value, by_status
        """
        where_clause, params = self._date_range(date_from, date_to)

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT
                    COUNT(*) as total_orders,
                    COALESCE(SUM(o.total) FILTER (
                        WHERE o.status NOT IN ('cancelled', 'refunded')
                    ), 0) as total_revenue,
                    COALESCE(AVG(o.total) FILTER (
                        WHERE o.status NOT IN ('cancelled', 'refunded')
                    ), 0) as average_order_value
                FROM orders o
                WHERE {where_clause}
            """, params)
            totals = cursor.fetchone()

            cursor.execute(f"""
                SELECT o.status, COUNT(*) as count
                FROM orders o
                WHERE {where_clause}
                GROUP BY o.status
            """, params)
            by_status = {status.value: 0 for status in OrderStatus}
            for row in cursor.fetchall():
                by_status[row['status']] = row['count']

            return {
                'total_orders': totals['total_orders'],
                'total_revenue': float(totals['total_revenue']),
                'average_order_value': round(float(totals['average_order_value']), 2),
                'by_status': by_status
            }

    def top_products(
        self,
        limit: int = 10,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Best-selling products by units sold, excluding cancelled and refunded orders"""
        where_clause, params = self._date_range(date_from, date_to)

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT
                    oi.product_id,
                    p.name,
                    p.brand,
                    SUM(oi.quantity) as units_sold,
                    SUM(oi.subtotal) as revenue
                FROM order_items oi
                JOIN orders o ON o.id = oi.order_id
                JOIN products p ON p.id = oi.product_id
                WHERE {where_clause}
                  AND o.status NOT IN ('cancelled', 'refunded')
                GROUP BY oi.product_id, p.name, p.brand
                ORDER BY units_sold DESC, revenue DESC
                LIMIT %s
            """, params + [limit])

            return [
                {
                    'product_id': row['product_id'],
                    'name': row['name'],
                    'brand': row['brand'],
                    'units_sold': int(row['units_sold']),
                    'revenue': float(row['revenue'])
                }
                for row in cursor.fetchall()
            ]
