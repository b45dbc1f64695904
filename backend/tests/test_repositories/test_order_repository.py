"""
Unit tests for OrderRepository

Author: Tekashi
Date: 2025-11-03
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from tekashi.domain.order import OrderItem, OrderTotals, PaymentInfo, ShippingAddress
from tekashi.repositories.order_repository import OrderRepository

from conftest import NOW


def order_row(**overrides) -> dict:
    row = {
        'id': 100,
        'order_number': 'TK1730635200000ABCDE',
        'user_id': 7,
        'shipping_address': {
            'name': 'Ana', 'email': 'ana@example.com', 'phone': '3001234567',
            'address': 'Calle 1 #2-3', 'city': 'Bogota', 'postal_code': '110111',
            'country': 'Colombia', 'coordinates': None
        },
        'payment_info': {'method': 'credit_card', 'card_last4': '1234', 'holder_name': 'Ana', 'transaction_id': None},
        'shipping_method': 'standard',
        'subtotal': Decimal('200.00'),
        'tax': Decimal('38.00'),
        'shipping_cost': Decimal('0.00'),
        'discount': Decimal('0.00'),
        'total': Decimal('238.00'),
        'status': 'pending',
        'ordered_at': NOW,
        'estimated_delivery_at': None,
        'delivered_at': None,
        'tracking_number': None,
        'notes': None,
        'loyalty_points_used': 0,
        'loyalty_points_earned': 2,
        'created_at': NOW,
        'updated_at': None,
    }
    row.update(overrides)
    return row


def item_row(**overrides) -> dict:
    row = {
        'id': 1, 'order_id': 100, 'product_id': 1, 'product_name': 'Runner X',
        'quantity': 2, 'unit_price': Decimal('100.00'), 'subtotal': Decimal('200.00')
    }
    row.update(overrides)
    return row


class TestOrderReads:

    def test_find_by_id_loads_items(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = order_row()
        mock_cursor.fetchall.return_value = [item_row(), item_row(id=2, product_id=3, quantity=1)]

        order = OrderRepository().find_by_id(100)

        assert order.order_number == 'TK1730635200000ABCDE'
        assert order.payment_info.card_last4 == '1234'
        assert order.total_quantity == 3
        assert "FOR UPDATE" not in mock_cursor.execute.call_args_list[0].args[0]

    def test_find_by_id_can_lock(self):
        conn = MagicMock()
        cursor = conn.cursor.return_value
        cursor.fetchone.return_value = order_row()
        cursor.fetchall.return_value = []

        OrderRepository().find_by_id(100, conn=conn, for_update=True)

        assert "FOR UPDATE" in cursor.execute.call_args_list[0].args[0]
        conn.close.assert_not_called()

    def test_find_by_number_missing(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert OrderRepository().find_by_number('TK000000') is None
        mock_cursor.execute.assert_called_once()

    def test_find_all_batches_items(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {'total': 2}
        mock_cursor.fetchall.side_effect = [
            [order_row(id=100), order_row(id=101, order_number='TK1730635200001ABCDE')],
            [item_row(order_id=100), item_row(id=2, order_id=101)],
        ]

        orders, total = OrderRepository().find_all(email='ANA@example.com', limit=10)

        assert total == 2
        assert [len(o.items) for o in orders] == [1, 1]
        # count, page, one items query
        assert mock_cursor.execute.call_count == 3
        count_sql, count_params = mock_cursor.execute.call_args_list[0].args
        assert "LOWER(o.shipping_address->>'email') = LOWER(%s)" in count_sql
        assert count_params == ['ANA@example.com']


class TestOrderInsert:

    def _insert(self, conn):
        return OrderRepository().insert(
            order_number='TK1730635200000ABCDE',
            user_id=7,
            shipping_address=ShippingAddress(
                name='Ana', email='ana@example.com', phone='300', address='Calle 1',
                city='Bogota', postal_code='110111'
            ),
            payment_info=PaymentInfo(method='paypal'),
            shipping_method='express',
            totals=OrderTotals(Decimal('200.00'), Decimal('38.00'), Decimal('0.00'), Decimal('0.00'), Decimal('238.00')),
            items=[
                OrderItem(product_id=1, product_name='Runner X', quantity=1,
                          unit_price=Decimal('100.00'), subtotal=Decimal('100.00')),
                OrderItem(product_id=2, product_name='Trail', quantity=1,
                          unit_price=Decimal('100.00'), subtotal=Decimal('100.00')),
            ],
            loyalty_points_used=0,
            loyalty_points_earned=2,
            notes=None,
            conn=conn,
        )

    def test_insert_writes_order_and_items(self):
        conn = MagicMock()
        cursor = conn.cursor.return_value
        cursor.fetchone.return_value = {'id': 100}

        assert self._insert(conn) == 100
        assert cursor.execute.call_count == 3
        assert "ON CONFLICT (order_number) DO NOTHING" in cursor.execute.call_args_list[0].args[0]
        conn.commit.assert_not_called()

    def test_duplicate_number_returns_none(self):
        conn = MagicMock()
        cursor = conn.cursor.return_value
        cursor.fetchone.return_value = None

        assert self._insert(conn) is None
        cursor.execute.assert_called_once()


class TestOrderUpdates:

    def test_update_fields_commits_own_connection(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {'id': 100}

        assert OrderRepository().update_fields(100, {'status': 'shipped', 'tracking_number': 'TRK'})

        sql, params = mock_cursor.execute.call_args.args
        assert "status = %s, tracking_number = %s, updated_at = NOW()" in sql
        assert params == ['shipped', 'TRK', 100]
        mock_conn.commit.assert_called_once()

    def test_failed_query_rolls_back(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.execute.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            OrderRepository().update_fields(100, {"status": "shipped"})

        mock_conn.rollback.assert_called_once()
        mock_conn.close.assert_called_once()


class TestOrderStats:

    def test_stats_fill_every_status(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {
            'total_orders': 3,
            'total_revenue': Decimal('476.00'),
            'average_order_value': Decimal('238.000000'),
        }
        mock_cursor.fetchall.return_value = [
            {'status': 'pending', 'count': 2},
            {'status': 'cancelled', 'count': 1},
        ]

        stats = OrderRepository().get_stats(date_from=NOW)

        assert stats['total_orders'] == 3
        assert stats['total_revenue'] == 476.0
        assert stats['average_order_value'] == 238.0
        assert stats['by_status']['pending'] == 2
        assert stats['by_status']['delivered'] == 0
        assert len(stats['by_status']) == 7

        totals_sql, params = mock_cursor.execute.call_args_list[0].args
        assert "NOT IN ('cancelled', 'refunded')" in totals_sql
        assert "o.ordered_at >= %s" in totals_sql
        assert params == [NOW]

    def test_stats_without_range_cover_all_orders(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {
            'total_orders': 0, 'total_revenue': 0, 'average_order_value': 0
        }
        mock_cursor.fetchall.return_value = []

        stats = OrderRepository().get_stats()

        assert stats['total_revenue'] == 0.0
        sql, params = mock_cursor.execute.call_args_list[0].args
        assert "WHERE 1=1" in sql
        assert params == []

    def test_top_products_by_units_sold(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = [{
            'product_id': 1, 'name': 'Runner X', 'brand': 'Tekashi',
            'units_sold': 4, 'revenue': Decimal('400.00')
        }]

        top = OrderRepository().top_products(limit=5)

        assert top == [{
            'product_id': 1, 'name': 'Runner X', 'brand': 'Tekashi',
            'units_sold': 4, 'revenue': 400.0
        }]
        sql, params = mock_cursor.execute.call_args.args
        assert "ORDER BY units_sold DESC" in sql
        assert params == [5]


def test_search_escapes_like_wildcards(mock_db):
    _, mock_cursor = mock_db
    mock_cursor.fetchone.return_value = {'total': 0}
    mock_cursor.fetchall.return_value = []

    OrderRepository().find_all(search="50%_off")

    count_params = mock_cursor.execute.call_args_list[0].args[1]
    assert count_params == ['%50\\%\\_off%'] * 3
