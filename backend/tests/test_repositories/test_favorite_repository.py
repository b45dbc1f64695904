"""
Unit tests for FavoriteRepository

Author: Tekashi
Date: 2025-11-04
"""
from unittest.mock import MagicMock

from tekashi.domain.favorite import FavoriteCreate
from tekashi.repositories.favorite_repository import FavoriteRepository

from conftest import NOW, make_product


def favorite_row(**overrides) -> dict:
    row = {
        'id': 3,
        'user_id': 7,
        'product_id': 1,
        'is_active': True,
        'notes': None,
        'priority': 3,
        'notify_offer': True,
        'notify_stock': True,
        'view_count': 0,
        'last_viewed_at': None,
        'created_at': NOW,
        'updated_at': None,
    }
    row.update(overrides)
    return row


class TestFavoriteRepository:

    def test_add_reactivates_removed_favorite(self, mock_db):
        """Adding a pair that exists inactive updates the row instead of failing"""
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = favorite_row(priority=5, notes="gift")

        favorite = FavoriteRepository(MagicMock()).add(
            7, FavoriteCreate(product_id=1, priority=5, notes="gift")
        )

        assert favorite.is_active is True
        assert favorite.priority == 5
        sql, params = mock_cursor.execute.call_args.args
        assert "ON CONFLICT (user_id, product_id) DO UPDATE" in sql
        assert "is_active = TRUE" in sql
        assert params[:4] == (7, 1, "gift", 5)
        mock_conn.commit.assert_called_once()

    def test_find_by_user_attaches_products_in_one_batch(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {'total': 2}
        mock_cursor.fetchall.return_value = [
            favorite_row(id=3, product_id=1),
            favorite_row(id=4, product_id=2),
        ]
        products = MagicMock()
        products.find_by_ids.return_value = {1: make_product(id=1)}

        favorites, total = FavoriteRepository(products).find_by_user(7, limit=10)

        assert total == 2
        assert favorites[0].product.id == 1
        # Product 2 no longer exists
        assert favorites[1].product is None
        products.find_by_ids.assert_called_once()
        assert list(products.find_by_ids.call_args.args[0]) == [1, 2]

        select_sql = mock_cursor.execute.call_args_list[1].args[0]
        assert "ORDER BY f.priority DESC, f.created_at DESC" in select_sql

    def test_remove_only_touches_active_favorite(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert FavoriteRepository(MagicMock()).remove(7, 1) is None

        sql, params = mock_cursor.execute.call_args.args
        assert "is_active = FALSE" in sql
        assert "f.is_active = TRUE" in sql
        assert params == [7, 1]

    def test_stats_fill_every_priority(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {
            'total': 3, 'unique_products': 3, 'notify_offer': 2, 'notify_stock': 1
        }
        mock_cursor.fetchall.return_value = [
            {'priority': 5, 'count': 2},
            {'priority': 3, 'count': 1},
        ]

        stats = FavoriteRepository(MagicMock()).get_stats(7)

        assert stats['total'] == 3
        assert stats['by_priority'] == {1: 0, 2: 0, 3: 1, 4: 0, 5: 2}

    def test_low_stock_uses_threshold(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = []
        products = MagicMock()
        products.find_by_ids.return_value = {}

        assert FavoriteRepository(products).find_low_stock(7, threshold=5) == []

        sql, params = mock_cursor.execute.call_args.args
        assert "p.stock <= %s" in sql
        assert "f.notify_stock = TRUE" in sql
        assert params == (7, 5)
