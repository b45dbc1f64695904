"""
Unit tests for WishlistRepository

Author: Tekashi
Date: 2025-11-04
"""
from unittest.mock import MagicMock

from tekashi.domain.wishlist import WishlistItemCreate
from tekashi.repositories.wishlist_repository import WishlistRepository

from conftest import NOW, make_product


def wishlist_row(**overrides) -> dict:
    row = {
        'id': 5,
        'user_id': 7,
        'name': 'Birthday',
        'description': None,
        'is_active': True,
        'is_public': True,
        'share_code': 'ABCD1234',
        'share_expires_at': None,
        'share_max_uses': 3,
        'share_use_count': 1,
        'notify': None,
        'views': 0,
        'last_viewed_at': None,
        'created_at': NOW,
        'updated_at': None,
    }
    row.update(overrides)
    return row


def item_row(**overrides) -> dict:
    row = {
        'id': 21,
        'wishlist_id': 5,
        'product_id': 1,
        'notes': None,
        'priority': 3,
        'quantity': 1,
        'added_at': NOW,
    }
    row.update(overrides)
    return row


class TestShareUse:
    """The share link use limit is enforced by the UPDATE itself"""

    def test_consume_share_use_checks_limit_and_expiry_in_sql(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {'id': 5}

        assert WishlistRepository(MagicMock()).consume_share_use(5) is True

        sql, params = mock_cursor.execute.call_args.args
        assert "share_use_count = share_use_count + 1" in sql
        assert "share_max_uses = 0 OR share_use_count < share_max_uses" in sql
        assert "share_expires_at IS NULL OR share_expires_at > NOW()" in sql
        assert "is_public = TRUE" in sql
        assert params == (5,)
        mock_conn.commit.assert_called_once()

    def test_exhausted_link_is_not_counted(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert WishlistRepository(MagicMock()).consume_share_use(5) is False

    def test_owner_view_does_not_use_up_shares(self, mock_db):
        _, mock_cursor = mock_db

        WishlistRepository(MagicMock()).record_view(5)

        sql = mock_cursor.execute.call_args.args[0]
        assert "views = views + 1" in sql
        assert "share_use_count" not in sql


class TestWishlistRepository:

    def test_find_by_share_code_is_case_insensitive(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = wishlist_row()
        mock_cursor.fetchall.return_value = [item_row()]
        products = MagicMock()
        products.find_by_ids.return_value = {1: make_product()}

        wishlist = WishlistRepository(products).find_by_share_code("abcd1234")

        assert wishlist.share.code == "ABCD1234"
        assert wishlist.share.max_uses == 3
        assert wishlist.items[0].product.name == "Runner X"
        assert mock_cursor.execute.call_args_list[0].args[1] == ("ABCD1234",)

    def test_add_item_already_in_list_returns_none(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        item = WishlistRepository(MagicMock()).add_item(5, WishlistItemCreate(product_id=1))

        assert item is None
        sql = mock_cursor.execute.call_args.args[0]
        assert "ON CONFLICT (wishlist_id, product_id) DO NOTHING" in sql
        # The list's updated_at is only bumped when something was inserted
        assert mock_cursor.execute.call_count == 1

    def test_remove_item_bumps_list(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {'id': 21}

        assert WishlistRepository(MagicMock()).remove_item(5, 1) is True

        assert mock_cursor.execute.call_count == 2
        assert "UPDATE wishlists SET updated_at = NOW()" in mock_cursor.execute.call_args.args[0]
