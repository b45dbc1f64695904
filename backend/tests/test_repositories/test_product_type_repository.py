"""
Unit tests for ProductTypeRepository

Author: Tekashi
Date: 2025-11-04
"""
from tekashi.domain.product_type import ProductTypeCreate, ProductTypeUpdate
from tekashi.repositories.product_type_repository import ProductTypeRepository

from conftest import NOW


def type_row(**overrides) -> dict:
    row = {
        'id': 1,
        'name': 'Running Shoes',
        'description': None,
        'is_active': True,
        'sort_order': 0,
        'translations': None,
        'slug': 'running-shoes',
        'meta_description': None,
        'keywords': None,
        'product_count': 0,
        'created_at': NOW,
        'updated_at': None,
    }
    row.update(overrides)
    return row


class TestProductTypeRepository:

    def test_create_derives_slug_from_name(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = type_row()

        product_type = ProductTypeRepository().create(ProductTypeCreate(name="Running Shoes"))

        assert product_type.slug == "running-shoes"
        assert product_type.keywords == []
        params = mock_cursor.execute.call_args.args[1]
        assert params[0] == "Running Shoes"
        assert params[4] == "running-shoes"
        mock_conn.commit.assert_called_once()

    def test_rename_updates_slug(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = type_row(name="Trail Shoes", slug="trail-shoes")

        ProductTypeRepository().update(1, ProductTypeUpdate(name="Trail Shoes"))

        sql, params = mock_cursor.execute.call_args.args
        assert "name = %s, slug = %s, updated_at = NOW()" in sql
        assert params == ["Trail Shoes", "trail-shoes", 1]

    def test_refresh_product_count(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {'product_count': 12}

        assert ProductTypeRepository().refresh_product_count(1) == 12

        sql, params = mock_cursor.execute.call_args.args
        assert "is_active = TRUE" in sql
        assert params == (1, 1)

    def test_refresh_missing_type_returns_none(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert ProductTypeRepository().refresh_product_count(99) is None
