"""
Unit tests for CatalogService

Author: Tekashi
Date: 2025-11-03
"""
from decimal import Decimal
from unittest.mock import MagicMock, call

import pytest

from tekashi.core.exceptions import ConflictError, NotFoundError, ValidationError
from tekashi.domain.product import ProductCreate, ProductUpdate
from tekashi.domain.product_type import ProductType, ProductTypeCreate, ProductTypeUpdate
from tekashi.services.catalog_service import CatalogService

from conftest import make_product


@pytest.fixture
def products():
    return MagicMock(name="products")


@pytest.fixture
def types():
    repo = MagicMock(name="types")
    repo.find_by_id.return_value = ProductType(id=1, name="Sneakers")
    repo.find_by_name.return_value = None
    return repo


@pytest.fixture
def service(products, types):
    return CatalogService(products, types)


class TestProducts:

    def test_get_product_counts_view(self, service, products):
        products.find_by_id.return_value = make_product(views=3)

        product = service.get_product(1, count_view=True)

        assert product.views == 4
        products.increment_views.assert_called_once_with(1)

    def test_get_product_without_view_count(self, service, products):
        products.find_by_id.return_value = make_product()
        service.get_product(1)
        products.increment_views.assert_not_called()

    def test_inactive_product_is_not_found(self, service, products):
        products.find_by_id.return_value = make_product(is_active=False)
        with pytest.raises(NotFoundError):
            service.get_product(1)

    def test_create_requires_existing_type(self, service, products, types):
        types.find_by_id.return_value = None

        with pytest.raises(ValidationError, match="does not exist"):
            service.create_product(ProductCreate(name="Boot", price=Decimal("10"), product_type_id=9))

        products.create.assert_not_called()

    def test_create_refreshes_type_count(self, service, products, types):
        products.create.return_value = make_product(id=12)

        product = service.create_product(ProductCreate(name="Boot", price=Decimal("10"), product_type_id=1))

        assert product.id == 12
        types.refresh_product_count.assert_called_once_with(1)

    def test_moving_product_refreshes_both_types(self, service, products, types):
        products.find_by_id.return_value = make_product(product_type_id=1)
        products.update.return_value = make_product(product_type_id=2)

        service.update_product(1, ProductUpdate(product_type_id=2))

        assert types.refresh_product_count.call_args_list == [call(1), call(2)]

    def test_plain_update_leaves_counts_alone(self, service, products, types):
        products.find_by_id.return_value = make_product()
        products.update.return_value = make_product(stock=3)

        service.update_product(1, ProductUpdate(stock=3))

        types.refresh_product_count.assert_not_called()

    def test_update_missing_product(self, service, products):
        products.find_by_id.return_value = None
        with pytest.raises(NotFoundError):
            service.update_product(1, ProductUpdate(stock=3))

    def test_delete_is_soft(self, service, products, types):
        products.deactivate.return_value = make_product(is_active=False, product_type_id=4)

        service.delete_product(1)

        products.deactivate.assert_called_once_with(1)
        types.refresh_product_count.assert_called_once_with(4)


class TestProductTypes:

    def test_duplicate_name_is_rejected(self, service, types):
        types.find_by_name.return_value = ProductType(id=3, name="Boots")

        with pytest.raises(ConflictError):
            service.create_type(ProductTypeCreate(name="Boots"))

        types.create.assert_not_called()

    def test_rename_to_own_name_is_allowed(self, service, types):
        types.find_by_name.return_value = ProductType(id=3, name="Boots")
        types.update.return_value = ProductType(id=3, name="Boots", sort_order=2)

        result = service.update_type(3, ProductTypeUpdate(name="Boots", sort_order=2))

        assert result.sort_order == 2

    def test_rename_to_taken_name_is_rejected(self, service, types):
        types.find_by_name.return_value = ProductType(id=3, name="Boots")

        with pytest.raises(ConflictError):
            service.update_type(5, ProductTypeUpdate(name="Boots"))

    def test_type_in_use_cannot_be_deleted(self, service, types):
        types.count_active_products.return_value = 2

        with pytest.raises(ValidationError, match="2 active products"):
            service.delete_type(1)

        types.delete.assert_not_called()

    def test_unused_type_is_deleted(self, service, types):
        types.count_active_products.return_value = 0

        service.delete_type(1)

        types.delete.assert_called_once_with(1)

    def test_missing_type(self, service, types):
        types.find_by_id.return_value = None
        with pytest.raises(NotFoundError):
            service.delete_type(1)
