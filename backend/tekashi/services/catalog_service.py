"""
Catalog Service
Business rules around products and product types

Author: Tekashi
Date: 2025-10-30
"""
import logging
from typing import Optional

from tekashi.core.exceptions import ConflictError, NotFoundError, ValidationError
from tekashi.domain.product import Product, ProductCreate, ProductUpdate
from tekashi.domain.product_type import ProductType, ProductTypeCreate, ProductTypeUpdate
from tekashi.repositories.product_repository import ProductRepository
from tekashi.repositories.product_type_repository import ProductTypeRepository

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Keeps products and their types consistent:
    - products always point at an existing type
    - product_count on a type follows its active products
    - a type can't be deleted while active products use it
    """

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        type_repository: Optional[ProductTypeRepository] = None
    ):
        self.products = product_repository or ProductRepository()
        self.types = type_repository or ProductTypeRepository()

    def _require_type(self, type_id: int) -> ProductType:
        product_type = self.types.find_by_id(type_id)
        if product_type is None:
            raise ValidationError(f"Product type {type_id} does not exist")
        return product_type

    # Products

    def get_product(self, product_id: int, count_view: bool = False) -> Product:
        product = self.products.find_by_id(product_id)
        if product is None or not product.is_active:
            raise NotFoundError(f"Product {product_id} not found")
        if count_view:
            self.products.increment_views(product_id)
            product.views += 1
        return product

    def create_product(self, data: ProductCreate) -> Product:
        self._require_type(data.product_type_id)
        product = self.products.create(data)
        self.types.refresh_product_count(data.product_type_id)
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        current = self.products.find_by_id(product_id)
        if current is None:
            raise NotFoundError(f"Product {product_id} not found")

        type_changed = (
            data.product_type_id is not None
            and data.product_type_id != current.product_type_id
        )
        if type_changed:
            self._require_type(data.product_type_id)

        product = self.products.update(product_id, data)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        if type_changed:
            self.types.refresh_product_count(current.product_type_id)
            self.types.refresh_product_count(product.product_type_id)
        return product

    def delete_product(self, product_id: int) -> Product:
        """Soft delete and update the type's counter"""
        product = self.products.deactivate(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        self.types.refresh_product_count(product.product_type_id)
        logger.info(f"Deactivated product {product_id}")
        return product

    # Product types

    def get_type(self, type_id: int) -> ProductType:
        product_type = self.types.find_by_id(type_id)
        if product_type is None:
            raise NotFoundError(f"Product type {type_id} not found")
        return product_type

    def create_type(self, data: ProductTypeCreate) -> ProductType:
        if self.types.find_by_name(data.name) is not None:
            raise ConflictError(f"A product type named '{data.name}' already exists")
        return self.types.create(data)

    def update_type(self, type_id: int, data: ProductTypeUpdate) -> ProductType:
        if data.name is not None:
            existing = self.types.find_by_name(data.name)
            if existing is not None and existing.id != type_id:
                raise ConflictError(f"A product type named '{data.name}' already exists")

        product_type = self.types.update(type_id, data)
        if product_type is None:
            raise NotFoundError(f"Product type {type_id} not found")
        return product_type

    def delete_type(self, type_id: int) -> None:
        self.get_type(type_id)

        in_use = self.types.count_active_products(type_id)
        if in_use:
            raise ValidationError(
                f"Product type {type_id} still has {in_use} active products"
            )

        self.types.delete(type_id)
        logger.info(f"Deleted product type {type_id}")
