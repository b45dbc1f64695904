"""
Products API Endpoints
Catalog browsing for everyone, product management for administrators

Author: Tekashi
Date: 2025-10-31
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pydantic import BaseModel, Field

from tekashi.core.auth import get_optional_account, require_admin
from tekashi.core.exceptions import TekashiError
from tekashi.domain.catalog import Gender
from tekashi.domain.product import ProductCreate, ProductOffer, ProductUpdate
from tekashi.repositories.product_repository import ProductRepository
from tekashi.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
class FeaturedUpdate(BaseModel):
    is_featured: bool


class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


def _page(products, total: int, limit: int, offset: int) -> dict:
    return {
        "status": "success",
        "total": total,
        "limit": limit,
        "offset": offset,
        "count": len(products),
        "data": [product.to_dict() for product in products]
    }


@router.get("/")
async def get_products(
    product_type_id: Optional[int] = Query(None, description="Filter by product type"),
    gender: Optional[Gender] = Query(None, description="Filter by target gender"),
    brand: Optional[str] = Query(None, description="Filter by brand"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    is_featured: Optional[bool] = Query(None),
    on_offer: Optional[bool] = Query(None, description="Only products with a running offer"),
    search: Optional[str] = Query(None, description="Search name, description, brand"),
    sort: str = Query("created_at", description="name, price, created_at, rating, sales, views, stock"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    """Active products with optional filters"""
    try:
        products, total = ProductRepository().find_all(
            product_type_id=product_type_id,
            gender=gender.value if gender else None,
            brand=brand,
            min_price=min_price,
            max_price=max_price,
            is_featured=is_featured,
            on_offer=on_offer,
            search=search,
            sort=sort,
            direction=direction,
            limit=limit,
            offset=offset
        )
        return _page(products, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/search")
async def search_products(
    q: str = Query(..., min_length=1, description="Search text"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    try:
        products, total = ProductRepository().search(q, limit=limit, offset=offset)
        return _page(products, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error searching products: {str(e)}")


@router.get("/featured")
async def get_featured_products(limit: int = Query(10, ge=1, le=50)):
    try:
        products = ProductRepository().find_featured(limit=limit)
        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching featured products: {str(e)}")


@router.get("/offers")
async def get_products_on_offer(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    """Products with a running offer, biggest discount first"""
    try:
        products, total = ProductRepository().find_on_offer(limit=limit, offset=offset)
        return _page(products, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching offers: {str(e)}")


@router.get("/type/{product_type_id}")
async def get_products_by_type(
    product_type_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    try:
        products, total = ProductRepository().find_all(
            product_type_id=product_type_id, limit=limit, offset=offset
        )
        return _page(products, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: int, account=Depends(get_optional_account)):
    """
    Get a single active product

    Views are counted for signed-in visitors.
    """
    try:
        product = CatalogService().get_product(product_id, count_view=account is not None)
        return {"status": "success", "data": product.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("/", status_code=201)
async def create_product(data: ProductCreate, admin=Depends(require_admin)):
    try:
        product = CatalogService().create_product(data)
        return {"status": "success", "data": product.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(product_id: int, data: ProductUpdate, admin=Depends(require_admin)):
    try:
        product = CatalogService().update_product(product_id, data)
        return {"status": "success", "data": product.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(product_id: int, admin=Depends(require_admin)):
    """Soft delete"""
    try:
        CatalogService().delete_product(product_id)
        return {"status": "success", "message": f"Product {product_id} deactivated"}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")


def _admin_update(product):
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"status": "success", "data": product.to_dict()}


@router.patch("/{product_id}/featured")
async def set_featured(product_id: int, body: FeaturedUpdate, admin=Depends(require_admin)):
    try:
        return _admin_update(ProductRepository().set_featured(product_id, body.is_featured))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.patch("/{product_id}/offer")
async def set_offer(product_id: int, offer: ProductOffer, admin=Depends(require_admin)):
    try:
        return _admin_update(ProductRepository().set_offer(product_id, offer))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating offer: {str(e)}")


@router.patch("/{product_id}/stock")
async def set_stock(product_id: int, body: StockUpdate, admin=Depends(require_admin)):
    try:
        product = ProductRepository().set_stock(product_id, body.stock)
        logger.info(f"Stock of product {product_id} set to {body.stock}")
        return _admin_update(product)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating stock: {str(e)}")
