"""
Product Types API Endpoints
Catalog categories (sneakers, boots, sandals, ...)

Author: Tekashi
Date: 2025-10-31
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pydantic import BaseModel

from tekashi.core.auth import require_admin
from tekashi.core.exceptions import TekashiError
from tekashi.domain.product_type import ProductTypeCreate, ProductTypeUpdate
from tekashi.repositories.product_repository import ProductRepository
from tekashi.repositories.product_type_repository import ProductTypeRepository
from tekashi.services.catalog_service import CatalogService

router = APIRouter()


class ActiveUpdate(BaseModel):
    is_active: bool


class SortOrderUpdate(BaseModel):
    sort_order: int


@router.get("/")
async def get_product_types(is_active: Optional[bool] = Query(None)):
    """All product types, by sort order then name"""
    try:
        types = ProductTypeRepository().find_all(is_active=is_active)
        return {
            "status": "success",
            "count": len(types),
            "data": [t.to_dict() for t in types]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product types: {str(e)}")


@router.get("/active")
async def get_active_product_types():
    try:
        types = ProductTypeRepository().find_active()
        return {
            "status": "success",
            "count": len(types),
            "data": [t.to_dict() for t in types]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product types: {str(e)}")


@router.get("/stats")
async def get_product_type_stats(admin=Depends(require_admin)):
    """
    Per-type statistics over active products:
    count, average/min/max price, total stock, featured and on-offer counts
    """
    try:
        return {"status": "success", "data": ProductTypeRepository().get_stats()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/slug/{slug}")
async def get_product_type_by_slug(slug: str):
    try:
        product_type = ProductTypeRepository().find_by_slug(slug)
        if not product_type:
            raise HTTPException(status_code=404, detail=f"Product type '{slug}' not found")
        return {"status": "success", "data": product_type.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product type: {str(e)}")


@router.get("/{type_id}")
async def get_product_type(type_id: int):
    try:
        return {"status": "success", "data": CatalogService().get_type(type_id).to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product type: {str(e)}")


@router.get("/{type_id}/products")
async def get_product_type_products(
    type_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    try:
        CatalogService().get_type(type_id)
        products, total = ProductRepository().find_all(
            product_type_id=type_id, limit=limit, offset=offset
        )
        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.post("/", status_code=201)
async def create_product_type(data: ProductTypeCreate, admin=Depends(require_admin)):
    try:
        product_type = CatalogService().create_type(data)
        return {"status": "success", "data": product_type.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product type: {str(e)}")


@router.put("/{type_id}")
async def update_product_type(type_id: int, data: ProductTypeUpdate, admin=Depends(require_admin)):
    try:
        product_type = CatalogService().update_type(type_id, data)
        return {"status": "success", "data": product_type.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product type: {str(e)}")


@router.delete("/{type_id}")
async def delete_product_type(type_id: int, admin=Depends(require_admin)):
    try:
        CatalogService().delete_type(type_id)
        return {"status": "success", "message": f"Product type {type_id} deleted"}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product type: {str(e)}")


@router.patch("/{type_id}/active")
async def set_product_type_active(type_id: int, body: ActiveUpdate, admin=Depends(require_admin)):
    try:
        product_type = ProductTypeRepository().set_active(type_id, body.is_active)
        if not product_type:
            raise HTTPException(status_code=404, detail=f"Product type {type_id} not found")
        return {"status": "success", "data": product_type.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product type: {str(e)}")


@router.patch("/{type_id}/sort-order")
async def set_product_type_sort_order(type_id: int, body: SortOrderUpdate, admin=Depends(require_admin)):
    try:
        product_type = ProductTypeRepository().set_sort_order(type_id, body.sort_order)
        if not product_type:
            raise HTTPException(status_code=404, detail=f"Product type {type_id} not found")
        return {"status": "success", "data": product_type.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product type: {str(e)}")


@router.post("/{type_id}/refresh-count")
async def refresh_product_count(type_id: int, admin=Depends(require_admin)):
    """Recount the active products of a type"""
    try:
        count = ProductTypeRepository().refresh_product_count(type_id)
        if count is None:
            raise HTTPException(status_code=404, detail=f"Product type {type_id} not found")
        return {"status": "success", "data": {"id": type_id, "product_count": count}}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error refreshing product count: {str(e)}")
