"""
Favorites API Endpoints
Products a user marked as favorite, with offer and stock alerts

Author: Tekashi
Date: 2025-10-31
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from tekashi.core.auth import get_current_account, require_admin, ensure_owner_or_admin
from tekashi.core.config import settings
from tekashi.domain.favorite import FavoriteCreate, FavoriteUpdate
from tekashi.repositories.favorite_repository import FavoriteRepository
from tekashi.repositories.product_repository import ProductRepository

router = APIRouter()


def _list(favorites) -> dict:
    return {
        "status": "success",
        "count": len(favorites),
        "data": [favorite.to_dict() for favorite in favorites]
    }


@router.get("/")
async def get_my_favorites(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account=Depends(get_current_account)
):
    try:
        favorites, total = FavoriteRepository().find_by_user(account.id, limit=limit, offset=offset)
        return {**_list(favorites), "total": total, "limit": limit, "offset": offset}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching favorites: {str(e)}")


@router.post("/", status_code=201)
async def add_favorite(data: FavoriteCreate, account=Depends(get_current_account)):
    """Add a product; a previously removed favorite is reactivated"""
    try:
        product = ProductRepository().find_by_id(data.product_id)
        if not product or not product.is_active:
            raise HTTPException(status_code=404, detail=f"Product {data.product_id} not found")

        repo = FavoriteRepository()
        existing = repo.find(account.id, data.product_id)
        if existing and existing.is_active:
            raise HTTPException(status_code=400, detail="Product is already in your favorites")

        favorite = repo.add(account.id, data)
        favorite.product = product
        return {"status": "success", "data": favorite.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding favorite: {str(e)}")


@router.get("/stats")
async def get_my_favorite_stats(account=Depends(get_current_account)):
    try:
        return {"status": "success", "data": FavoriteRepository().get_stats(account.id)}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/offers")
async def get_favorites_on_offer(account=Depends(get_current_account)):
    """Favorites with offer alerts whose product is on offer now"""
    try:
        return _list(FavoriteRepository().find_on_offer(account.id))

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching favorites: {str(e)}")


@router.get("/low-stock")
async def get_favorites_low_stock(
    threshold: int = Query(settings.LOW_STOCK_THRESHOLD, ge=0),
    account=Depends(get_current_account)
):
    """Favorites with stock alerts whose product is running out"""
    try:
        return _list(FavoriteRepository().find_low_stock(account.id, threshold))

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching favorites: {str(e)}")


@router.get("/user/{user_id}")
async def get_user_favorites(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account=Depends(get_current_account)
):
    try:
        ensure_owner_or_admin(account, user_id, "You can only view your own favorites")
        favorites, total = FavoriteRepository().find_by_user(user_id, limit=limit, offset=offset)
        return {**_list(favorites), "total": total, "limit": limit, "offset": offset}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching favorites: {str(e)}")


@router.get("/product/{product_id}/users")
async def get_product_fans(
    product_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin=Depends(require_admin)
):
    """Users who favorited a product"""
    try:
        users, total = FavoriteRepository().find_by_product(product_id, limit=limit, offset=offset)
        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(users),
            "data": users
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")


@router.get("/check/{product_id}")
async def check_favorite(product_id: int, account=Depends(get_current_account)):
    try:
        favorite = FavoriteRepository().find(account.id, product_id)
        return {
            "status": "success",
            "data": {"product_id": product_id, "is_favorite": bool(favorite and favorite.is_active)}
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error checking favorite: {str(e)}")


@router.put("/{product_id}")
async def update_favorite(product_id: int, data: FavoriteUpdate, account=Depends(get_current_account)):
    try:
        favorite = FavoriteRepository().update(account.id, product_id, data.model_dump(exclude_unset=True))
        if not favorite:
            raise HTTPException(status_code=404, detail="Favorite not found")
        return {"status": "success", "data": favorite.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating favorite: {str(e)}")


@router.post("/{product_id}/view")
async def record_favorite_view(product_id: int, account=Depends(get_current_account)):
    try:
        favorite = FavoriteRepository().record_view(account.id, product_id)
        if not favorite:
            raise HTTPException(status_code=404, detail="Favorite not found")
        return {"status": "success", "data": favorite.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error recording view: {str(e)}")


@router.delete("/{product_id}")
async def remove_favorite(product_id: int, account=Depends(get_current_account)):
    try:
        if not FavoriteRepository().remove(account.id, product_id):
            raise HTTPException(status_code=404, detail="Favorite not found")
        return {"status": "success", "message": f"Product {product_id} removed from favorites"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing favorite: {str(e)}")
