"""
Wishlists API Endpoints
Named product lists, private or shared through a code

Author: Tekashi
Date: 2025-10-31
"""
from fastapi import APIRouter, Depends, HTTPException

from tekashi.core.auth import get_current_account, get_optional_account, require_admin
from tekashi.core.exceptions import TekashiError
from tekashi.domain.wishlist import (
    ShareUpdate,
    WishlistCreate,
    WishlistItemCreate,
    WishlistItemUpdate,
    WishlistUpdate,
)
from tekashi.repositories.wishlist_repository import WishlistRepository
from tekashi.services.wishlist_service import WishlistService

router = APIRouter()


def _list(wishlists) -> dict:
    return {
        "status": "success",
        "count": len(wishlists),
        "data": [wishlist.to_dict() for wishlist in wishlists]
    }


@router.get("/")
async def get_my_wishlists(account=Depends(get_current_account)):
    try:
        return _list(WishlistRepository().find_by_user(account.id))

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlists: {str(e)}")


@router.post("/", status_code=201)
async def create_wishlist(data: WishlistCreate, account=Depends(get_current_account)):
    try:
        wishlist = WishlistRepository().create(account.id, data)
        return {"status": "success", "data": wishlist.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating wishlist: {str(e)}")


@router.get("/shared/{code}")
async def get_shared_wishlist(code: str):
    """Public lookup by share code"""
    try:
        wishlist = WishlistService().find_shared(code)
        return {"status": "success", "data": wishlist.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.get("/user/{user_id}")
async def get_user_wishlists(user_id: int, admin=Depends(require_admin)):
    try:
        return _list(WishlistRepository().find_by_user(user_id))

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlists: {str(e)}")


@router.get("/{wishlist_id}")
async def get_wishlist(wishlist_id: int, account=Depends(get_optional_account)):
    """The owner, or anyone when the list is public"""
    try:
        wishlist = WishlistService().view(wishlist_id, account)
        return {"status": "success", "data": wishlist.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.put("/{wishlist_id}")
async def update_wishlist(wishlist_id: int, data: WishlistUpdate, account=Depends(get_current_account)):
    try:
        wishlist = WishlistService().update(wishlist_id, account, data)
        return {"status": "success", "data": wishlist.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating wishlist: {str(e)}")


@router.delete("/{wishlist_id}")
async def delete_wishlist(wishlist_id: int, account=Depends(get_current_account)):
    try:
        WishlistService().delete(wishlist_id, account)
        return {"status": "success", "message": f"Wishlist {wishlist_id} deleted"}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting wishlist: {str(e)}")


@router.post("/{wishlist_id}/items", status_code=201)
async def add_wishlist_item(wishlist_id: int, data: WishlistItemCreate, account=Depends(get_current_account)):
    try:
        item = WishlistService().add_item(wishlist_id, account, data)
        return {"status": "success", "data": item.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding item: {str(e)}")


@router.put("/{wishlist_id}/items/{product_id}")
async def update_wishlist_item(
    wishlist_id: int,
    product_id: int,
    data: WishlistItemUpdate,
    account=Depends(get_current_account)
):
    try:
        item = WishlistService().update_item(wishlist_id, product_id, account, data)
        return {"status": "success", "data": item.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating item: {str(e)}")


@router.delete("/{wishlist_id}/items/{product_id}")
async def remove_wishlist_item(wishlist_id: int, product_id: int, account=Depends(get_current_account)):
    try:
        WishlistService().remove_item(wishlist_id, product_id, account)
        return {"status": "success", "message": f"Product {product_id} removed from wishlist"}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing item: {str(e)}")


@router.put("/{wishlist_id}/share")
async def configure_sharing(wishlist_id: int, data: ShareUpdate, account=Depends(get_current_account)):
    """Publish or hide the list; a share code is created on first publish"""
    try:
        wishlist = WishlistService().configure_sharing(wishlist_id, account, data)
        return {"status": "success", "data": wishlist.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating sharing: {str(e)}")


@router.post("/{wishlist_id}/share/regenerate")
async def regenerate_share_code(wishlist_id: int, account=Depends(get_current_account)):
    try:
        wishlist = WishlistService().regenerate_code(wishlist_id, account)
        return {"status": "success", "data": wishlist.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error regenerating code: {str(e)}")
