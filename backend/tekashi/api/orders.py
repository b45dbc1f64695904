"""
Orders API Endpoints
Checkout (guest or signed-in), order tracking, cancellation and admin status changes

Author: Tekashi
Date: 2025-10-31
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from tekashi.core.auth import get_current_account, get_optional_account, require_admin
from tekashi.core.exceptions import TekashiError
from tekashi.domain.order import OrderCreate, OrderStatus, OrderStatusUpdate
from tekashi.repositories.order_repository import OrderRepository
from tekashi.services.order_service import OrderService

router = APIRouter()


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


def _page(orders, total: int, limit: int, offset: int) -> dict:
    return {
        "status": "success",
        "total": total,
        "limit": limit,
        "offset": offset,
        "count": len(orders),
        "data": [order.to_dict() for order in orders]
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
async def place_order(data: OrderCreate, response: Response, account=Depends(get_optional_account)):
    """
    Place an order

    Prices come from the catalog. Resubmitting a known order_number returns
    the stored order with 200 instead of creating another one.
    """
    try:
        order, created = OrderService().place_order(data, account)
        if not created:
            response.status_code = status.HTTP_200_OK
        return {"status": "success", "created": created, "data": order.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error placing order: {str(e)}")


@router.get("/mine")
async def get_my_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account=Depends(get_current_account)
):
    try:
        orders, total = OrderRepository().find_all(
            user_id=account.id,
            status=order_status.value if order_status else None,
            limit=limit,
            offset=offset
        )
        return _page(orders, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/guest")
async def lookup_guest_orders(
    email: Optional[str] = Query(None, description="Shipping email used at checkout"),
    order_number: Optional[str] = Query(None, description="Order number (TK...)")
):
    """Find orders by checkout email and/or order number (max 10)"""
    try:
        orders = OrderService().lookup_guest_orders(email=email, order_number=order_number)
        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error looking up orders: {str(e)}")


@router.get("/")
async def get_all_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by order status"),
    from_date: Optional[datetime] = Query(None, description="Placed at or after (ISO format)"),
    to_date: Optional[datetime] = Query(None, description="Placed at or before (ISO format)"),
    search: Optional[str] = Query(None, description="Search by order number, name or email"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin=Depends(require_admin)
):
    """Admin listing of every order"""
    try:
        orders, total = OrderRepository().find_all(
            status=order_status.value if order_status else None,
            date_from=from_date,
            date_to=to_date,
            search=search,
            limit=limit,
            offset=offset
        )
        return _page(orders, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/stats")
async def get_order_stats(
    from_date: Optional[datetime] = Query(None, description="Placed at or after (ISO format)"),
    to_date: Optional[datetime] = Query(None, description="Placed at or before (ISO format)"),
    top: int = Query(10, ge=1, le=50, description="Number of best-selling products"),
    admin=Depends(require_admin)
):
    """
    Get order statistics (admin)

    Returns:
    - Total orders and orders by status
    - Revenue and average order value
    - Best-selling products
    """
    try:
        repo = OrderRepository()
        stats = repo.get_stats(date_from=from_date, date_to=to_date)
        stats['top_products'] = repo.top_products(limit=top, date_from=from_date, date_to=to_date)

        return {
            "status": "success",
            "data": stats
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/{order_id}")
async def get_order(order_id: int, account=Depends(get_optional_account)):
    try:
        order = OrderService().get_order(order_id, account)
        return {"status": "success", "data": order.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    body: Optional[CancelRequest] = None,
    account=Depends(get_current_account)
):
    """Cancel one of your pending or confirmed orders; stock and points are returned"""
    try:
        order = OrderService().cancel_order(order_id, account, reason=body.reason if body else None)
        return {"status": "success", "data": order.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cancelling order: {str(e)}")


@router.patch("/{order_id}/status")
async def update_order_status(order_id: int, update: OrderStatusUpdate, admin=Depends(require_admin)):
    try:
        order = OrderService().update_status(order_id, update)
        return {"status": "success", "data": order.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order: {str(e)}")
