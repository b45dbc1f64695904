"""
Notifications API Endpoints
In-app messages for users; admins can send to one user or many

Author: Tekashi
Date: 2025-10-31
"""
import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from tekashi.core.auth import get_current_account, require_admin
from tekashi.domain.notification import (
    NotificationBulkCreate,
    NotificationCategory,
    NotificationCreate,
    NotificationType,
)
from tekashi.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _page(notifications, total: int, limit: int, offset: int, language: Optional[str]) -> dict:
    return {
        "status": "success",
        "total": total,
        "limit": limit,
        "offset": offset,
        "count": len(notifications),
        "data": [n.to_dict(language) for n in notifications]
    }


@router.get("/")
async def get_my_notifications(
    unread_only: bool = Query(False),
    type: Optional[NotificationType] = Query(None, description="Filter by type"),
    category: Optional[NotificationCategory] = Query(None, description="Filter by category"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account=Depends(get_current_account)
):
    """Non-expired notifications, most urgent first, in the user's language"""
    try:
        notifications, total = NotificationRepository().find_by_user(
            account.id,
            unread_only=unread_only,
            type=type.value if type else None,
            category=category.value if category else None,
            limit=limit,
            offset=offset
        )
        return _page(notifications, total, limit, offset, account.language.value)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching notifications: {str(e)}")


@router.get("/unread")
async def get_unread_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account=Depends(get_current_account)
):
    try:
        notifications, total = NotificationRepository().find_by_user(
            account.id, unread_only=True, limit=limit, offset=offset
        )
        return _page(notifications, total, limit, offset, account.language.value)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching notifications: {str(e)}")


@router.get("/stats")
async def get_my_notification_stats(account=Depends(get_current_account)):
    try:
        return {"status": "success", "data": NotificationRepository().get_stats(account.id)}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/stats/global")
async def get_global_notification_stats(admin=Depends(require_admin)):
    try:
        return {"status": "success", "data": NotificationRepository().get_stats()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.post("/read-all")
async def mark_all_read(account=Depends(get_current_account)):
    try:
        updated = NotificationRepository().mark_all_read(account.id)
        return {"status": "success", "data": {"updated": updated}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating notifications: {str(e)}")


@router.post("/{notification_id}/read")
async def mark_read(notification_id: int, account=Depends(get_current_account)):
    try:
        notification = NotificationRepository().mark_read(notification_id, account.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        return {"status": "success", "data": notification.to_dict(account.language.value)}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating notification: {str(e)}")


@router.post("/{notification_id}/click")
async def record_click(notification_id: int, account=Depends(get_current_account)):
    try:
        notification = NotificationRepository().record_click(notification_id, account.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        return {"status": "success", "data": notification.to_dict(account.language.value)}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating notification: {str(e)}")


@router.delete("/")
async def delete_all_notifications(account=Depends(get_current_account)):
    try:
        deleted = NotificationRepository().delete_all(account.id)
        return {"status": "success", "data": {"deleted": deleted}}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting notifications: {str(e)}")


@router.delete("/{notification_id}")
async def delete_notification(notification_id: int, account=Depends(get_current_account)):
    try:
        if not NotificationRepository().delete(notification_id, account.id):
            raise HTTPException(status_code=404, detail="Notification not found")
        return {"status": "success", "message": f"Notification {notification_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting notification: {str(e)}")


@router.post("/user/{user_id}", status_code=201)
async def create_notification(user_id: int, data: NotificationCreate, admin=Depends(require_admin)):
    try:
        notification = NotificationRepository().create(user_id, data)
        return {"status": "success", "data": notification.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating notification: {str(e)}")


@router.post("/bulk", status_code=201)
async def create_bulk_notifications(data: NotificationBulkCreate, admin=Depends(require_admin)):
    """Send the same notification to several users; they share a group_id"""
    try:
        user_ids = list(dict.fromkeys(data.user_ids))
        if not user_ids:
            raise HTTPException(status_code=400, detail="user_ids must not be empty")

        group_id = uuid.uuid4().hex
        payload = NotificationCreate(**data.model_dump(exclude={'user_ids'}))
        created = NotificationRepository().create_many(user_ids, payload, group_id)
        logger.info(f"Admin {admin.id} sent notification group {group_id} to {created} users")
        return {"status": "success", "data": {"created": created, "group_id": group_id}}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating notifications: {str(e)}")
