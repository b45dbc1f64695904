"""
Users API Endpoints
Profile self-service plus account administration

Author: Tekashi
Date: 2025-10-31
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pydantic import BaseModel

from tekashi.core.auth import get_current_account, require_admin, ensure_owner_or_admin, hash_password
from tekashi.domain.catalog import Language
from tekashi.domain.user import Location, UserCreate, UserRole, UserUpdate
from tekashi.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()


class RoleUpdate(BaseModel):
    role: UserRole


class LanguageUpdate(BaseModel):
    language: Language


def _user_or_404(user):
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"status": "success", "data": user.to_dict()}


@router.get("/me")
async def get_my_profile(account=Depends(get_current_account)):
    return {"status": "success", "data": account.to_dict()}


@router.put("/me")
async def update_my_profile(data: UserUpdate, account=Depends(get_current_account)):
    try:
        return _user_or_404(UserRepository().update(account.id, data.model_dump(exclude_unset=True)))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating profile: {str(e)}")


@router.put("/me/location")
async def set_my_location(location: Location, account=Depends(get_current_account)):
    try:
        return _user_or_404(UserRepository().set_location(account.id, location))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating location: {str(e)}")


@router.put("/me/language")
async def set_my_language(body: LanguageUpdate, account=Depends(get_current_account)):
    try:
        return _user_or_404(UserRepository().set_language(account.id, body.language.value))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating language: {str(e)}")


@router.get("/")
async def get_users(
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    search: Optional[str] = Query(None, description="Search by name or email"),
    sort: str = Query("created_at", description="name, email, created_at, last_login_at"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin=Depends(require_admin)
):
    try:
        users, total = UserRepository().find_all(
            role=role.value if role else None,
            is_active=is_active,
            search=search,
            sort=sort,
            direction=direction,
            limit=limit,
            offset=offset
        )
        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(users),
            "data": [user.to_dict() for user in users]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")


@router.post("/", status_code=201)
async def create_user(data: UserCreate, admin=Depends(require_admin)):
    try:
        repo = UserRepository()
        if repo.find_by_email(data.email):
            raise HTTPException(status_code=400, detail=f"A user with email {data.email} already exists")

        user = repo.create(data, hash_password(data.password))
        logger.info(f"Admin {admin.id} created user {user.id} ({user.role.value})")
        return {"status": "success", "data": user.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating user: {str(e)}")


@router.get("/{user_id}")
async def get_user(user_id: int, account=Depends(get_current_account)):
    try:
        ensure_owner_or_admin(account, user_id, "You can only view your own profile")
        return _user_or_404(UserRepository().find_by_id(user_id))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user: {str(e)}")


@router.put("/{user_id}")
async def update_user(user_id: int, data: UserUpdate, account=Depends(get_current_account)):
    try:
        ensure_owner_or_admin(account, user_id, "You can only update your own profile")
        return _user_or_404(UserRepository().update(user_id, data.model_dump(exclude_unset=True)))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating user: {str(e)}")


@router.post("/{user_id}/deactivate")
async def deactivate_user(user_id: int, admin=Depends(require_admin)):
    """Soft delete"""
    try:
        return _user_or_404(UserRepository().set_active(user_id, False))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deactivating user: {str(e)}")


@router.post("/{user_id}/activate")
async def activate_user(user_id: int, admin=Depends(require_admin)):
    try:
        return _user_or_404(UserRepository().set_active(user_id, True))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error activating user: {str(e)}")


@router.patch("/{user_id}/role")
async def set_user_role(user_id: int, body: RoleUpdate, admin=Depends(require_admin)):
    try:
        user = UserRepository().set_role(user_id, body.role.value)
        if user:
            logger.info(f"Admin {admin.id} set role of user {user_id} to {body.role.value}")
        return _user_or_404(user)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating role: {str(e)}")
