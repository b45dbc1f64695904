"""
Authentication for the Tekashi backend
Validates bearer JWTs issued by the identity provider and resolves them to store accounts
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel

from tekashi.core.config import settings
from tekashi.core.exceptions import ConflictError
from tekashi.domain.user import User
from tekashi.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

# Password hashing for accounts created by administrators
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenUser(BaseModel):
    """Identity extracted from a JWT"""
    id: str
    email: str
    name: Optional[str] = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_token(token: str) -> dict:
    """
    Decode and validate a bearer token.

    Expected payload:
    {
        "sub": "identity-uid",
        "email": "ana@example.com",
        "name": "Ana",
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    if not settings.AUTH_SECRET:
        logger.error("AUTH_SECRET is not configured; rejecting bearer token")
        raise _unauthorized("Authentication is not configured")

    try:
        return jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise _unauthorized("Token has expired")
        raise _unauthorized(f"Invalid token: {str(e)}")


def token_user_from_payload(payload: dict) -> TokenUser:
    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")

    if not user_id or not email:
        raise _unauthorized("Invalid token payload: missing user id or email")

    return TokenUser(id=str(user_id), email=email, name=payload.get("name"))


async def get_token_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """Dependency returning the raw token identity (no database lookup)."""
    if not credentials:
        raise _unauthorized("Authentication required")

    return token_user_from_payload(decode_token(credentials.credentials))


def _resolve_account(token_user: TokenUser) -> User:
    try:
        account = UserRepository().find_or_create_from_token(
            auth_uid=token_user.id,
            email=token_user.email,
            name=token_user.name
        )
    except ConflictError as e:
        raise _unauthorized(e.message)
    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated"
        )
    return account


async def get_current_account(
    token_user: TokenUser = Depends(get_token_user)
) -> User:
    """
    Dependency that resolves the caller's store account.

    Usage:
        @router.get("/me")
        async def me(account: User = Depends(get_current_account)):
            return account.to_dict()
    """
    return _resolve_account(token_user)


async def get_optional_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    """
    Optional authentication - returns None when no valid token is provided.

    Guest checkout and public catalog endpoints use this.
    """
    if not credentials:
        return None

    try:
        token_user = token_user_from_payload(decode_token(credentials.credentials))
    except HTTPException:
        return None

    return _resolve_account(token_user)


async def require_admin(
    account: User = Depends(get_current_account)
) -> User:
    """Dependency restricting an endpoint to administrators."""
    if not account.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Administrator role required"
        )
    return account


def ensure_owner_or_admin(account: User, owner_id: Optional[int], detail: str = "Access denied") -> None:
    """Raise 403 unless the account owns the resource or is an administrator"""
    if account.is_admin:
        return
    if owner_id is None or owner_id != account.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
