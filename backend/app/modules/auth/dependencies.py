from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid

from app.core.database import get_db
from app.core.exceptions import AuthorizationError
from app.core.logging_config import set_user_id
from app.core.security import decode_token
from app.models.user import User

security = HTTPBearer()


@dataclass(frozen=True)
class AuthenticatedAccount:
    """
    Capability resolved once per request from the stored account.

    Core voting and verification functions take this instead of reading
    token claims, so admin and activation flags always reflect the database.
    """
    id: str
    is_admin: bool
    is_activated: bool

    @classmethod
    def from_user(cls, user: User) -> "AuthenticatedAccount":
        return cls(id=user.id, is_admin=bool(user.is_admin), is_activated=bool(user.is_activated))


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    token = credentials.credentials
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    # Per-user rate limit key and log context
    request.state.user_id = user.id
    set_user_id(user.id)

    return user


async def get_current_account(
    current_user: User = Depends(get_current_user)
) -> AuthenticatedAccount:
    """Resolve the request's capability from the stored account"""
    return AuthenticatedAccount.from_user(current_user)


async def get_activated_account(
    account: AuthenticatedAccount = Depends(get_current_account)
) -> AuthenticatedAccount:
    """Require a fully verified account"""
    if not account.is_activated:
        raise AuthorizationError("Your account must be fully verified before you can vote.")
    return account


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current admin user"""
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
