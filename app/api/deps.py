"""
API Dependencies

Authentication and session dependencies shared by the analytics routes.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import get_db, get_session_maker
from app.core.security import token_subject
from app.models.user import User


# Tokens are issued by the platform's auth service, not by this API
bearer_token = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[Optional[str], Depends(bearer_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Resolve the bearer token to a platform user.

    Raises:
        HTTPException: 401 when the token is missing, invalid or expired, or
            names a user that does not exist.
    """
    user_id = token_subject(token)
    if user_id is None:
        raise _unauthorized()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthorized()

    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Let only active admins through.

    Non-admins get the same 401 as anonymous callers.
    """
    if not user.is_admin:
        raise _unauthorized()
    return user


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for routes that run several queries concurrently."""
    return get_session_maker()
