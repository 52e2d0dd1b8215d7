"""
Security Utilities

Bearer tokens are HS256 JWTs minted by the platform's auth service with the
shared SECRET_KEY. This service verifies them; ``create_access_token`` exists
for local tooling and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from app.core.config import settings


DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)


def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token for ``subject`` (a user id) valid for ``expires_delta``."""
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + (expires_delta or DEFAULT_TOKEN_LIFETIME),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Verify signature and expiry of a token.

    Returns:
        The claims, or None for a malformed, forged or expired token.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def token_subject(token: Optional[str]) -> Optional[str]:
    """User id carried by a valid token, None otherwise."""
    if not token:
        return None
    claims = decode_access_token(token)
    if claims is None:
        return None
    return claims.get("sub")
