"""
Database Configuration

Async SQLAlchemy 2.0 engine for the platform's PostgreSQL database (asyncpg
driver). This service never writes: sessions are handed out for reads and
rolled back on release.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for the read models of the platform tables."""
    pass


_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def _asyncpg_url(url: str) -> str:
    # asyncpg rejects libpq-style query parameters (sslmode, channel_binding)
    return url.split("?", 1)[0]


def _connect_args(use_ssl: bool) -> dict:
    if not use_ssl:
        return {}

    import ssl

    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return {"ssl": ssl_context}


def get_engine() -> AsyncEngine:
    """
    Get the shared async engine, creating it on first use.

    The pool must fit one connection per overview KPI, which are queried
    concurrently.
    """
    global _engine
    if _engine is None:
        from app.core.config import settings

        _engine = create_async_engine(
            _asyncpg_url(settings.DATABASE_URL),
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            connect_args=_connect_args(settings.DATABASE_SSL),
        )
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the shared engine."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one read session per request.

    Yields:
        AsyncSession: Session whose transaction is rolled back afterwards.
    """
    async with get_session_maker()() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def close_db() -> None:
    """Dispose of the engine and its pooled connections."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
