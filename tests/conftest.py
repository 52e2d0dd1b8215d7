"""
Pytest Configuration and Fixtures

Provides reusable fixtures for testing the analytics pipeline.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession


# ==================== Database Fixtures ====================

@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    ``execute`` resolves to a plain MagicMock result so that
    ``scalar_one_or_none()`` / ``scalars().all()`` can be configured
    synchronously.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.close = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    return session


@pytest.fixture
def mock_session_factory(mock_async_session):
    """
    Create a mock session factory.

    Every call hands out an async context manager yielding the shared mock
    session, like ``async_sessionmaker`` does with real sessions.
    """
    @asynccontextmanager
    async def _session():
        yield mock_async_session

    return MagicMock(side_effect=lambda: _session())


# ==================== Filter Fixtures ====================

@pytest.fixture
def reference_now() -> datetime:
    """Fixed 'now' so date windows are deterministic."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def analytics_filter(reference_now):
    """30-day window ending at ``reference_now`` with no course filter."""
    from app.services.analytics_filters import resolve_filters

    return resolve_filters("30d", now=reference_now)


# ==================== Record Fixtures ====================

@pytest.fixture
def make_assessment():
    """
    Factory fixture for competency assessment records.

    Usage:
        record = make_assessment(student_id="s1", mastery_level=90)
    """
    from app.services.analytics_repository import CompetencyAssessmentRecord

    def _create(
        student_id: str = "student-1",
        competency_id: str = "comp-1",
        competency_name: str = "Knife Skills",
        category: str = "Culinary",
        is_critical: bool = False,
        mastery_level: float = 75,
        days_to_master=None,
        assessed_at: datetime = datetime(2024, 3, 10, tzinfo=timezone.utc),
    ):
        return CompetencyAssessmentRecord(
            student_id=student_id,
            competency_id=competency_id,
            competency_name=competency_name,
            category=category,
            is_critical=is_critical,
            mastery_level=mastery_level,
            days_to_master=days_to_master,
            assessed_at=assessed_at,
        )
    return _create


@pytest.fixture
def make_enrollment():
    """
    Factory fixture for enrollment records.

    Usage:
        enrollment = make_enrollment(student_id="s1", course_id="c1")
    """
    from app.services.analytics_repository import EnrollmentRecord

    def _create(
        student_id: str = "student-1",
        course_id: str = "course-1",
        course_title: str = "Culinary Arts",
        role_type=None,
    ):
        return EnrollmentRecord(
            student_id=student_id,
            course_id=course_id,
            course_title=course_title,
            role_type=role_type,
        )
    return _create
