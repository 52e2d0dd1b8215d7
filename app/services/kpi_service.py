"""
KPI Service

Computes the seven headline metrics of the analytics overview. Each metric
runs in its own database session so they can be awaited concurrently, and
each is guarded on its own: a failing metric (missing table, bad column,
connection drop) is logged and reported as 0 while the others still return
real values.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.models.enums import AttemptStatus, AttendanceStatus
from app.schemas.analytics import AnalyticsOverview, KPIMetric, KPITrend
from app.services import analytics_repository
from app.services.analytics_filters import AnalyticsFilter
from app.services.analytics_formatting import percentage

logger = logging.getLogger(__name__)


MetricComputation = Callable[[AsyncSession, AnalyticsFilter, datetime], Awaitable[float]]


@dataclass(frozen=True)
class KPIDefinition:
    """Static presentation data of a KPI card."""
    label: str
    icon: str
    target: float = 0
    comparison_period: str = ""
    unit: Optional[str] = None


KPI_DEFINITIONS: Dict[str, KPIDefinition] = {
    "total_students": KPIDefinition(
        label="Total Students",
        icon="users",
        comparison_period="previous period",
    ),
    "active_users_7d": KPIDefinition(
        label="Active Users",
        icon="user-check",
        comparison_period="previous 7 days",
    ),
    "course_completion_rate": KPIDefinition(
        label="Completion Rate",
        icon="graduation-cap",
        target=85,
        comparison_period="previous period",
        unit="percentage",
    ),
    "assessment_pass_rate": KPIDefinition(
        label="Pass Rate",
        icon="clipboard-check",
        target=85,
        comparison_period="previous period",
        unit="percentage",
    ),
    "certifications_issued": KPIDefinition(
        label="Certifications",
        icon="award",
    ),
    "attendance_rate": KPIDefinition(
        label="Attendance",
        icon="calendar",
        target=95,
        unit="percentage",
    ),
    "student_satisfaction": KPIDefinition(
        label="Satisfaction",
        icon="star",
        target=4.6,
        unit="rating",
    ),
}


def percent_to_target(value: float, target: float) -> float:
    """Progress toward ``target``; uncapped metrics (target 0) are always at 100."""
    if target == 0:
        return 100.0
    return value / target * 100


def build_metric(definition: KPIDefinition, value: float) -> KPIMetric:
    return KPIMetric(
        value=value,
        target=definition.target,
        percent_to_target=percent_to_target(value, definition.target),
        trend=KPITrend(comparison_period=definition.comparison_period),
        label=definition.label,
        icon=definition.icon,
        unit=definition.unit,
    )


# ============== Metric Computations ==============

async def total_students(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    if filters.has_course_filter:
        return await analytics_repository.count_enrolled_students(db, filters.course_ids)
    return await analytics_repository.count_students(db)


async def active_users(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    since = now - timedelta(days=settings.ACTIVE_USER_WINDOW_DAYS)
    return await analytics_repository.count_active_students(db, since, filters.course_ids)


async def completion_rate(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    completions = await analytics_repository.fetch_enrollment_completions(db, filters)
    completed = sum(1 for completed_at in completions if completed_at is not None)
    return percentage(completed, len(completions))


async def pass_rate(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    assessment_ids = None
    if filters.has_course_filter:
        assessment_ids = await analytics_repository.fetch_assessment_ids(db, filters.course_ids)
        if not assessment_ids:
            return 0.0

    statuses = await analytics_repository.fetch_attempt_statuses(db, filters, assessment_ids)
    passed = sum(1 for status in statuses if status == AttemptStatus.PASSED.value)
    return percentage(passed, len(statuses))


async def certifications_issued(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    return await analytics_repository.count_certifications(db, filters)


async def attendance_rate(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    statuses = await analytics_repository.fetch_attendance_statuses(db, filters)
    present = sum(1 for status in statuses if status == AttendanceStatus.PRESENT.value)
    return percentage(present, len(statuses))


async def satisfaction_average(db: AsyncSession, filters: AnalyticsFilter, now: datetime) -> float:
    ratings = [
        rating
        for rating in await analytics_repository.fetch_satisfaction_ratings(db, filters)
        if rating is not None
    ]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


METRIC_COMPUTATIONS: Dict[str, MetricComputation] = {
    "total_students": total_students,
    "active_users_7d": active_users,
    "course_completion_rate": completion_rate,
    "assessment_pass_rate": pass_rate,
    "certifications_issued": certifications_issued,
    "attendance_rate": attendance_rate,
    "student_satisfaction": satisfaction_average,
}


# ============== Overview ==============

async def _run_metric(
    session_factory: async_sessionmaker[AsyncSession],
    key: str,
    compute: MetricComputation,
    filters: AnalyticsFilter,
    now: datetime,
) -> float:
    """Run one metric in its own session, degrading to 0 on any failure."""
    try:
        async with session_factory() as db:
            return await compute(db, filters, now)
    except Exception as e:
        logger.error(f"Failed to compute KPI {key}: {e}", exc_info=True)
        return 0


async def compute_overview(
    session_factory: async_sessionmaker[AsyncSession],
    filters: AnalyticsFilter,
    now: Optional[datetime] = None,
) -> AnalyticsOverview:
    """
    Compute all overview KPIs concurrently.

    Args:
        session_factory: Factory handing out one session per metric.
        filters: Resolved date window and course scope.
        now: Reference time for the active-user window.

    Returns:
        AnalyticsOverview: Every metric present; failed ones are 0.
    """
    now = now or datetime.now(timezone.utc)
    keys = list(METRIC_COMPUTATIONS)

    values = await asyncio.gather(
        *(
            _run_metric(session_factory, key, METRIC_COMPUTATIONS[key], filters, now)
            for key in keys
        )
    )

    metrics = {
        key: build_metric(KPI_DEFINITIONS[key], value)
        for key, value in zip(keys, values)
    }
    return AnalyticsOverview(**metrics, last_updated=now)


def empty_overview(now: Optional[datetime] = None) -> AnalyticsOverview:
    """Zero-filled overview returned when the pipeline fails outright."""
    metrics = {
        key: build_metric(definition, 0)
        for key, definition in KPI_DEFINITIONS.items()
    }
    return AnalyticsOverview(**metrics, last_updated=now or datetime.now(timezone.utc))
