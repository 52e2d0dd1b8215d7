"""
Analytics Service

Entry points behind the admin analytics endpoints. Each ``get_*`` function is
the failure boundary of its endpoint: whatever escapes the inner guards is
logged and turned into the zero-filled document of the same shape, so the
dashboard always receives a well-formed body.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.schemas.analytics import (
    AnalyticsOverviewResponse,
    CompetencyData,
    CompetencyDataResponse,
    CompetencyGapReport,
    CompetencyGapResponse,
)
from app.services import analytics_repository, enrollment_join, kpi_service
from app.services.analytics_filters import AnalyticsFilter
from app.services.analytics_formatting import empty_competency_data, format_competency_data
from app.services.competency_aggregation import aggregate_competencies
from app.services.competency_gaps import build_gap_report
from app.services.enrollment_join import RoleResolver, first_role_wins

logger = logging.getLogger(__name__)


PARTIAL_DATA_ERROR = "Partial data due to error"


async def get_overview(
    session_factory: async_sessionmaker[AsyncSession],
    filters: AnalyticsFilter,
    now: Optional[datetime] = None,
) -> AnalyticsOverviewResponse:
    """
    Get the KPI overview.

    Individual metric failures are already absorbed by the KPI service; this
    only catches failures of the pipeline itself.
    """
    timestamp = now or datetime.now(timezone.utc)

    try:
        overview = await kpi_service.compute_overview(session_factory, filters, timestamp)
    except Exception as e:
        logger.error(f"Analytics overview failed: {e}", exc_info=True)
        return AnalyticsOverviewResponse(
            data=kpi_service.empty_overview(timestamp),
            timestamp=timestamp,
            error=PARTIAL_DATA_ERROR,
        )

    return AnalyticsOverviewResponse(data=overview, timestamp=timestamp)


async def build_competency_data(
    db: AsyncSession,
    filters: AnalyticsFilter,
    role_resolver: RoleResolver = first_role_wins,
) -> CompetencyData:
    """
    Run the competency pipeline: fetch, join, fold, format.

    Raises:
        Exception: Whatever the competency fetch raises. Enrollment join
            failures do not propagate.
    """
    records = await analytics_repository.fetch_competency_assessments(db, filters)
    index = await enrollment_join.enrich(db, records, filters, role_resolver)
    result = aggregate_competencies(records, index, filters.course_ids)

    logger.debug(
        f"Aggregated {result.overall.count}/{len(records)} competency assessments "
        f"into {len(result.competencies)} competencies"
    )
    return format_competency_data(result)


async def get_competency_data(
    db: AsyncSession,
    filters: AnalyticsFilter,
    now: Optional[datetime] = None,
) -> CompetencyDataResponse:
    """Get the competency dashboard document, zero-filled on failure."""
    timestamp = now or datetime.now(timezone.utc)

    try:
        data = await build_competency_data(db, filters)
    except Exception as e:
        logger.error(f"Competency analytics failed: {e}", exc_info=True)
        data = empty_competency_data()

    return CompetencyDataResponse(data=data, timestamp=timestamp)


async def get_competency_gaps(
    db: AsyncSession,
    filters: AnalyticsFilter,
    now: Optional[datetime] = None,
) -> CompetencyGapResponse:
    """Get competencies below mastery, empty on failure."""
    timestamp = now or datetime.now(timezone.utc)

    try:
        report = build_gap_report(await build_competency_data(db, filters))
    except Exception as e:
        logger.error(f"Competency gap analysis failed: {e}", exc_info=True)
        report = CompetencyGapReport()

    return CompetencyGapResponse(data=report, timestamp=timestamp)
