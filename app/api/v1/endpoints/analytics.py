"""
Analytics Routes

Admin dashboard analytics: KPI overview, competency mastery and gaps.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.deps import get_session_factory, require_admin
from app.core.config import settings
from app.core.database import get_db
from app.models.user import User
from app.schemas.analytics import (
    AnalyticsOverviewResponse,
    CompetencyDataResponse,
    CompetencyGapResponse,
)
from app.services import analytics_service
from app.services.analytics_filters import AnalyticsFilter, resolve_filters


router = APIRouter(prefix="/analytics", tags=["Analytics"])


def analytics_filters(
    date_range: Annotated[Optional[str], Query(alias="dateRange")] = None,
    start_date: Annotated[Optional[str], Query(alias="startDate")] = None,
    end_date: Annotated[Optional[str], Query(alias="endDate")] = None,
    courses: Annotated[Optional[str], Query(description="Comma-separated course ids")] = None,
) -> AnalyticsFilter:
    """Resolve the shared date/course query parameters."""
    return resolve_filters(
        date_range=date_range or settings.ANALYTICS_DEFAULT_DATE_RANGE,
        start_date=start_date,
        end_date=end_date,
        courses=courses,
    )


@router.get(
    "/overview",
    response_model=AnalyticsOverviewResponse,
    response_model_exclude_none=True,
    summary="Get executive KPI overview",
)
async def get_overview(
    current_user: Annotated[User, Depends(require_admin)],
    filters: Annotated[AnalyticsFilter, Depends(analytics_filters)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> AnalyticsOverviewResponse:
    """
    Get the seven headline KPIs.

    **Auth:** Admins only.

    Always answers 200. A metric whose query failed is reported as 0; if the
    whole computation fails every metric is 0 and `error` is set.
    """
    return await analytics_service.get_overview(session_factory, filters)


@router.get(
    "/competencies",
    response_model=CompetencyDataResponse,
    summary="Get competency mastery metrics",
)
async def get_competencies(
    current_user: Annotated[User, Depends(require_admin)],
    filters: Annotated[AnalyticsFilter, Depends(analytics_filters)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompetencyDataResponse:
    """
    Get competency mastery, heatmap, monthly trend, role comparison and
    mastery distribution.

    **Auth:** Admins only.

    Always answers 200; on failure every list is empty and every rate 0.
    """
    return await analytics_service.get_competency_data(db, filters)


@router.get(
    "/competencies/gaps",
    response_model=CompetencyGapResponse,
    summary="Get competencies below mastery",
)
async def get_competency_gaps(
    current_user: Annotated[User, Depends(require_admin)],
    filters: Annotated[AnalyticsFilter, Depends(analytics_filters)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompetencyGapResponse:
    """
    Get competencies below the mastery threshold ranked by severity.

    **Auth:** Admins only.
    """
    return await analytics_service.get_competency_gaps(db, filters)
