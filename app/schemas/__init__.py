"""
Academy Analytics - Schemas Module

Pydantic models for request/response validation.
"""

from app.schemas.analytics import (
    AnalyticsOverview,
    AnalyticsOverviewResponse,
    CompetencyData,
    CompetencyDataResponse,
    CompetencyGapReport,
    CompetencyGapResponse,
    CompetencyMetric,
    KPIMetric,
)

__all__ = [
    # Overview
    "KPIMetric",
    "AnalyticsOverview",
    "AnalyticsOverviewResponse",
    # Competencies
    "CompetencyMetric",
    "CompetencyData",
    "CompetencyDataResponse",
    # Gaps
    "CompetencyGapReport",
    "CompetencyGapResponse",
]
