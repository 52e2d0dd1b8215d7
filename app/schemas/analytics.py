"""
Analytics Schemas

Pydantic models for the admin analytics dashboard. Field names are snake_case
in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============== Overview ==============

class KPITrend(CamelModel):
    """Period-over-period movement of a KPI."""

    direction: str = Field("stable", description="improving, declining or stable")
    percent_change: float = Field(0, description="Change against the comparison period")
    comparison_period: str = Field("", description="Human readable comparison period")


class KPIMetric(CamelModel):
    """A single headline metric card."""

    value: Union[int, float] = Field(0, description="Current value")
    target: Union[int, float] = Field(0, description="Target value; 0 means uncapped")
    percent_to_target: float = Field(0, description="value / target * 100, or 100 when uncapped")
    trend: KPITrend = Field(default_factory=KPITrend)
    label: str
    icon: str
    unit: Optional[str] = Field(None, description="percentage, rating, count or currency")


class AnalyticsOverview(CamelModel):
    """Executive summary KPIs."""

    total_students: KPIMetric
    active_users_7d: KPIMetric = Field(..., alias="activeUsers7d")
    course_completion_rate: KPIMetric
    assessment_pass_rate: KPIMetric
    certifications_issued: KPIMetric
    attendance_rate: KPIMetric
    student_satisfaction: KPIMetric
    last_updated: datetime


class AnalyticsOverviewResponse(CamelModel):
    data: AnalyticsOverview
    timestamp: datetime
    error: Optional[str] = None


# ============== Competencies ==============

class CompetencyMetric(CamelModel):
    """Mastery statistics for one competency."""

    id: str
    name: str
    category: Optional[str] = None
    is_critical: bool = False
    mastery_percentage: float = Field(..., description="Share of assessments at mastery, 0-100")
    average_days_to_mastery: float = Field(..., description="Mean days to mastery; 0 without data")
    trend: str = Field("stable", description="Always stable: no prior-period baseline is fetched")
    students_attempted: int
    students_mastered: int
    color_code: str = Field(..., description="green, yellow or red")
    status: str = Field(..., description="Mastered, Proficient or Needs Work")


class HeatmapEntry(CamelModel):
    competency: str
    course: str
    mastery_rate: float


class MasteryDistributionEntry(CamelModel):
    level: str
    student_count: int
    percentage: int
    color: str


# Trend rows are {"month": "Jan", "<competency>": 72, "Average Mastery": 70};
# role rows are {"competency": "...", "<Role>": 81}
DynamicRow = Dict[str, Union[str, int]]


class CompetencyData(CamelModel):
    """Competency mastery dashboard payload."""

    competencies: List[CompetencyMetric] = Field(default_factory=list)
    overall_mastery_rate: float = 0
    critical_competencies_mastered: float = 0
    average_days_to_mastery: float = 0
    heatmap_data: List[HeatmapEntry] = Field(default_factory=list)
    trend_data: List[DynamicRow] = Field(default_factory=list)
    role_comparison_data: List[DynamicRow] = Field(default_factory=list)
    mastery_distribution: List[MasteryDistributionEntry] = Field(default_factory=list)


class CompetencyDataResponse(CamelModel):
    data: CompetencyData
    timestamp: datetime


# ============== Gap Report ==============

class CompetencyGap(CamelModel):
    """A competency below the mastery threshold."""

    id: str
    name: str
    category: Optional[str] = None
    is_critical: bool = False
    mastery_percentage: float
    gap: float = Field(..., description="Percentage points below the mastery threshold")
    severity_score: float
    severity: str = Field(..., description="critical, high, medium or low")


class CompetencyGapReport(CamelModel):
    gaps: List[CompetencyGap] = Field(default_factory=list)
    critical_gaps: List[CompetencyGap] = Field(default_factory=list)


class CompetencyGapResponse(CamelModel):
    data: CompetencyGapReport
    timestamp: datetime
