"""
Competency Gap Analysis

Ranks competencies that sit below the mastery threshold so the dashboard can
surface where training needs attention first.
"""

from typing import List, Sequence, Tuple

from app.schemas.analytics import CompetencyData, CompetencyGap, CompetencyGapReport, CompetencyMetric
from app.services.mastery import MASTERY_THRESHOLD, is_mastered


CRITICAL_WEIGHT = 1.5

# (minimum weighted score, label), checked in order
SEVERITY_BANDS: Tuple[Tuple[float, str], ...] = (
    (40, "critical"),
    (25, "high"),
    (15, "medium"),
)


def gap_severity(metric: CompetencyMetric) -> Tuple[float, str]:
    """
    Weighted severity of a competency's gap.

    The gap is the distance to the mastery threshold, weighted up for
    critical competencies.

    Returns:
        (score, label) where label is critical, high, medium or low.
    """
    score = MASTERY_THRESHOLD - metric.mastery_percentage
    if metric.is_critical:
        score *= CRITICAL_WEIGHT

    for minimum, label in SEVERITY_BANDS:
        if score >= minimum:
            return score, label
    return score, "low"


def _to_gap(metric: CompetencyMetric) -> CompetencyGap:
    score, severity = gap_severity(metric)
    return CompetencyGap(
        id=metric.id,
        name=metric.name,
        category=metric.category,
        is_critical=metric.is_critical,
        mastery_percentage=metric.mastery_percentage,
        gap=MASTERY_THRESHOLD - metric.mastery_percentage,
        severity_score=score,
        severity=severity,
    )


def identify_competency_gaps(metrics: Sequence[CompetencyMetric]) -> List[CompetencyGap]:
    """Competencies below mastery, weakest first."""
    below = [m for m in metrics if not is_mastered(m.mastery_percentage)]
    below.sort(key=lambda m: m.mastery_percentage)
    return [_to_gap(m) for m in below]


def identify_critical_gaps(metrics: Sequence[CompetencyMetric]) -> List[CompetencyGap]:
    """Critical competencies below mastery, weakest first."""
    return [gap for gap in identify_competency_gaps(metrics) if gap.is_critical]


def build_gap_report(data: CompetencyData) -> CompetencyGapReport:
    return CompetencyGapReport(
        gaps=identify_competency_gaps(data.competencies),
        critical_gaps=identify_critical_gaps(data.competencies),
    )
