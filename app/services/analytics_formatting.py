"""
Analytics Formatting

Turns aggregation accumulators into display-ready numbers and the
``CompetencyData`` response document.
"""

import math
from typing import Dict, List

from app.schemas.analytics import (
    CompetencyData,
    CompetencyMetric,
    HeatmapEntry,
    MasteryDistributionEntry,
)
from app.services.competency_aggregation import (
    AggregationResult,
    CompetencyAccumulator,
    MasteryTally,
    RunningMean,
)
from app.services.mastery import color_code, status_label


STATIC_TREND = "stable"

DISTRIBUTION_COLORS = {
    "Mastery": "#10b981",
    "Proficient": "#f59e0b",
    "Needs Attention": "#ef4444",
}


def percentage(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 for an empty denominator."""
    if not denominator:
        return 0.0
    return numerator / denominator * 100


def mean(total: float, count: int) -> float:
    if not count:
        return 0.0
    return total / count


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def format_competency(accumulator: CompetencyAccumulator) -> CompetencyMetric:
    mastery_percentage = percentage(accumulator.mastery_count, accumulator.count)

    return CompetencyMetric(
        id=accumulator.competency_id,
        name=accumulator.name,
        category=accumulator.category,
        is_critical=accumulator.is_critical,
        mastery_percentage=mastery_percentage,
        average_days_to_mastery=mean(accumulator.days_sum, accumulator.days_count),
        # TODO: compute improving/declining once a previous-period baseline is fetched
        trend=STATIC_TREND,
        students_attempted=accumulator.count,
        students_mastered=accumulator.mastery_count,
        color_code=color_code(mastery_percentage),
        status=status_label(mastery_percentage),
    )


def _rounded_means(buckets: Dict[str, RunningMean]) -> Dict[str, int]:
    return {key: round_half_up(bucket.mean) for key, bucket in buckets.items()}


def format_distribution(tally: MasteryTally) -> List[MasteryDistributionEntry]:
    total = tally.total
    counts = (
        ("Mastery", tally.mastery),
        ("Proficient", tally.proficient),
        ("Needs Attention", tally.needs_attention),
    )

    return [
        MasteryDistributionEntry(
            level=level,
            student_count=count,
            percentage=round_half_up(percentage(count, total)),
            color=DISTRIBUTION_COLORS[level],
        )
        for level, count in counts
    ]


def format_competency_data(result: AggregationResult) -> CompetencyData:
    """Build the competency dashboard document from finalized accumulators."""
    overall = result.overall

    return CompetencyData(
        competencies=[format_competency(c) for c in result.competencies],
        overall_mastery_rate=mean(overall.total_mastery, overall.count),
        critical_competencies_mastered=percentage(overall.critical_mastered, overall.critical_total),
        average_days_to_mastery=mean(overall.days_sum, overall.days_count),
        heatmap_data=[
            HeatmapEntry(competency=cell.competency, course=cell.course, mastery_rate=cell.mastery_rate)
            for cell in result.heatmap
        ],
        trend_data=[
            {"month": month, **_rounded_means(buckets)}
            for month, buckets in result.trend
        ],
        role_comparison_data=[
            {"competency": competency, **_rounded_means(buckets)}
            for competency, buckets in result.roles
        ],
        mastery_distribution=format_distribution(result.distribution),
    )


def empty_competency_data() -> CompetencyData:
    """Zero-filled document returned when the pipeline fails outright."""
    return CompetencyData()
