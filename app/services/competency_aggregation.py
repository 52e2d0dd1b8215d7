"""
Competency Aggregation

Single-pass fold of competency assessments into the accumulators behind the
competency dashboard:

- overall stats (mean mastery, critical mastery, days to mastery)
- per-competency stats
- heatmap rows, fanned out over each student's courses
- monthly trend buckets (per competency plus an overall average)
- role comparison buckets
- mastery distribution tally

A ``CompetencyAggregator`` lives for exactly one request. The fold mutates
its accumulators record by record and must stay sequential; splitting it
would need an explicit merge of the partial accumulators.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from app.services.analytics_repository import CompetencyAssessmentRecord
from app.services.enrollment_join import CourseRef, EnrollmentIndex
from app.services.mastery import MasteryLevel, classify_mastery, is_mastered


AVERAGE_MASTERY_KEY = "Average Mastery"

# Locale-independent short month names, also the calendar sort order
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass
class RunningMean:
    """Sum/count pair for a bucketed mean."""
    total: float = 0.0
    count: int = 0

    def add(self, value: float) -> None:
        self.total += value
        self.count += 1

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


@dataclass
class OverallStats:
    total_mastery: float = 0.0
    count: int = 0
    critical_mastered: int = 0
    critical_total: int = 0
    days_sum: float = 0.0
    days_count: int = 0


@dataclass
class CompetencyAccumulator:
    """Running stats for one competency; identity comes from its first record."""
    competency_id: str
    name: str
    category: Optional[str]
    is_critical: bool
    total_mastery: float = 0.0
    count: int = 0
    mastery_count: int = 0
    days_sum: float = 0.0
    days_count: int = 0

    def add(self, mastery: float, days_to_master: Optional[float]) -> None:
        self.total_mastery += mastery
        self.count += 1
        if is_mastered(mastery):
            self.mastery_count += 1
        if days_to_master is not None:
            self.days_sum += days_to_master
            self.days_count += 1


@dataclass
class MasteryTally:
    mastery: int = 0
    proficient: int = 0
    needs_attention: int = 0

    def add(self, level: MasteryLevel) -> None:
        if level == MasteryLevel.MASTERY:
            self.mastery += 1
        elif level == MasteryLevel.PROFICIENT:
            self.proficient += 1
        else:
            self.needs_attention += 1

    @property
    def total(self) -> int:
        return self.mastery + self.proficient + self.needs_attention


@dataclass(frozen=True)
class HeatmapCell:
    competency: str
    course: str
    mastery_rate: float


@dataclass
class AggregationResult:
    """Finalized accumulators, ready for formatting."""
    overall: OverallStats
    competencies: List[CompetencyAccumulator]
    heatmap: List[HeatmapCell]
    trend: List[Tuple[str, Dict[str, RunningMean]]]
    roles: List[Tuple[str, Dict[str, RunningMean]]]
    distribution: MasteryTally


def format_role(role: str) -> str:
    """
    Title-case an underscore-separated role for display.

    Only the first letter of each token changes: ``fb_service`` becomes
    ``Fb Service``.
    """
    return " ".join(word[:1].upper() + word[1:] for word in role.split("_"))


def month_key(record: CompetencyAssessmentRecord) -> str:
    return MONTH_ABBREVIATIONS[record.assessed_at.month - 1]


@dataclass
class CompetencyAggregator:
    """Accumulates competency assessments for one aggregation call."""

    overall: OverallStats = field(default_factory=OverallStats)
    competencies: "OrderedDict[str, CompetencyAccumulator]" = field(default_factory=OrderedDict)
    heatmap_rows: List[HeatmapCell] = field(default_factory=list)
    trend: Dict[str, Dict[str, RunningMean]] = field(default_factory=dict)
    roles: "OrderedDict[str, Dict[str, RunningMean]]" = field(default_factory=OrderedDict)
    distribution: MasteryTally = field(default_factory=MasteryTally)

    def add(
        self,
        record: CompetencyAssessmentRecord,
        courses: Sequence[CourseRef] = (),
        role: Optional[str] = None,
    ) -> None:
        """Fold one assessment into every accumulator."""
        mastery = record.mastery_level or 0
        level = classify_mastery(mastery)

        # Overall
        self.overall.total_mastery += mastery
        self.overall.count += 1
        if record.is_critical:
            self.overall.critical_total += 1
            if level == MasteryLevel.MASTERY:
                self.overall.critical_mastered += 1
        if record.days_to_master is not None:
            self.overall.days_sum += record.days_to_master
            self.overall.days_count += 1

        # Per competency
        accumulator = self.competencies.get(record.competency_id)
        if accumulator is None:
            accumulator = CompetencyAccumulator(
                competency_id=record.competency_id,
                name=record.competency_name,
                category=record.category,
                is_critical=record.is_critical,
            )
            self.competencies[record.competency_id] = accumulator
        accumulator.add(mastery, record.days_to_master)

        # Heatmap: one row per enrolled course
        for course in courses:
            self.heatmap_rows.append(
                HeatmapCell(
                    competency=record.competency_name,
                    course=course.course_title,
                    mastery_rate=mastery,
                )
            )

        # Trend
        month_bucket = self.trend.setdefault(month_key(record), {})
        month_bucket.setdefault(record.competency_name, RunningMean()).add(mastery)
        month_bucket.setdefault(AVERAGE_MASTERY_KEY, RunningMean()).add(mastery)

        # Role comparison
        if role:
            role_bucket = self.roles.setdefault(record.competency_name, {})
            role_bucket.setdefault(format_role(role), RunningMean()).add(mastery)

        self.distribution.add(level)

    def _aggregate_heatmap(self) -> List[HeatmapCell]:
        cells: "OrderedDict[Tuple[str, str], RunningMean]" = OrderedDict()
        for row in self.heatmap_rows:
            cells.setdefault((row.competency, row.course), RunningMean()).add(row.mastery_rate)

        return [
            HeatmapCell(competency=competency, course=course, mastery_rate=bucket.mean)
            for (competency, course), bucket in cells.items()
        ]

    def finalize(self) -> AggregationResult:
        """Re-aggregate heatmap rows, order trend months and flatten maps."""
        trend = sorted(
            self.trend.items(),
            key=lambda item: MONTH_ABBREVIATIONS.index(item[0]),
        )

        return AggregationResult(
            overall=self.overall,
            competencies=list(self.competencies.values()),
            heatmap=self._aggregate_heatmap(),
            trend=trend,
            roles=list(self.roles.items()),
            distribution=self.distribution,
        )


def aggregate_competencies(
    records: Sequence[CompetencyAssessmentRecord],
    index: EnrollmentIndex,
    course_ids: Sequence[str] = (),
) -> AggregationResult:
    """
    Fold assessments into an ``AggregationResult``.

    With a course filter, assessments of students outside the filtered
    courses are skipped entirely.
    """
    aggregator = CompetencyAggregator()

    for record in records:
        if not index.admits(record.student_id, course_ids):
            continue
        aggregator.add(
            record,
            courses=index.courses_for(record.student_id),
            role=index.role_for(record.student_id),
        )

    return aggregator.finalize()
