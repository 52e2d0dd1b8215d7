"""
Competency Aggregation Unit Tests

Tests for the single-pass fold over competency assessments.
"""

from datetime import datetime, timezone

import pytest


def _index(*enrollments):
    from app.services.enrollment_join import build_enrollment_index

    return build_enrollment_index(enrollments)


class TestFormatRole:
    """Tests for role display formatting."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("fb_service", "Fb Service"),
            ("front_office", "Front Office"),
            ("culinary", "Culinary"),
            ("guest_relations_mgr", "Guest Relations Mgr"),
        ],
    )
    def test_capitalizes_each_underscore_token(self, raw, expected):
        from app.services.competency_aggregation import format_role

        assert format_role(raw) == expected


class TestAggregateCompetencies:
    """Tests for the aggregation fold."""

    def test_overall_and_per_competency_stats(self, make_assessment):
        """Verify sums, counts and the critical/day sub-tallies."""
        from app.services.competency_aggregation import aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        records = [
            make_assessment(competency_id="a", is_critical=True, mastery_level=90, days_to_master=10),
            make_assessment(competency_id="a", is_critical=True, mastery_level=50),
            make_assessment(competency_id="b", competency_name="Guest Relations", mastery_level=80, days_to_master=20),
        ]

        result = aggregate_competencies(records, EnrollmentIndex())

        assert result.overall.count == 3
        assert result.overall.total_mastery == 220
        assert result.overall.critical_total == 2
        assert result.overall.critical_mastered == 1
        assert result.overall.days_sum == 30
        assert result.overall.days_count == 2

        by_id = {c.competency_id: c for c in result.competencies}
        assert by_id["a"].count == 2
        assert by_id["a"].mastery_count == 1
        assert by_id["a"].days_count == 1
        assert by_id["b"].mastery_count == 1  # 80 is inclusive

    def test_competency_identity_comes_from_first_record(self, make_assessment):
        from app.services.competency_aggregation import aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        records = [
            make_assessment(competency_id="a", competency_name="Knife Skills", category="Culinary"),
            make_assessment(competency_id="a", competency_name="Renamed", category="Other"),
        ]

        result = aggregate_competencies(records, EnrollmentIndex())

        assert len(result.competencies) == 1
        assert result.competencies[0].name == "Knife Skills"
        assert result.competencies[0].category == "Culinary"

    def test_heatmap_fans_out_over_student_courses(self, make_assessment, make_enrollment):
        """Verify one heatmap row per enrolled course for a single assessment."""
        from app.services.competency_aggregation import HeatmapCell, aggregate_competencies

        index = _index(
            make_enrollment(student_id="s1", course_id="A", course_title="Course A"),
            make_enrollment(student_id="s1", course_id="B", course_title="Course B"),
        )

        result = aggregate_competencies(
            [make_assessment(student_id="s1", competency_name="Knife Skills", mastery_level=70)],
            index,
        )

        assert result.heatmap == [
            HeatmapCell(competency="Knife Skills", course="Course A", mastery_rate=70),
            HeatmapCell(competency="Knife Skills", course="Course B", mastery_rate=70),
        ]

    def test_heatmap_averages_each_competency_course_pair(self, make_assessment, make_enrollment):
        from app.services.competency_aggregation import aggregate_competencies

        index = _index(
            make_enrollment(student_id="s1", course_id="A", course_title="Course A"),
            make_enrollment(student_id="s2", course_id="A", course_title="Course A"),
        )
        records = [
            make_assessment(student_id="s1", mastery_level=60),
            make_assessment(student_id="s2", mastery_level=90),
        ]

        result = aggregate_competencies(records, index)

        assert len(result.heatmap) == 1
        assert result.heatmap[0].mastery_rate == 75

    def test_trend_months_sorted_in_calendar_order(self, make_assessment):
        """Verify Jan, Mar, Feb insertion comes out as Jan, Feb, Mar."""
        from app.services.competency_aggregation import aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        records = [
            make_assessment(assessed_at=datetime(2024, 1, 5, tzinfo=timezone.utc)),
            make_assessment(assessed_at=datetime(2024, 3, 5, tzinfo=timezone.utc)),
            make_assessment(assessed_at=datetime(2024, 2, 5, tzinfo=timezone.utc)),
        ]

        result = aggregate_competencies(records, EnrollmentIndex())

        assert [month for month, _ in result.trend] == ["Jan", "Feb", "Mar"]

    def test_trend_bucket_tracks_competency_and_average(self, make_assessment):
        from app.services.competency_aggregation import AVERAGE_MASTERY_KEY, aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        records = [
            make_assessment(competency_id="a", competency_name="Knife Skills", mastery_level=90),
            make_assessment(competency_id="b", competency_name="Guest Relations", mastery_level=60),
        ]

        result = aggregate_competencies(records, EnrollmentIndex())

        (month, buckets), = result.trend
        assert month == "Mar"
        assert buckets["Knife Skills"].mean == 90
        assert buckets["Guest Relations"].mean == 60
        assert buckets[AVERAGE_MASTERY_KEY].mean == 75

    def test_role_buckets_use_formatted_role(self, make_assessment, make_enrollment):
        from app.services.competency_aggregation import aggregate_competencies

        index = _index(
            make_enrollment(student_id="s1", role_type="fb_service"),
            make_enrollment(student_id="s2", role_type="fb_service"),
            make_enrollment(student_id="s3"),
        )
        records = [
            make_assessment(student_id="s1", mastery_level=70),
            make_assessment(student_id="s2", mastery_level=90),
            make_assessment(student_id="s3", mastery_level=10),
        ]

        result = aggregate_competencies(records, index)

        (competency, roles), = result.roles
        assert competency == "Knife Skills"
        assert list(roles) == ["Fb Service"]
        assert roles["Fb Service"].mean == 80

    def test_distribution_tally(self, make_assessment):
        from app.services.competency_aggregation import aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        records = [make_assessment(mastery_level=m) for m in (100, 80, 79.9, 60, 59, 0)]

        result = aggregate_competencies(records, EnrollmentIndex())

        assert result.distribution.mastery == 2
        assert result.distribution.proficient == 2
        assert result.distribution.needs_attention == 2

    def test_course_filter_excludes_unenrolled_student_everywhere(self, make_assessment, make_enrollment):
        """
        Verify a student outside the filtered course leaves no trace.

        The index is built from enrollments fetched with the course filter,
        so a student enrolled only in X has no rows when filtering by Y.
        """
        from app.services.competency_aggregation import aggregate_competencies

        index = _index(make_enrollment(student_id="other", course_id="Y", course_title="Course Y", role_type="culinary"))
        records = [
            make_assessment(student_id="S", mastery_level=90),
            make_assessment(student_id="other", competency_id="comp-2", competency_name="Plating", mastery_level=50),
        ]

        result = aggregate_competencies(records, index, course_ids=("Y",))

        assert result.overall.count == 1
        assert result.overall.total_mastery == 50
        assert [c.name for c in result.competencies] == ["Plating"]
        assert all(cell.competency == "Plating" for cell in result.heatmap)
        assert list(result.trend[0][1]) == ["Plating", "Average Mastery"]
        assert [competency for competency, _ in result.roles] == ["Plating"]
        assert result.distribution.total == 1

    def test_course_filter_with_no_remaining_records(self, make_assessment):
        from app.services.competency_aggregation import aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        result = aggregate_competencies([make_assessment(student_id="S")], EnrollmentIndex(), course_ids=("Y",))

        assert result.overall.count == 0
        assert result.competencies == []
        assert result.heatmap == []
        assert result.trend == []

    def test_each_call_starts_from_clean_accumulators(self, make_assessment):
        from app.services.competency_aggregation import aggregate_competencies
        from app.services.enrollment_join import EnrollmentIndex

        first = aggregate_competencies([make_assessment(mastery_level=90)], EnrollmentIndex())
        second = aggregate_competencies([make_assessment(mastery_level=40)], EnrollmentIndex())

        assert first.overall.count == 1
        assert second.overall.count == 1
        assert second.overall.total_mastery == 40


class TestRunningMean:
    def test_empty_mean_is_zero(self):
        from app.services.competency_aggregation import RunningMean

        assert RunningMean().mean == 0.0
