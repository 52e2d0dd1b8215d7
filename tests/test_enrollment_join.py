"""
Enrollment Join Unit Tests

Tests for the student -> courses / role lookups.
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestBuildEnrollmentIndex:
    """Tests for building the lookup index."""

    def test_groups_courses_per_student(self, make_enrollment):
        """Verify every enrolled course is attached in fetch order."""
        from app.services.enrollment_join import CourseRef, build_enrollment_index

        index = build_enrollment_index([
            make_enrollment(student_id="s1", course_id="c1", course_title="Culinary Arts"),
            make_enrollment(student_id="s2", course_id="c1", course_title="Culinary Arts"),
            make_enrollment(student_id="s1", course_id="c2", course_title="Front Office"),
        ])

        assert index.courses_for("s1") == [
            CourseRef("c1", "Culinary Arts"),
            CourseRef("c2", "Front Office"),
        ]
        assert index.courses_for("s2") == [CourseRef("c1", "Culinary Arts")]
        assert index.courses_for("unknown") == []

    def test_first_non_null_role_wins(self, make_enrollment):
        """Verify the first role encountered is kept for the student."""
        from app.services.enrollment_join import build_enrollment_index

        index = build_enrollment_index([
            make_enrollment(student_id="s1", course_id="c1", role_type=None),
            make_enrollment(student_id="s1", course_id="c2", role_type="culinary"),
            make_enrollment(student_id="s1", course_id="c3", role_type="housekeeping"),
        ])

        assert index.role_for("s1") == "culinary"

    def test_student_without_role_has_none(self, make_enrollment):
        from app.services.enrollment_join import build_enrollment_index

        index = build_enrollment_index([make_enrollment(student_id="s1")])

        assert index.role_for("s1") is None
        assert "s1" not in index.roles

    def test_role_strategy_is_swappable(self, make_enrollment):
        """Verify a custom resolver replaces first-wins."""
        from app.services.enrollment_join import build_enrollment_index

        def last_role(enrollments):
            roles = [e.role_type for e in enrollments if e.role_type]
            return roles[-1] if roles else None

        index = build_enrollment_index(
            [
                make_enrollment(student_id="s1", course_id="c1", role_type="culinary"),
                make_enrollment(student_id="s1", course_id="c2", role_type="management"),
            ],
            role_resolver=last_role,
        )

        assert index.role_for("s1") == "management"

    def test_missing_course_title_adds_no_course(self, make_enrollment):
        """Verify enrollments whose course row is missing are not heatmap courses."""
        from app.services.enrollment_join import build_enrollment_index

        index = build_enrollment_index([
            make_enrollment(student_id="s1", course_title=None, role_type="front_office"),
        ])

        assert index.courses_for("s1") == []
        assert index.role_for("s1") == "front_office"


class TestAdmits:
    """Tests for course scoping."""

    def test_no_course_filter_admits_everyone(self):
        from app.services.enrollment_join import EnrollmentIndex

        assert EnrollmentIndex().admits("s1", ()) is True

    def test_course_filter_excludes_students_without_courses(self, make_enrollment):
        from app.services.enrollment_join import build_enrollment_index

        index = build_enrollment_index([make_enrollment(student_id="s1", course_id="x")])

        assert index.admits("s1", ("x",)) is True
        assert index.admits("s2", ("x",)) is False

    def test_degraded_index_disables_scoping(self):
        from app.services.enrollment_join import EnrollmentIndex

        assert EnrollmentIndex(degraded=True).admits("s1", ("x",)) is True


class TestEnrich:
    """Tests for the fetch-and-join step."""

    @pytest.mark.asyncio
    async def test_fetches_distinct_students_with_course_filter(
        self, mock_async_session, analytics_filter, make_assessment, make_enrollment
    ):
        """Verify one fetch for the distinct student ids, scoped by course."""
        from dataclasses import replace

        from app.services.enrollment_join import enrich

        filters = replace(analytics_filter, course_ids=("c1",))
        records = [
            make_assessment(student_id="s1"),
            make_assessment(student_id="s2"),
            make_assessment(student_id="s1", competency_id="comp-2"),
        ]
        fetch = AsyncMock(return_value=[make_enrollment(student_id="s1", course_id="c1")])

        with patch("app.services.analytics_repository.fetch_enrollments_for_students", fetch):
            index = await enrich(mock_async_session, records, filters)

        fetch.assert_awaited_once_with(mock_async_session, ["s1", "s2"], ("c1",))
        assert index.degraded is False
        assert index.admits("s1", filters.course_ids) is True
        assert index.admits("s2", filters.course_ids) is False

    @pytest.mark.asyncio
    async def test_fetch_failure_degrades_instead_of_raising(
        self, mock_async_session, analytics_filter, make_assessment
    ):
        from app.services.enrollment_join import enrich

        fetch = AsyncMock(side_effect=RuntimeError("relation \"enrollments\" does not exist"))

        with patch("app.services.analytics_repository.fetch_enrollments_for_students", fetch):
            index = await enrich(mock_async_session, [make_assessment()], analytics_filter)

        assert index.degraded is True
        assert index.courses == {}
        assert index.roles == {}

    @pytest.mark.asyncio
    async def test_no_records_skips_fetch(self, mock_async_session, analytics_filter):
        from app.services.enrollment_join import enrich

        fetch = AsyncMock()

        with patch("app.services.analytics_repository.fetch_enrollments_for_students", fetch):
            index = await enrich(mock_async_session, [], analytics_filter)

        fetch.assert_not_awaited()
        assert index.degraded is False
