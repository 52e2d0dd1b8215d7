"""
Enrollment Join

Attaches course membership and role track to the students that appear in a
batch of competency assessments. The database exposes no direct link between
competency assessments and courses, so the join happens here in memory.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.services import analytics_repository
from app.services.analytics_filters import AnalyticsFilter
from app.services.analytics_repository import CompetencyAssessmentRecord, EnrollmentRecord

logger = logging.getLogger(__name__)


# Picks a single role for a student from their enrollments (in fetch order)
RoleResolver = Callable[[Sequence[EnrollmentRecord]], Optional[str]]


def first_role_wins(enrollments: Sequence[EnrollmentRecord]) -> Optional[str]:
    """Return the first non-null role_type in fetch order."""
    for enrollment in enrollments:
        if enrollment.role_type:
            return enrollment.role_type
    return None


@dataclass(frozen=True)
class CourseRef:
    """A course a student is enrolled in."""
    course_id: str
    course_title: str


@dataclass
class EnrollmentIndex:
    """
    Student lookups built from enrollment rows.

    Attributes:
        courses: student id -> courses, in enrollment order.
        roles: student id -> resolved role (students without one are absent).
        degraded: True when the enrollment fetch failed. Course scoping is
            then disabled instead of excluding every student.
    """
    courses: Dict[str, List[CourseRef]] = field(default_factory=dict)
    roles: Dict[str, str] = field(default_factory=dict)
    degraded: bool = False

    def courses_for(self, student_id: str) -> List[CourseRef]:
        return self.courses.get(student_id, [])

    def role_for(self, student_id: str) -> Optional[str]:
        return self.roles.get(student_id)

    def admits(self, student_id: str, course_ids: Sequence[str]) -> bool:
        """
        Whether a student's assessments take part in the aggregation.

        With a course filter, only students enrolled in one of the filtered
        courses are admitted.
        """
        if not course_ids or self.degraded:
            return True
        return len(self.courses_for(student_id)) > 0


def build_enrollment_index(
    enrollments: Iterable[EnrollmentRecord],
    role_resolver: RoleResolver = first_role_wins,
) -> EnrollmentIndex:
    """
    Group enrollment rows per student.

    Rows without a course title contribute no course, but the student still
    gets an (empty) entry and a role.
    """
    grouped: "OrderedDict[str, List[EnrollmentRecord]]" = OrderedDict()
    for enrollment in enrollments:
        grouped.setdefault(enrollment.student_id, []).append(enrollment)

    index = EnrollmentIndex()
    for student_id, rows in grouped.items():
        index.courses[student_id] = [
            CourseRef(course_id=row.course_id, course_title=row.course_title)
            for row in rows
            if row.course_title is not None
        ]
        role = role_resolver(rows)
        if role:
            index.roles[student_id] = role

    return index


async def enrich(
    db: AsyncSession,
    records: Sequence[CompetencyAssessmentRecord],
    filters: AnalyticsFilter,
    role_resolver: RoleResolver = first_role_wins,
) -> EnrollmentIndex:
    """
    Build the enrollment index for the students in ``records``.

    A failed enrollment fetch is logged and yields an empty, degraded index
    so the rest of the competency report can still be produced.
    """
    student_ids = list(OrderedDict.fromkeys(r.student_id for r in records))
    if not student_ids:
        return EnrollmentIndex()

    try:
        enrollments = await analytics_repository.fetch_enrollments_for_students(
            db,
            student_ids,
            filters.course_ids,
        )
    except Exception as e:
        logger.error(f"Failed to fetch enrollments for {len(student_ids)} students: {e}", exc_info=True)
        return EnrollmentIndex(degraded=True)

    return build_enrollment_index(enrollments, role_resolver)
