"""
Analytics Repository

Read-only queries against the platform database. Every function returns
plain records or scalars so the aggregation code never touches ORM objects.
Errors from the database propagate; callers decide how to degrade.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    Assessment,
    AssessmentAttempt,
    Attendance,
    Competency,
    Course,
    CourseCompletion,
    Enrollment,
    StudentCertification,
    StudentCompetency,
    User,
)
from app.models.enums import CertificationStatus, UserRole
from app.services.analytics_filters import AnalyticsFilter


# Postgres caps bind parameters per statement; large IN lists are split
IN_CLAUSE_CHUNK_SIZE = 500


@dataclass(frozen=True)
class CompetencyAssessmentRecord:
    """One student's mastery assessment on one competency."""
    student_id: str
    competency_id: str
    competency_name: str
    category: Optional[str]
    is_critical: bool
    mastery_level: float
    days_to_master: Optional[float]
    assessed_at: datetime


@dataclass(frozen=True)
class EnrollmentRecord:
    """
    Enrollment row joined with its course title.

    ``enrolled_at`` / ``completed_at`` are part of the record contract handed
    to role resolvers (a "most recent enrollment" policy needs them); the
    built-in first-role-wins policy relies on fetch order instead.
    """
    student_id: str
    course_id: str
    course_title: Optional[str]
    role_type: Optional[str]
    enrolled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


def _chunks(values: Sequence[str], size: int = IN_CLAUSE_CHUNK_SIZE):
    for offset in range(0, len(values), size):
        yield values[offset:offset + size]


# ============== Competency Pipeline ==============

async def fetch_competency_assessments(
    db: AsyncSession,
    filters: AnalyticsFilter,
) -> List[CompetencyAssessmentRecord]:
    """
    Fetch competency assessments made inside the filter window.

    A null mastery level is read as 0.
    """
    result = await db.execute(
        select(
            StudentCompetency.student_id,
            StudentCompetency.mastery_level,
            StudentCompetency.days_to_master,
            StudentCompetency.last_assessed_at,
            Competency.id,
            Competency.name,
            Competency.category,
            Competency.is_critical,
        )
        .join(Competency, StudentCompetency.competency_id == Competency.id)
        .where(
            StudentCompetency.last_assessed_at >= filters.start,
            StudentCompetency.last_assessed_at <= filters.end,
        )
        .order_by(StudentCompetency.last_assessed_at, StudentCompetency.id)
    )

    return [
        CompetencyAssessmentRecord(
            student_id=str(row.student_id),
            competency_id=str(row.id),
            competency_name=row.name,
            category=row.category,
            is_critical=bool(row.is_critical),
            mastery_level=row.mastery_level or 0,
            days_to_master=row.days_to_master,
            assessed_at=row.last_assessed_at,
        )
        for row in result.all()
    ]


async def fetch_enrollments_for_students(
    db: AsyncSession,
    student_ids: Sequence[str],
    course_ids: Sequence[str] = (),
) -> List[EnrollmentRecord]:
    """
    Fetch enrollments (with course titles) for the given students.

    Rows come back oldest enrollment first, so "first seen" means earliest.

    Args:
        db: Database session.
        student_ids: Students to look up.
        course_ids: Optional course restriction.

    Returns:
        List of enrollment records in fetch order.
    """
    records: List[EnrollmentRecord] = []

    for chunk in _chunks(list(student_ids)):
        query = (
            select(
                Enrollment.student_id,
                Enrollment.course_id,
                Enrollment.role_type,
                Enrollment.enrolled_at,
                Enrollment.completed_at,
                Course.title,
            )
            .outerjoin(Course, Enrollment.course_id == Course.id)
            .where(Enrollment.student_id.in_(chunk))
            .order_by(Enrollment.enrolled_at, Enrollment.id)
        )
        if course_ids:
            query = query.where(Enrollment.course_id.in_(course_ids))

        result = await db.execute(query)
        records.extend(
            EnrollmentRecord(
                student_id=str(row.student_id),
                course_id=str(row.course_id),
                course_title=row.title,
                role_type=row.role_type,
                enrolled_at=row.enrolled_at,
                completed_at=row.completed_at,
            )
            for row in result.all()
        )

    return records


# ============== KPI Queries ==============

async def count_students(db: AsyncSession) -> int:
    """Count non-deleted users with the student role."""
    result = await db.execute(
        select(func.count(User.id)).where(
            User.role == UserRole.STUDENT.value,
            User.deleted_at.is_(None),
        )
    )
    return result.scalar_one() or 0


async def count_enrolled_students(db: AsyncSession, course_ids: Sequence[str]) -> int:
    """Count distinct students enrolled in any of the given courses."""
    result = await db.execute(
        select(func.count(distinct(Enrollment.student_id))).where(
            Enrollment.course_id.in_(course_ids)
        )
    )
    return result.scalar_one() or 0


async def count_active_students(
    db: AsyncSession,
    since: datetime,
    course_ids: Sequence[str] = (),
) -> int:
    """
    Count users active since ``since``.

    With a course restriction, counts users enrolled in those courses;
    otherwise counts users with the student role.
    """
    query = select(func.count(User.id)).where(User.last_active_at >= since)

    if course_ids:
        enrolled = select(Enrollment.student_id).where(Enrollment.course_id.in_(course_ids))
        query = query.where(User.id.in_(enrolled))
    else:
        query = query.where(User.role == UserRole.STUDENT.value)

    result = await db.execute(query)
    return result.scalar_one() or 0


async def fetch_enrollment_completions(
    db: AsyncSession,
    filters: AnalyticsFilter,
) -> List[Optional[datetime]]:
    """Fetch ``completed_at`` of every enrollment made inside the window."""
    query = select(Enrollment.completed_at).where(
        Enrollment.enrolled_at >= filters.start,
        Enrollment.enrolled_at <= filters.end,
    )
    if filters.has_course_filter:
        query = query.where(Enrollment.course_id.in_(filters.course_ids))

    result = await db.execute(query)
    return list(result.scalars().all())


async def fetch_assessment_ids(db: AsyncSession, course_ids: Sequence[str]) -> List[str]:
    """Fetch ids of the assessments belonging to the given courses."""
    result = await db.execute(
        select(Assessment.id).where(Assessment.course_id.in_(course_ids))
    )
    return [str(assessment_id) for assessment_id in result.scalars().all()]


async def fetch_attempt_statuses(
    db: AsyncSession,
    filters: AnalyticsFilter,
    assessment_ids: Optional[Sequence[str]] = None,
) -> List[str]:
    """Fetch statuses of assessment attempts made inside the window."""
    query = select(AssessmentAttempt.status).where(
        AssessmentAttempt.attempted_at >= filters.start,
        AssessmentAttempt.attempted_at <= filters.end,
    )
    if assessment_ids is not None:
        query = query.where(AssessmentAttempt.assessment_id.in_(assessment_ids))

    result = await db.execute(query)
    return list(result.scalars().all())


async def count_certifications(db: AsyncSession, filters: AnalyticsFilter) -> int:
    """Count passed certifications issued inside the window."""
    result = await db.execute(
        select(func.count(StudentCertification.id)).where(
            StudentCertification.status == CertificationStatus.PASSED.value,
            StudentCertification.issued_at >= filters.start,
            StudentCertification.issued_at <= filters.end,
        )
    )
    return result.scalar_one() or 0


async def fetch_attendance_statuses(db: AsyncSession, filters: AnalyticsFilter) -> List[str]:
    """Fetch statuses of attendance records for sessions inside the window."""
    result = await db.execute(
        select(Attendance.status).where(
            Attendance.session_date >= filters.start,
            Attendance.session_date <= filters.end,
        )
    )
    return list(result.scalars().all())


async def fetch_satisfaction_ratings(
    db: AsyncSession,
    filters: AnalyticsFilter,
) -> List[Optional[float]]:
    """Fetch satisfaction ratings (nulls included) of completions inside the window."""
    query = select(CourseCompletion.satisfaction_rating).where(
        CourseCompletion.completed_at >= filters.start,
        CourseCompletion.completed_at <= filters.end,
    )
    if filters.has_course_filter:
        query = query.where(CourseCompletion.course_id.in_(filters.course_ids))

    result = await db.execute(query)
    return list(result.scalars().all())
