"""
Academy Analytics - Models Module

SQLAlchemy mappings of the platform tables the analytics pipeline reads.
"""

from app.core.database import Base

# Enums
from app.models.enums import (
    UserRole,
    AttemptStatus,
    AttendanceStatus,
    CertificationStatus,
)

# Models
from app.models.user import User
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.competency import Competency, StudentCompetency
from app.models.assessment import Assessment, AssessmentAttempt
from app.models.attendance import Attendance
from app.models.course_completion import CourseCompletion
from app.models.certification import StudentCertification

__all__ = [
    # Base
    "Base",
    # Enums
    "UserRole",
    "AttemptStatus",
    "AttendanceStatus",
    "CertificationStatus",
    # Models
    "User",
    "Course",
    "Enrollment",
    "Competency",
    "StudentCompetency",
    "Assessment",
    "AssessmentAttempt",
    "Attendance",
    "CourseCompletion",
    "StudentCertification",
]
