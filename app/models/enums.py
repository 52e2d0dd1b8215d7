"""
Database Enums

Python Enums for the string-valued status columns of the platform schema.
The columns themselves are plain strings; compare against ``.value``.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class AttemptStatus(str, enum.Enum):
    """Assessment attempt outcome."""
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


class AttendanceStatus(str, enum.Enum):
    """Session attendance status."""
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class CertificationStatus(str, enum.Enum):
    """Certification exam outcome."""
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"
