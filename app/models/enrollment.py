"""
Enrollment Model

Student-course enrollment, carrying the hospitality role track the student
enrolled under.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Enrollment(Base):
    """
    Enrollment model representing a student taking a course.

    A student may hold several enrollments, each with its own role_type.

    Attributes:
        id: UUID primary key.
        student_id: Foreign key to users table.
        course_id: Foreign key to courses table.
        role_type: Role track, e.g. ``fb_service`` or ``front_office``.
        enrolled_at: Enrollment timestamp.
        completed_at: Completion timestamp, null while in progress.
    """

    __tablename__ = "enrollments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    course_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    role_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, student_id={self.student_id}, course_id={self.course_id})>"
