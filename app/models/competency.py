"""
Competency Models

Competency catalogue and per-student mastery assessments.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Competency(Base):
    """
    A skill students are assessed on, e.g. "Knife Skills".

    Attributes:
        id: UUID primary key.
        name: Display name.
        category: Grouping such as "Culinary" or "Front Office".
        is_critical: Critical competencies feed the critical-mastery KPI.
    """

    __tablename__ = "competencies"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    is_critical: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Competency(id={self.id}, name={self.name})>"


class StudentCompetency(Base):
    """
    Latest mastery assessment of one student on one competency.

    Attributes:
        mastery_level: 0-100.
        days_to_master: Days from first attempt to mastery, if reached.
        last_assessed_at: When the level was last assessed.
    """

    __tablename__ = "student_competencies"

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
    competency_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("competencies.id", ondelete="CASCADE"),
        nullable=False,
    )
    mastery_level: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )
    days_to_master: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    last_assessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<StudentCompetency(student_id={self.student_id}, competency_id={self.competency_id})>"
