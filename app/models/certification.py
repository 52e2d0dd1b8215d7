"""
Certification Model

Industry certifications (food safety, first aid, ...) earned by students.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.enums import CertificationStatus


class StudentCertification(Base):
    """
    Certification model.

    Only ``passed`` certifications with an ``issued_at`` count as issued.

    Attributes:
        id: UUID primary key.
        student_id: Foreign key to users table.
        certification_type: e.g. ``food_safety``, ``first_aid``.
        status: Exam outcome.
        issued_at: Issue timestamp, null until issued.
    """

    __tablename__ = "student_certifications"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    certification_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=CertificationStatus.PENDING.value,
        nullable=False,
    )
    issued_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<StudentCertification(id={self.id}, type={self.certification_type})>"
