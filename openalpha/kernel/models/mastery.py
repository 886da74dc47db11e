"""
Mastery model - one running record per (student, subject, concept).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from openalpha.kernel.models.base import Base, TimestampMixin, generate_uuid

# A concept counts as mastered at or above this score. Fixed domain constant.
MASTERY_THRESHOLD = 80


class MasteryRecord(Base, TimestampMixin):
    """
    Per-student, per-concept mastery.

    mastery_score only ever rises (max of submitted scores), attempts counts
    submissions, completed_at marks the first time the score reached the
    threshold and is never moved afterwards.
    """

    __tablename__ = "mastery_records"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[str] = mapped_column(String(50), nullable=False)
    concept_id: Mapped[str] = mapped_column(String(100), nullable=False)

    mastery_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id", "subject_id", "concept_id",
            name="uq_mastery_records_student_subject_concept",
        ),
        CheckConstraint(
            "mastery_score >= 0 AND mastery_score <= 100",
            name="ck_mastery_records_score_range",
        ),
        Index("ix_mastery_records_student_last_attempt", "student_id", "last_attempt_at"),
    )

    @property
    def is_mastered(self) -> bool:
        return self.mastery_score >= MASTERY_THRESHOLD
