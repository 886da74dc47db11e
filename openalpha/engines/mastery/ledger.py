"""
Mastery Ledger - per-student, per-concept score record and its update rule.

Each quiz submission raises the stored score to max(old, new), counts the
attempt, and stamps completed_at the first time the score reaches mastery.
Both paths are single statements, so concurrent submissions for the same
key cannot lose an attempt or regress the score.
"""

import uuid
from datetime import datetime
from typing import Callable, List, Optional, Set

from pydantic import BaseModel
from sqlalchemy import case, desc, literal, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.kernel.models.base import generate_uuid, utcnow
from openalpha.kernel.models.mastery import MASTERY_THRESHOLD, MasteryRecord
from openalpha.logging_config import get_logger
from openalpha.pedagogy.catalog import CurriculumCatalog

logger = get_logger(__name__)

_KEY_COLUMNS = ["student_id", "subject_id", "concept_id"]


class AttemptResult(BaseModel):
    """Outcome of one quiz submission."""

    mastery_score: int
    passed: bool
    attempts: int
    completed_at: Optional[datetime] = None


class MasteryLedger:
    """
    Reads and writes MasteryRecord rows.

    ``clock`` is injectable so tests can pin the timestamps.
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock

    def _key(self, student_id: uuid.UUID, subject_id: str, concept_id: str):
        return (
            MasteryRecord.student_id == student_id,
            MasteryRecord.subject_id == subject_id,
            MasteryRecord.concept_id == concept_id,
        )

    async def record_attempt(
        self,
        student_id: uuid.UUID,
        subject_id: str,
        concept_id: str,
        score: int,
    ) -> AttemptResult:
        """
        Apply one quiz score.

        ``score`` must already be validated to [0, 100] by the caller.
        """
        now = self.clock()
        conn = await self.session.connection()
        dialect_insert = postgresql.insert if conn.dialect.name == "postgresql" else sqlite.insert

        # First submission for the key: plain insert, ignored if a record exists
        insert_stmt = (
            dialect_insert(MasteryRecord.__table__)
            .values(
                id=generate_uuid(),
                student_id=student_id,
                subject_id=subject_id,
                concept_id=concept_id,
                mastery_score=score,
                attempts=1,
                last_attempt_at=now,
                completed_at=now if score >= MASTERY_THRESHOLD else None,
            )
            .on_conflict_do_nothing(index_elements=_KEY_COLUMNS)
        )
        inserted = (await conn.execute(insert_stmt)).rowcount == 1

        if not inserted:
            values = {
                "mastery_score": case(
                    (MasteryRecord.mastery_score < score, score),
                    else_=MasteryRecord.mastery_score,
                ),
                "attempts": MasteryRecord.attempts + 1,
                "last_attempt_at": now,
            }
            if score >= MASTERY_THRESHOLD:
                # Only the first mastering attempt stamps completion
                values["completed_at"] = case(
                    (MasteryRecord.completed_at.is_(None), literal(now, MasteryRecord.completed_at.type)),
                    else_=MasteryRecord.completed_at,
                )
            await conn.execute(
                update(MasteryRecord.__table__)
                .where(*self._key(student_id, subject_id, concept_id))
                .values(**values)
            )

        record = await self.get_record(student_id, subject_id, concept_id)
        result = AttemptResult(
            mastery_score=record.mastery_score,
            passed=record.mastery_score >= MASTERY_THRESHOLD,
            attempts=record.attempts,
            completed_at=record.completed_at,
        )
        logger.info(
            "Quiz attempt recorded",
            extra={
                "student_id": str(student_id),
                "subject_id": subject_id,
                "concept_id": concept_id,
                "score": score,
                "mastery_score": result.mastery_score,
                "attempts": result.attempts,
            },
        )
        return result

    # ── Reads ──

    async def get_record(
        self,
        student_id: uuid.UUID,
        subject_id: str,
        concept_id: str,
    ) -> Optional[MasteryRecord]:
        result = await self.session.execute(
            select(MasteryRecord)
            .where(*self._key(student_id, subject_id, concept_id))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_records(
        self,
        student_id: uuid.UUID,
        subject_id: Optional[str] = None,
    ) -> List[MasteryRecord]:
        query = select(MasteryRecord).where(MasteryRecord.student_id == student_id)
        if subject_id is not None:
            query = query.where(MasteryRecord.subject_id == subject_id)
        query = query.order_by(MasteryRecord.subject_id, MasteryRecord.concept_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def completed_concept_ids(self, student_id: uuid.UUID, subject_id: str) -> Set[str]:
        """Mastered concept ids, the input to next_concept."""
        result = await self.session.execute(
            select(MasteryRecord.concept_id).where(
                MasteryRecord.student_id == student_id,
                MasteryRecord.subject_id == subject_id,
                MasteryRecord.mastery_score >= MASTERY_THRESHOLD,
            )
        )
        return set(result.scalars().all())

    async def recent_records(self, student_id: uuid.UUID, limit: int = 10) -> List[MasteryRecord]:
        result = await self.session.execute(
            select(MasteryRecord)
            .where(MasteryRecord.student_id == student_id)
            .order_by(desc(MasteryRecord.last_attempt_at))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def struggling_records(self, student_id: uuid.UUID, limit: int = 5) -> List[MasteryRecord]:
        """Unmastered concepts with repeated attempts, hardest first."""
        result = await self.session.execute(
            select(MasteryRecord)
            .where(
                MasteryRecord.student_id == student_id,
                MasteryRecord.mastery_score < MASTERY_THRESHOLD,
                MasteryRecord.attempts >= 2,
            )
            .order_by(desc(MasteryRecord.attempts), MasteryRecord.mastery_score)
            .limit(limit)
        )
        return list(result.scalars().all())

    # ── Language-model context ──

    async def progress_digest(self, student_id: uuid.UUID, subject_id: str) -> str:
        """One-line summary of a student's scores in one subject."""
        records = await self.list_records(student_id, subject_id)
        if not records:
            return "No prior progress"
        return ", ".join(f"{r.concept_id}: {r.mastery_score}%" for r in records)

    async def coach_digest(
        self,
        student_id: uuid.UUID,
        catalog: CurriculumCatalog,
        limit: int = 10,
    ) -> str:
        """Most recent activity across subjects, phrased for a parent coach."""
        records = await self.recent_records(student_id, limit)
        if not records:
            return "No progress recorded yet"
        parts = []
        for r in records:
            subject = catalog.get_subject(r.subject_id)
            subject_name = subject.name if subject else r.subject_id
            concept_name = catalog.concept_name(r.subject_id, r.concept_id)
            suffix = ", completed" if r.completed_at is not None else ""
            parts.append(f"{subject_name}: {concept_name} ({r.mastery_score}%{suffix})")
        return "; ".join(parts)
