"""
Progress summaries - aggregate read views over mastery records.

The functions here are pure over (catalog, records); ProgressReporter wires
them to the ledger and the session store for the parent dashboard.
"""

import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from openalpha.engines.mastery.ledger import MasteryLedger
from openalpha.engines.sessions.session_store import SessionMetadata, SessionStore
from openalpha.kernel.models.base import utcnow
from openalpha.kernel.models.mastery import MASTERY_THRESHOLD, MasteryRecord
from openalpha.pedagogy.catalog import CurriculumCatalog
from openalpha.pedagogy.recommendation import ConceptStatus, concept_status, is_unlocked

RECENT_ACTIVITY_DAYS = 7
MAX_RECOMMENDATIONS = 3
MAX_CONTINUE_RECOMMENDATIONS = 2


class SubjectSummary(BaseModel):
    subject_id: str
    subject_name: str
    completed: int
    in_progress: int
    not_started: int
    total_concepts: int
    percent_complete: int


class ConceptProgress(BaseModel):
    """A concept with the student's mastery laid over it."""

    id: str
    name: str
    description: str
    grade_level: int
    prerequisites: List[str]
    mastery_score: int = 0
    attempts: int = 0
    status: ConceptStatus = ConceptStatus.NOT_STARTED
    completed: bool = False
    unlocked: bool = False


class StrugglingConcept(BaseModel):
    subject_id: str
    subject_name: str
    concept_id: str
    concept_name: str
    mastery_score: int
    attempts: int
    last_attempt_at: Optional[datetime] = None


class Recommendation(BaseModel):
    type: str  # continue | start
    subject_id: str
    concept_id: str
    concept_name: str
    reason: str


class StudentAnalytics(BaseModel):
    last_active: Optional[datetime] = None
    recent_activity: List[SessionMetadata]
    struggling: List[StrugglingConcept]
    recommendations: List[Recommendation]


def subject_summaries(
    catalog: CurriculumCatalog,
    records: Iterable[MasteryRecord],
) -> List[SubjectSummary]:
    """Completed / in-progress / not-started counts for every subject."""
    by_subject: Dict[str, List[MasteryRecord]] = {}
    for record in records:
        by_subject.setdefault(record.subject_id, []).append(record)

    summaries = []
    for subject in catalog.subjects:
        scores = [r.mastery_score for r in by_subject.get(subject.id, [])]
        completed = sum(1 for s in scores if s >= MASTERY_THRESHOLD)
        in_progress = sum(1 for s in scores if 0 < s < MASTERY_THRESHOLD)
        total = len(subject.concepts)
        summaries.append(
            SubjectSummary(
                subject_id=subject.id,
                subject_name=subject.name,
                completed=completed,
                in_progress=in_progress,
                not_started=max(total - completed - in_progress, 0),
                total_concepts=total,
                percent_complete=round(completed * 100 / total) if total else 0,
            )
        )
    return summaries


def concept_overlay(
    catalog: CurriculumCatalog,
    subject_id: str,
    grade_level: int,
    records: Iterable[MasteryRecord],
) -> List[ConceptProgress]:
    """Concepts available at ``grade_level`` with the student's scores."""
    by_concept = {r.concept_id: r for r in records if r.subject_id == subject_id}
    completed_ids = {
        cid for cid, r in by_concept.items() if r.mastery_score >= MASTERY_THRESHOLD
    }

    overlay = []
    for concept in catalog.get_concepts_for_grade(subject_id, grade_level):
        record = by_concept.get(concept.id)
        score = record.mastery_score if record else 0
        overlay.append(
            ConceptProgress(
                id=concept.id,
                name=concept.name,
                description=concept.description,
                grade_level=concept.grade_level,
                prerequisites=list(concept.prerequisites),
                mastery_score=score,
                attempts=record.attempts if record else 0,
                status=concept_status(record.mastery_score if record else None),
                completed=score >= MASTERY_THRESHOLD,
                unlocked=is_unlocked(concept, completed_ids),
            )
        )
    return overlay


def recommendations_for(
    catalog: CurriculumCatalog,
    records: List[MasteryRecord],
) -> List[Recommendation]:
    """Up to two concepts to keep working on, then subjects not yet started."""
    recs: List[Recommendation] = []

    in_progress = [r for r in records if 0 < r.mastery_score < MASTERY_THRESHOLD]
    for record in in_progress[:MAX_CONTINUE_RECOMMENDATIONS]:
        concept = catalog.get_concept(record.subject_id, record.concept_id)
        if concept is None:
            continue
        recs.append(
            Recommendation(
                type="continue",
                subject_id=record.subject_id,
                concept_id=concept.id,
                concept_name=concept.name,
                reason=f"{record.mastery_score}% mastery - almost there!",
            )
        )

    started = {r.subject_id for r in records}
    for subject in catalog.subjects:
        if len(recs) >= MAX_RECOMMENDATIONS:
            break
        if subject.id in started or not subject.concepts:
            continue
        first = subject.concepts[0]
        recs.append(
            Recommendation(
                type="start",
                subject_id=subject.id,
                concept_id=first.id,
                concept_name=first.name,
                reason=f"Start learning {subject.name}",
            )
        )
    return recs


class ProgressReporter:
    """Builds the aggregate views a linked parent may read."""

    def __init__(
        self,
        session: AsyncSession,
        catalog: CurriculumCatalog,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.clock = clock
        self.ledger = MasteryLedger(session, clock=clock)
        self.sessions = SessionStore(session, clock=clock)

    async def summary(self, student_id: uuid.UUID) -> List[SubjectSummary]:
        return subject_summaries(self.catalog, await self.ledger.list_records(student_id))

    async def analytics(self, student_id: uuid.UUID) -> StudentAnalytics:
        since = self.clock() - timedelta(days=RECENT_ACTIVITY_DAYS)
        recent = await self.sessions.list_metadata(student_id, since=since, limit=10)

        struggling = []
        for record in await self.ledger.struggling_records(student_id):
            subject = self.catalog.get_subject(record.subject_id)
            struggling.append(
                StrugglingConcept(
                    subject_id=record.subject_id,
                    subject_name=subject.name if subject else record.subject_id,
                    concept_id=record.concept_id,
                    concept_name=self.catalog.concept_name(record.subject_id, record.concept_id),
                    mastery_score=record.mastery_score,
                    attempts=record.attempts,
                    last_attempt_at=record.last_attempt_at,
                )
            )

        records = await self.ledger.list_records(student_id)
        return StudentAnalytics(
            last_active=await self.sessions.last_active_at(student_id),
            recent_activity=recent,
            struggling=struggling,
            recommendations=recommendations_for(self.catalog, records),
        )
