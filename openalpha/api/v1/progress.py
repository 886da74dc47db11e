"""
Progress endpoints - a student's own mastery records.
"""

from typing import Dict, List

from fastapi import APIRouter

from openalpha.api.deps import Catalog, DbSession, StudentUser
from openalpha.engines.mastery.ledger import MasteryLedger
from openalpha.engines.mastery.summary import subject_summaries
from openalpha.engines.sessions.session_store import SessionStore
from openalpha.schemas.progress import (
    MasteryRecordResponse,
    ProgressBySubjectResponse,
    RecentActivityResponse,
    SubjectProgressResponse,
    SummaryResponse,
)

router = APIRouter()


@router.get("", response_model=ProgressBySubjectResponse)
async def get_all_progress(student: StudentUser, db: DbSession):
    """All mastery records, grouped by subject."""
    grouped: Dict[str, List[MasteryRecordResponse]] = {}
    for record in await MasteryLedger(db).list_records(student.id):
        grouped.setdefault(record.subject_id, []).append(
            MasteryRecordResponse.model_validate(record)
        )
    return ProgressBySubjectResponse(progress=grouped)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(student: StudentUser, db: DbSession, catalog: Catalog):
    records = await MasteryLedger(db).list_records(student.id)
    return SummaryResponse(summary=subject_summaries(catalog, records))


@router.get("/activity/recent", response_model=RecentActivityResponse)
async def get_recent_activity(student: StudentUser, db: DbSession):
    """Latest quiz results and the latest tutor sessions."""
    records = await MasteryLedger(db).recent_records(student.id, limit=10)
    sessions = await SessionStore(db).list_metadata(student.id, limit=5)
    return RecentActivityResponse(
        recent_progress=[MasteryRecordResponse.model_validate(r) for r in records],
        recent_sessions=sessions,
    )


@router.get("/{subject_id}", response_model=SubjectProgressResponse)
async def get_subject_progress(subject_id: str, student: StudentUser, db: DbSession):
    records = await MasteryLedger(db).list_records(student.id, subject_id)
    return SubjectProgressResponse(
        subject_id=subject_id,
        progress=[MasteryRecordResponse.model_validate(r) for r in records],
    )
