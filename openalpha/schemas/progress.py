"""
Progress schemas - mastery records and aggregate views.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from openalpha.engines.mastery.summary import SubjectSummary
from openalpha.engines.sessions.session_store import SessionMetadata


class MasteryRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subject_id: str
    concept_id: str
    mastery_score: int
    attempts: int
    last_attempt_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ProgressBySubjectResponse(BaseModel):
    progress: Dict[str, List[MasteryRecordResponse]]


class SummaryResponse(BaseModel):
    summary: List[SubjectSummary]


class SubjectProgressResponse(BaseModel):
    subject_id: str
    progress: List[MasteryRecordResponse]


class RecentActivityResponse(BaseModel):
    recent_progress: List[MasteryRecordResponse]
    recent_sessions: List[SessionMetadata]
