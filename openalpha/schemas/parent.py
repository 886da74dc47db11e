"""
Parent schemas - invites, links and the child dashboard.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from openalpha.engines.mastery.summary import SubjectSummary
from openalpha.engines.sessions.session_store import SessionMetadata
from openalpha.kernel.models.parent_link import INVITE_CODE_LENGTH
from openalpha.schemas.progress import MasteryRecordResponse


class InviteResponse(BaseModel):
    invite_code: str


class LinkRequest(BaseModel):
    invite_code: str = Field(..., min_length=INVITE_CODE_LENGTH, max_length=INVITE_CODE_LENGTH)

    @field_validator("invite_code")
    @classmethod
    def upper(cls, v: str) -> str:
        return v.upper()


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: Optional[str] = None
    grade_level: Optional[int] = None


class LinkResponse(BaseModel):
    success: bool = True
    student: StudentResponse


class ChildResponse(BaseModel):
    id: uuid.UUID
    email: str
    display_name: Optional[str] = None
    grade_level: Optional[int] = None
    linked_at: datetime


class ChildrenResponse(BaseModel):
    children: List[ChildResponse]


class ChildProgressResponse(BaseModel):
    progress: List[MasteryRecordResponse]
    summary: List[SubjectSummary]


class SessionListResponse(BaseModel):
    sessions: List[SessionMetadata]


class UnlinkResponse(BaseModel):
    success: bool
    removed: int
