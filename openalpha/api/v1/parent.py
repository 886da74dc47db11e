"""
Parent endpoints - invite codes, links and the child dashboard.

Every read of a child's data goes through CapabilityService.require_linked;
an unlinked or nonexistent child is reported as 403 either way.
"""

import uuid

from fastapi import APIRouter

from openalpha.api.deps import Catalog, DbSession, ParentUser, StudentUser
from openalpha.engines.linking.link_service import LinkService
from openalpha.engines.mastery.ledger import MasteryLedger
from openalpha.engines.mastery.summary import ProgressReporter, StudentAnalytics
from openalpha.engines.sessions.session_store import SessionStore
from openalpha.kernel.permissions.capability import CapabilityService
from openalpha.schemas.parent import (
    ChildProgressResponse,
    ChildrenResponse,
    ChildResponse,
    InviteResponse,
    LinkRequest,
    LinkResponse,
    SessionListResponse,
    StudentResponse,
    UnlinkResponse,
)
from openalpha.schemas.progress import MasteryRecordResponse

router = APIRouter()


@router.post("/generate-invite", response_model=InviteResponse)
async def generate_invite(student: StudentUser, db: DbSession):
    """
    Issue a fresh invite code for the calling student.

    Any earlier unredeemed code stops working.
    """
    code = await LinkService(db).issue_invite(student.id)
    return InviteResponse(invite_code=code)


@router.post("/link", response_model=LinkResponse)
async def link_student(data: LinkRequest, parent: ParentUser, db: DbSession):
    """Redeem an invite code. Each code links at most one parent."""
    student_id = await LinkService(db).redeem_invite(parent.id, data.invite_code)
    student = await CapabilityService(db).require_linked(parent, student_id)
    return LinkResponse(student=StudentResponse.model_validate(student))


@router.get("/children", response_model=ChildrenResponse)
async def list_children(parent: ParentUser, db: DbSession):
    pairs = await LinkService(db).list_linked_students(parent.id)
    return ChildrenResponse(
        children=[
            ChildResponse(
                id=child.id,
                email=child.email,
                display_name=child.display_name,
                grade_level=child.grade_level,
                linked_at=linked_at,
            )
            for child, linked_at in pairs
        ]
    )


@router.get("/children/{child_id}/progress", response_model=ChildProgressResponse)
async def get_child_progress(child_id: uuid.UUID, parent: ParentUser, db: DbSession, catalog: Catalog):
    child = await CapabilityService(db).require_linked(parent, child_id)
    records = await MasteryLedger(db).list_records(child.id)
    return ChildProgressResponse(
        progress=[MasteryRecordResponse.model_validate(r) for r in records],
        summary=await ProgressReporter(db, catalog).summary(child.id),
    )


@router.get("/children/{child_id}/sessions", response_model=SessionListResponse)
async def get_child_sessions(child_id: uuid.UUID, parent: ParentUser, db: DbSession):
    """Session metadata only; transcripts stay private to the student."""
    child = await CapabilityService(db).require_linked(parent, child_id)
    sessions = await SessionStore(db).list_metadata(child.id, limit=20)
    return SessionListResponse(sessions=sessions)


@router.get("/children/{child_id}/analytics", response_model=StudentAnalytics)
async def get_child_analytics(child_id: uuid.UUID, parent: ParentUser, db: DbSession, catalog: Catalog):
    child = await CapabilityService(db).require_linked(parent, child_id)
    return await ProgressReporter(db, catalog).analytics(child.id)


@router.delete("/children/{child_id}", response_model=UnlinkResponse)
async def unlink_child(child_id: uuid.UUID, parent: ParentUser, db: DbSession):
    removed = await LinkService(db).unlink(parent.id, child_id)
    return UnlinkResponse(success=removed > 0, removed=removed)
