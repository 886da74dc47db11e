"""
Coach endpoints - a parent's conversation about one linked child.
"""

from fastapi import APIRouter

from openalpha.ai.prompts import coach_system_prompt
from openalpha.api.deps import Catalog, Completion, DbSession, ParentUser
from openalpha.engines.linking.link_service import LinkService
from openalpha.engines.mastery.ledger import MasteryLedger
from openalpha.engines.sessions.session_store import SessionStore
from openalpha.kernel.models.chat_session import SessionType
from openalpha.kernel.permissions.capability import CapabilityService
from openalpha.schemas.coach import CoachChatRequest
from openalpha.schemas.parent import SessionListResponse, StudentResponse
from openalpha.schemas.tutor import ChatMessage, ChatResponse

router = APIRouter()


@router.get("/children")
async def list_coachable_children(parent: ParentUser, db: DbSession):
    """Linked children the coach can talk about."""
    pairs = await LinkService(db).list_linked_students(parent.id)
    return {"children": [StudentResponse.model_validate(child) for child, _ in pairs]}


@router.post("/chat", response_model=ChatResponse)
async def coach_chat(
    body: CoachChatRequest,
    parent: ParentUser,
    db: DbSession,
    catalog: Catalog,
    completion: Completion,
):
    """
    One coach exchange about ``child_id``.

    The session belongs to the parent; the child's progress only feeds the
    system prompt.
    """
    child = await CapabilityService(db).require_linked(parent, body.child_id)

    store = SessionStore(db)
    chat = await store.get_or_create_session(
        parent.id,
        SessionType.COACH,
        session_id=body.session_id,
    )

    digest = await MasteryLedger(db).coach_digest(child.id, catalog)
    system_prompt = coach_system_prompt(child.grade_level or 0, digest)

    async def reply(transcript):
        return await completion.complete(system_prompt, transcript)

    chat = await store.run_turn(chat, body.message, reply)
    return ChatResponse(
        session_id=chat.id,
        reply=chat.transcript[-1]["content"],
        messages=[ChatMessage(**m) for m in chat.transcript],
    )


@router.get("/sessions", response_model=SessionListResponse)
async def list_coach_sessions(parent: ParentUser, db: DbSession):
    sessions = await SessionStore(db).list_metadata(parent.id, SessionType.COACH, limit=20)
    return SessionListResponse(sessions=sessions)
