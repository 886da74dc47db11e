"""
Tutor endpoints - the student's learning surface.

Concept lists with mastery overlay, next-concept recommendation, tutor chat
turns and quizzes.
"""

import uuid
from typing import Tuple

from fastapi import APIRouter

from openalpha.ai.prompts import tutor_system_prompt
from openalpha.ai.quiz import generate_quiz
from openalpha.api.deps import AppSettings, Catalog, Completion, DbSession, StudentUser
from openalpha.engines.mastery.ledger import MasteryLedger
from openalpha.engines.mastery.summary import concept_overlay
from openalpha.engines.sessions.session_store import SessionStore
from openalpha.kernel.errors import NotFoundError, ValidationError
from openalpha.kernel.models.chat_session import SessionType
from openalpha.kernel.models.user import User
from openalpha.pedagogy.catalog import Concept, CurriculumCatalog, Subject
from openalpha.pedagogy.recommendation import next_concept
from openalpha.schemas.tutor import (
    ChatMessage,
    ChatResponse,
    ConceptListResponse,
    ConceptResponse,
    NextConceptResponse,
    QuizQuestionResponse,
    QuizRequest,
    QuizResponse,
    QuizSubmitRequest,
    QuizSubmitResponse,
    TranscriptResponse,
    TutorChatRequest,
)

router = APIRouter()

PASSED_MESSAGE = "Congratulations! You've mastered this concept!"
RETRY_MESSAGE = "Keep practicing to reach 80% mastery."


# ── Helpers ──────────────────────────────────────────────────────────────

def _grade_of(student: User) -> int:
    if student.grade_level is None:
        raise ValidationError("Grade level not set", code="grade_level_missing")
    return student.grade_level


def _subject(catalog: CurriculumCatalog, subject_id: str) -> Subject:
    subject = catalog.get_subject(subject_id)
    if subject is None:
        raise NotFoundError("Subject not found")
    return subject


def _concept(catalog: CurriculumCatalog, subject_id: str, concept_id: str) -> Tuple[Subject, Concept]:
    subject = _subject(catalog, subject_id)
    concept = catalog.get_concept(subject_id, concept_id)
    if concept is None:
        raise NotFoundError("Concept not found")
    return subject, concept


def _concept_response(concept: Concept) -> ConceptResponse:
    return ConceptResponse(
        id=concept.id,
        name=concept.name,
        description=concept.description,
        grade_level=concept.grade_level,
        prerequisites=list(concept.prerequisites),
    )


# ── Curriculum ───────────────────────────────────────────────────────────

@router.get("/subjects")
async def list_subjects(student: StudentUser, catalog: Catalog):
    """Subjects with their full concept counts."""
    return {
        "subjects": [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "total_concepts": len(s.concepts),
            }
            for s in catalog.subjects
        ]
    }


@router.get("/concepts/{subject_id}", response_model=ConceptListResponse)
async def get_concepts(subject_id: str, student: StudentUser, db: DbSession, catalog: Catalog):
    """Concepts up to the student's grade, each with the student's mastery."""
    grade = _grade_of(student)
    subject = _subject(catalog, subject_id)
    records = await MasteryLedger(db).list_records(student.id, subject_id)
    return ConceptListResponse(
        subject_id=subject.id,
        subject_name=subject.name,
        grade_level=grade,
        concepts=concept_overlay(catalog, subject_id, grade, records),
    )


@router.get("/next/{subject_id}", response_model=NextConceptResponse)
async def get_next_concept(subject_id: str, student: StudentUser, db: DbSession, catalog: Catalog):
    """The next learnable concept, or null when nothing at this grade is open."""
    grade = _grade_of(student)
    _subject(catalog, subject_id)
    completed = await MasteryLedger(db).completed_concept_ids(student.id, subject_id)
    concept = next_concept(catalog, subject_id, completed, grade)
    return NextConceptResponse(
        subject_id=subject_id,
        concept=_concept_response(concept) if concept else None,
    )


# ── Chat ─────────────────────────────────────────────────────────────────

@router.post("/chat", response_model=ChatResponse)
async def tutor_chat(
    body: TutorChatRequest,
    student: StudentUser,
    db: DbSession,
    catalog: Catalog,
    completion: Completion,
):
    """
    One tutor exchange.

    The user entry and the reply are stored together after the completion
    call returns; a failed call stores nothing and surfaces as retryable.
    """
    grade = _grade_of(student)
    subject, concept = _concept(catalog, body.subject, body.concept_id)

    store = SessionStore(db)
    chat = await store.get_or_create_session(
        student.id,
        SessionType.TUTOR,
        subject=subject.id,
        concept_id=concept.id,
        session_id=body.session_id,
    )

    digest = await MasteryLedger(db).progress_digest(student.id, subject.id)
    system_prompt = tutor_system_prompt(grade, subject.name, concept, digest)

    async def reply(transcript):
        return await completion.complete(system_prompt, transcript)

    chat = await store.run_turn(chat, body.message, reply)
    return ChatResponse(
        session_id=chat.id,
        reply=chat.transcript[-1]["content"],
        messages=[ChatMessage(**m) for m in chat.transcript],
    )


@router.get("/sessions/{session_id}", response_model=TranscriptResponse)
async def get_session(session_id: uuid.UUID, student: StudentUser, db: DbSession):
    """Full transcript of one of the student's own sessions."""
    chat = await SessionStore(db).get_transcript(student.id, session_id)
    return TranscriptResponse(
        session_id=chat.id,
        session_type=chat.session_type,
        subject=chat.subject,
        concept_id=chat.concept_id,
        messages=[ChatMessage(**m) for m in chat.transcript],
    )


# ── Quiz ─────────────────────────────────────────────────────────────────

@router.post("/quiz", response_model=QuizResponse)
async def create_quiz(
    body: QuizRequest,
    student: StudentUser,
    catalog: Catalog,
    completion: Completion,
    settings: AppSettings,
):
    """Generate multiple-choice questions for one concept."""
    grade = _grade_of(student)
    subject, concept = _concept(catalog, body.subject, body.concept_id)
    questions = await generate_quiz(
        completion,
        subject.name,
        concept.name,
        grade,
        count=settings.quiz_question_count,
    )
    return QuizResponse(
        subject=subject.id,
        concept_id=concept.id,
        questions=[
            QuizQuestionResponse(
                question=q.question,
                options=q.options,
                correct_answer=q.correct_answer,
                explanation=q.explanation,
            )
            for q in questions
        ],
    )


@router.post("/quiz/submit", response_model=QuizSubmitResponse)
async def submit_quiz(body: QuizSubmitRequest, student: StudentUser, db: DbSession, catalog: Catalog):
    """Record a quiz score; the stored mastery keeps the best score so far."""
    subject, concept = _concept(catalog, body.subject, body.concept_id)
    result = await MasteryLedger(db).record_attempt(student.id, subject.id, concept.id, body.score)
    return QuizSubmitResponse(
        mastery_score=result.mastery_score,
        passed=result.passed,
        attempts=result.attempts,
        message=PASSED_MESSAGE if result.passed else RETRY_MESSAGE,
    )
