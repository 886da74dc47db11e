"""
Tutor schemas - concepts, chat turns and quizzes.
"""

import math
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from openalpha.engines.mastery.summary import ConceptProgress


class ConceptResponse(BaseModel):
    id: str
    name: str
    description: str
    grade_level: int
    prerequisites: List[str]


class ConceptListResponse(BaseModel):
    subject_id: str
    subject_name: str
    grade_level: int
    concepts: List[ConceptProgress]


class NextConceptResponse(BaseModel):
    subject_id: str
    # None once the grade-appropriate curriculum is exhausted
    concept: Optional[ConceptResponse] = None


class ChatMessage(BaseModel):
    role: str
    content: str


class TutorChatRequest(BaseModel):
    """Student message to the tutor, scoped to one concept."""

    subject: str = Field(..., min_length=1, max_length=50)
    concept_id: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=4000)
    session_id: Optional[uuid.UUID] = None


class ChatResponse(BaseModel):
    session_id: uuid.UUID
    reply: str
    messages: List[ChatMessage]


class TranscriptResponse(BaseModel):
    session_id: uuid.UUID
    session_type: str
    subject: Optional[str] = None
    concept_id: Optional[str] = None
    messages: List[ChatMessage]


class QuizRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=50)
    concept_id: str = Field(..., min_length=1, max_length=100)


class QuizQuestionResponse(BaseModel):
    question: str
    options: List[str]
    correct_answer: str
    explanation: str = ""


class QuizResponse(BaseModel):
    subject: str
    concept_id: str
    questions: List[QuizQuestionResponse]


class QuizSubmitRequest(BaseModel):
    """Quiz result; ``score`` is a percentage."""

    subject: str = Field(..., min_length=1, max_length=50)
    concept_id: str = Field(..., min_length=1, max_length=100)
    score: int = Field(..., ge=0, le=100)
    total_questions: Optional[int] = Field(None, ge=1)
    correct_answers: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def score_matches_answers(self) -> "QuizSubmitRequest":
        """When both counts are sent, ``score`` must be their percentage, rounded either way."""
        if self.total_questions is None or self.correct_answers is None:
            return self
        if self.correct_answers > self.total_questions:
            raise ValueError("correct_answers cannot exceed total_questions")
        percent = self.correct_answers * 100 / self.total_questions
        if not math.floor(percent) <= self.score <= math.ceil(percent):
            raise ValueError(
                f"score {self.score} does not match {self.correct_answers}/{self.total_questions} correct"
            )
        return self


class QuizSubmitResponse(BaseModel):
    mastery_score: int
    passed: bool
    attempts: int
    message: str
