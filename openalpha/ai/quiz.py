"""
Quiz generation - asks the completion service for multiple-choice questions
and parses whatever JSON it returns.
"""

import json
from typing import List

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from openalpha.ai.completion import CompletionService
from openalpha.ai.prompts import QUIZ_SYSTEM_PROMPT, quiz_prompt
from openalpha.kernel.errors import CompletionError
from openalpha.logging_config import get_logger

logger = get_logger(__name__)

QUIZ_MAX_TOKENS = 2048
QUIZ_TEMPERATURE = 0.8
ANSWER_LETTERS = ("A", "B", "C", "D")


class QuizQuestion(BaseModel):
    """One multiple-choice question with four options."""

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correct_answer: str = Field(..., alias="correctAnswer")
    explanation: str = ""

    @field_validator("correct_answer")
    @classmethod
    def answer_is_letter(cls, v: str) -> str:
        letter = v.strip().upper()[:1]
        if letter not in ANSWER_LETTERS:
            raise ValueError("correct answer must be one of A-D")
        return letter


class QuizPayload(BaseModel):
    questions: List[QuizQuestion]


def extract_json_object(raw: str) -> str:
    """
    Pull the JSON object out of a model reply.

    Replies come back bare, inside Markdown fences, or with prose around
    them; the outermost {...} span is taken in every case.
    """
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[-1].rsplit("```", 1)[0]
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("no JSON object in reply")
    return text[start:end + 1]


def parse_quiz(raw: str, count: int) -> List[QuizQuestion]:
    """Validate a raw reply into at most ``count`` questions."""
    try:
        payload = QuizPayload.model_validate(json.loads(extract_json_object(raw)))
    except (ValueError, pydantic.ValidationError) as exc:
        logger.warning("Unusable quiz reply: %s", exc)
        raise CompletionError(
            "Could not generate a quiz right now. Please try again.",
            code="quiz_unparseable",
        ) from exc

    if not payload.questions:
        raise CompletionError(
            "Could not generate a quiz right now. Please try again.",
            code="quiz_empty",
        )
    return payload.questions[:count]


async def generate_quiz(
    completion: CompletionService,
    subject_name: str,
    concept_name: str,
    grade_level: int,
    count: int = 5,
) -> List[QuizQuestion]:
    raw = await completion.complete(
        QUIZ_SYSTEM_PROMPT,
        [{"role": "user", "content": quiz_prompt(subject_name, concept_name, grade_level, count)}],
        max_tokens=QUIZ_MAX_TOKENS,
        temperature=QUIZ_TEMPERATURE,
    )
    return parse_quiz(raw, count)
