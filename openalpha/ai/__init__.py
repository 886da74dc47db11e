"""
Language-model integration.

Every call goes through a CompletionService built once at startup; failures
surface as retryable CompletionError and never write partial state.
"""

from openalpha.ai.completion import (
    CompletionService,
    OpenAICompletionService,
    StubCompletionService,
    build_completion_service,
)
from openalpha.ai.quiz import QuizQuestion, generate_quiz, parse_quiz

__all__ = [
    "CompletionService",
    "OpenAICompletionService",
    "StubCompletionService",
    "build_completion_service",
    "QuizQuestion",
    "generate_quiz",
    "parse_quiz",
]
