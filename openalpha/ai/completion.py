"""
Completion service - the language-model black box behind tutor, coach and quiz.

``complete(system_prompt, transcript) -> text``. Built once at startup by
``build_completion_service`` and shared through app.state, so tests can hand
create_app a fake instead.
"""

import asyncio
import json
import re
from typing import List, Optional, Protocol, Sequence

from openai import AsyncOpenAI, OpenAIError

from openalpha.config import Settings
from openalpha.kernel.errors import CompletionError
from openalpha.logging_config import get_logger

logger = get_logger(__name__)

EMPTY_REPLY_FALLBACK = (
    "I apologize, but I had trouble generating a response. Please try again."
)
COMPLETION_FAILED = "The tutor is unavailable right now. Please try again."


class CompletionService(Protocol):
    """Anything that turns a system prompt plus transcript into a reply."""

    model_name: str

    async def complete(
        self,
        system_prompt: str,
        transcript: Sequence[dict],
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        ...


def build_messages(system_prompt: str, transcript: Sequence[dict]) -> List[dict]:
    """System prompt first, then the conversation in order."""
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": m["role"], "content": m["content"]} for m in transcript)
    return messages


class OpenAICompletionService:
    """Chat completions over the OpenAI API (or any compatible base URL)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model_name = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        # Retries are the caller's decision; the error is surfaced as retryable
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or None,
            max_retries=0,
        )

    async def complete(
        self,
        system_prompt: str,
        transcript: Sequence[dict],
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model_name,
                    messages=build_messages(system_prompt, transcript),
                    max_tokens=max_tokens or self.max_tokens,
                    temperature=self.temperature if temperature is None else temperature,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Completion timed out",
                extra={"model": self.model_name, "timeout_s": self.timeout},
            )
            raise CompletionError(COMPLETION_FAILED, code="completion_timeout") from exc
        except OpenAIError as exc:
            logger.warning("Completion failed: %s", exc, extra={"model": self.model_name})
            raise CompletionError(COMPLETION_FAILED, code="completion_failed") from exc

        content = ""
        if response.choices:
            content = (response.choices[0].message.content or "").strip()
        return content or EMPTY_REPLY_FALLBACK


# ── Stub (no API key configured) ──────────────────────────────────────────

_STUB_RESPONSES = {
    "help": (
        "Let's take it one step at a time. Which part feels tricky right now?"
    ),
    "example": (
        "Sure! Here's one to try together. Tell me what you think the first step is."
    ),
    "child": (
        "A great way to help is to ask your child to teach you what they learned today."
    ),
}

_DEFAULT_STUB = (
    "Good question! What do you already know about this? "
    "Tell me and we'll build from there."
)

_QUIZ_REQUEST = re.compile(r"Generate (\d+) multiple-choice quiz questions")


def _stub_quiz(count: int) -> str:
    questions = [
        {
            "question": f"Practice question {i + 1}: which option is correct?",
            "options": ["A) This one", "B) Not this", "C) Nor this", "D) None of these"],
            "correctAnswer": "A",
            "explanation": "Option A is the correct answer in practice mode.",
        }
        for i in range(count)
    ]
    return json.dumps({"questions": questions})


class StubCompletionService:
    """Canned replies for development without a language-model key."""

    model_name = "stub"

    async def complete(
        self,
        system_prompt: str,
        transcript: Sequence[dict],
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        last = transcript[-1]["content"] if transcript else ""
        quiz = _QUIZ_REQUEST.search(last)
        if quiz:
            return _stub_quiz(int(quiz.group(1)))

        lowered = last.lower()
        for keyword, reply in _STUB_RESPONSES.items():
            if keyword in lowered:
                return reply
        return _DEFAULT_STUB


def build_completion_service(settings: Settings) -> CompletionService:
    """Pick the real backend when a key is configured, else the stub."""
    if not settings.llm_configured:
        logger.warning("No language-model key configured; using stub completions")
        return StubCompletionService()
    return OpenAICompletionService(
        api_key=settings.openai_api_key.strip(),
        model=settings.llm_model,
        base_url=settings.llm_base_url or None,
        timeout=settings.llm_timeout_seconds,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )
