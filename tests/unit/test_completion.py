"""Unit tests for the completion backends and prompt templates."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from openai import OpenAIError

from openalpha.ai.completion import (
    EMPTY_REPLY_FALLBACK,
    OpenAICompletionService,
    StubCompletionService,
    build_completion_service,
    build_messages,
)
from openalpha.ai.prompts import coach_system_prompt, grade_label, tutor_system_prompt
from openalpha.config import Settings
from openalpha.kernel.errors import CompletionError
from openalpha.pedagogy.catalog import Concept


def _client(create) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _service(create, timeout: float = 5.0) -> OpenAICompletionService:
    return OpenAICompletionService(
        api_key="sk-test",
        model="gpt-4o-mini",
        timeout=timeout,
        client=_client(create),
    )


class TestOpenAICompletionService:

    async def test_sends_system_prompt_then_transcript(self):
        create = AsyncMock(return_value=_response("  Let's count!  "))
        service = _service(create)

        reply = await service.complete("be kind", [{"role": "user", "content": "hi"}])

        assert reply == "Let's count!"
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [
            {"role": "system", "content": "be kind"},
            {"role": "user", "content": "hi"},
        ]
        assert kwargs["max_tokens"] == 1024

    async def test_per_call_overrides(self):
        create = AsyncMock(return_value=_response("ok"))
        await _service(create).complete("s", [], max_tokens=2048, temperature=0.0)
        assert create.await_args.kwargs["max_tokens"] == 2048
        assert create.await_args.kwargs["temperature"] == 0.0

    async def test_empty_content_falls_back(self):
        create = AsyncMock(return_value=_response(None))
        assert await _service(create).complete("s", []) == EMPTY_REPLY_FALLBACK

    async def test_api_error_is_retryable(self):
        create = AsyncMock(side_effect=OpenAIError("boom"))
        with pytest.raises(CompletionError) as exc_info:
            await _service(create).complete("s", [])
        assert exc_info.value.code == "completion_failed"
        assert exc_info.value.retryable is True

    async def test_timeout(self):
        async def slow(**kwargs):
            await asyncio.sleep(1)
            return _response("too late")

        with pytest.raises(CompletionError) as exc_info:
            await _service(slow, timeout=0.01).complete("s", [])
        assert exc_info.value.code == "completion_timeout"


class TestStubAndFactory:

    async def test_stub_keyword_reply(self):
        reply = await StubCompletionService().complete("s", [{"role": "user", "content": "Can you help?"}])
        assert "step" in reply

    def test_factory_uses_stub_without_key(self):
        assert isinstance(build_completion_service(Settings(openai_api_key="")), StubCompletionService)

    def test_factory_treats_placeholder_key_as_missing(self):
        settings = Settings(openai_api_key="sk-your-openai-api-key")
        assert isinstance(build_completion_service(settings), StubCompletionService)

    def test_factory_uses_openai_with_key(self):
        service = build_completion_service(Settings(openai_api_key="sk-live-123", llm_model="gpt-4o"))
        assert isinstance(service, OpenAICompletionService)
        assert service.model_name == "gpt-4o"

    def test_build_messages_drops_extra_keys(self):
        messages = build_messages("sys", [{"role": "user", "content": "x", "ts": 1}])
        assert messages[1] == {"role": "user", "content": "x"}


class TestPrompts:

    def test_kindergarten_label(self):
        assert grade_label(0) == "Kindergarten"
        assert grade_label(7) == "grade 7"

    def test_tutor_prompt_mentions_concept_and_history(self):
        concept = Concept(id="math-counting", name="Counting Numbers", description="Learn to count")
        prompt = tutor_system_prompt(0, "Mathematics", concept, "No prior progress")
        assert "Counting Numbers" in prompt
        assert "Kindergarten" in prompt
        assert "No prior progress" in prompt

    def test_coach_prompt_mentions_digest(self):
        prompt = coach_system_prompt(3, "Mathematics: Multiplication (60%)")
        assert "grade 3" in prompt
        assert "Multiplication (60%)" in prompt
