"""
Unit tests for the Generation Adapter and the LiteLLM backend (LLM mocked).
"""

import json
from types import SimpleNamespace
from unittest import mock

import pytest

from episode_studio.agents import create_summary_agent
from episode_studio.models import GeneratedEpisode, EpisodeSummary
from episode_studio.services.errors import SchemaValidationError
from episode_studio.services.generation import GenerationAdapter, LiteLLMBackend
from episode_studio.services.llm_router import LLMRouter

from conftest import FakeBackend, episode_json


class TestGenerationAdapter:

    async def test_returns_validated_model(self):
        backend = FakeBackend(responses={"episode_generator": episode_json("Chapter one")})
        adapter = GenerationAdapter(backend)

        result = await adapter.generate(
            [{"role": "user", "content": "write"}], GeneratedEpisode, agent_name="episode_generator"
        )

        assert isinstance(result, GeneratedEpisode)
        assert result.content == "Chapter one"

    async def test_schema_appended_to_system_message(self):
        backend = FakeBackend(responses={"summary": json.dumps({"summary": "short"})})
        adapter = GenerationAdapter(backend)

        await adapter.run_agent(create_summary_agent(), "summarize this", EpisodeSummary)

        messages = backend.calls[0]["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]
        assert "JSON Schema" in messages[0]["content"]
        assert '"summary"' in messages[0]["content"]
        assert messages[1]["content"] == "summarize this"

    async def test_system_message_inserted_when_missing(self):
        backend = FakeBackend(responses={"episode_generator": episode_json("x")})
        adapter = GenerationAdapter(backend)

        await adapter.generate([{"role": "user", "content": "write"}], GeneratedEpisode, "episode_generator")

        messages = backend.calls[0]["messages"]
        assert messages[0]["role"] == "system"
        assert messages[1] == {"role": "user", "content": "write"}

    async def test_caller_messages_not_mutated(self):
        backend = FakeBackend(responses={"episode_generator": episode_json("x")})
        adapter = GenerationAdapter(backend)
        original = [{"role": "system", "content": "be brief"}, {"role": "user", "content": "write"}]

        await adapter.generate(original, GeneratedEpisode, "episode_generator")

        assert original[0]["content"] == "be brief"

    async def test_schema_failure_raises_without_retry(self):
        backend = FakeBackend(responses={"episode_generator": ['{"wrong": 1}', episode_json("never used")]})
        adapter = GenerationAdapter(backend)

        with pytest.raises(SchemaValidationError):
            await adapter.generate([{"role": "user", "content": "write"}], GeneratedEpisode, "episode_generator")

        assert len(backend.calls) == 1

    async def test_backend_error_propagates(self):
        backend = mock.AsyncMock()
        backend.complete.side_effect = ConnectionError("backend down")
        adapter = GenerationAdapter(backend)

        with pytest.raises(ConnectionError):
            await adapter.generate([{"role": "user", "content": "write"}], GeneratedEpisode, "episode_generator")


class TestLiteLLMBackend:

    async def test_uses_router_kwargs_and_json_mode(self):
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"content": "x"}'))],
            usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5),
        )
        backend = LiteLLMBackend(router=LLMRouter())

        with mock.patch("episode_studio.services.generation.litellm.acompletion",
                        new=mock.AsyncMock(return_value=response)) as acompletion:
            text = await backend.complete([{"role": "user", "content": "hi"}], agent_name="character_evaluator")

        assert text == '{"content": "x"}'
        kwargs = acompletion.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["timeout"] == 120
        assert kwargs["temperature"] == 0.4
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    async def test_errors_propagate(self):
        backend = LiteLLMBackend(router=LLMRouter())

        with mock.patch("episode_studio.services.generation.litellm.acompletion",
                        new=mock.AsyncMock(side_effect=TimeoutError("slow"))):
            with pytest.raises(TimeoutError):
                await backend.complete([{"role": "user", "content": "hi"}], agent_name="summary")
