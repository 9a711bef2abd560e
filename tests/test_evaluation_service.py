"""
Tests for the character panel fan-out: concurrency, ordering and fail-fast.
"""

import asyncio
import logging
import time

import pytest

from episode_studio.agents.character_evaluator import CharacterPersona
from episode_studio.models import CharacterProfile, CharacterEvaluation
from episode_studio.services.errors import SchemaValidationError
from episode_studio.services.evaluation_service import EvaluationService
from episode_studio.services.generation import GenerationAdapter

from conftest import FakeBackend, make_evaluation


def _cast(*names):
    return [CharacterProfile(name=name, age="20") for name in names]


class TestEvaluateAll:

    async def test_one_evaluation_per_character_in_input_order(self):
        """Results follow cast order even when later characters answer first."""
        backend = FakeBackend(
            evaluations={
                "Ann": make_evaluation(4.0),
                "Bo": make_evaluation(4.5),
                "Cy": make_evaluation(5.0),
            },
            delays={"Ann": 0.06, "Bo": 0.03, "Cy": 0.0},
        )
        service = EvaluationService(GenerationAdapter(backend))

        evaluations = await service.evaluate_all("draft", _cast("Ann", "Bo", "Cy"))

        assert [e.character_name for e in evaluations] == ["Ann", "Bo", "Cy"]
        assert [e.total_score for e in evaluations] == [4.0, 4.5, 5.0]
        assert all(isinstance(e, CharacterEvaluation) for e in evaluations)

    async def test_calls_run_concurrently(self):
        backend = FakeBackend(
            evaluations={name: make_evaluation(4.5) for name in ["Ann", "Bo", "Cy"]},
            delays={"Ann": 0.2, "Bo": 0.2, "Cy": 0.2},
        )
        service = EvaluationService(GenerationAdapter(backend))

        start = time.monotonic()
        await service.evaluate_all("draft", _cast("Ann", "Bo", "Cy"))
        elapsed = time.monotonic() - start

        assert elapsed < 0.5, "three 0.2s evaluations should overlap"

    async def test_each_call_gets_its_own_persona(self):
        backend = FakeBackend(evaluations={"Ann": make_evaluation(4.5), "Bo": make_evaluation(4.5)})
        service = EvaluationService(GenerationAdapter(backend))

        await service.evaluate_all("the draft", _cast("Ann", "Bo"))

        system_prompts = [c["messages"][0]["content"] for c in backend.calls]
        assert system_prompts[0].startswith('You are "Ann"')
        assert system_prompts[1].startswith('You are "Bo"')
        assert all("the draft" in c["messages"][-1]["content"] for c in backend.calls)

    async def test_empty_cast_returns_empty_list(self):
        backend = FakeBackend()
        service = EvaluationService(GenerationAdapter(backend))

        assert await service.evaluate_all("draft", []) == []
        assert backend.calls == []

    async def test_first_failure_propagates_and_cancels_others(self):
        backend = FakeBackend(
            evaluations={"Ann": make_evaluation(4.5), "Cy": make_evaluation(4.5)},
            delays={"Ann": 5.0, "Cy": 5.0},
            failures={"Bo": RuntimeError("model unavailable")},
        )
        service = EvaluationService(GenerationAdapter(backend))

        with pytest.raises(RuntimeError, match="model unavailable"):
            await asyncio.wait_for(service.evaluate_all("draft", _cast("Ann", "Bo", "Cy")), timeout=2.0)

        assert sorted(backend.cancelled) == ["Ann", "Cy"]

    async def test_schema_failure_aborts_batch(self):
        backend = FakeBackend(evaluations={"Ann": make_evaluation(4.5), "Bo": '{"totalScore": 9}'})
        service = EvaluationService(GenerationAdapter(backend))

        with pytest.raises(SchemaValidationError):
            await service.evaluate_all("draft", _cast("Ann", "Bo"))

    async def test_total_score_trusted_as_reported(self, caplog):
        payload = make_evaluation(4.8)
        payload["breakdown"] = {key: 2 for key in payload["breakdown"]}
        backend = FakeBackend(evaluations={"Ann": payload})
        service = EvaluationService(GenerationAdapter(backend))

        with caplog.at_level(logging.WARNING, logger="episode_studio.services.evaluation_service"):
            evaluations = await service.evaluate_all("draft", _cast("Ann"))

        assert evaluations[0].total_score == 4.8
        assert "kept as reported" in caplog.text


class TestCharacterPersona:

    def test_from_profile_copies_every_field(self):
        profile = CharacterProfile.model_validate({
            "name": "Ann", "age": "20", "isProtagonist": True, "speechStyle": "blunt",
            "typicalActions": ["paces"],
            "relationships": [{"targetCharacterName": "Bo", "relationshipType": "rival"}],
        })
        persona = CharacterPersona.from_profile(profile)

        assert persona.name == "Ann"
        assert persona.is_protagonist is True
        assert persona.speech_style == "blunt"
        assert persona.typical_actions == ("paces",)
        assert persona.relationships[0].target_character_name == "Bo"

    def test_persona_is_frozen(self):
        persona = CharacterPersona(name="Ann", age="20")
        with pytest.raises(AttributeError):
            persona.name = "Bo"
