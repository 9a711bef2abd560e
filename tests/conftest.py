"""
Shared fixtures for Episode Studio tests.

FakeBackend stands in for the LLM: it returns scripted JSON per agent and,
for the character panel, per character (read from the evaluator's system
instructions). No test makes a network call.
"""

import asyncio
import json
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from episode_studio.config import Settings
from episode_studio.services.generation import GenerationAdapter
from episode_studio.services.llm_router import reset_llm_router
from episode_studio.services.logger import init_logger

_PERSONA_NAME = re.compile(r'^You are "(.+?)", evaluating')


def make_evaluation(
    score: float,
    improvements: Optional[str] = None,
    highlights: str = "The pacing felt right",
) -> Dict[str, Any]:
    """Evaluator wire payload (camelCase) with a breakdown consistent with score."""
    sub_score = min(5, max(1, int(round(score))))
    payload = {
        "totalScore": score,
        "breakdown": {
            "characterAccuracy": sub_score,
            "motivationConsistency": sub_score,
            "roleAppropriateness": sub_score,
            "relationshipDepiction": sub_score,
            "emotionalAuthenticity": sub_score,
        },
        "evaluation": "An honest read of the episode",
        "highlights": highlights,
        "characterVoice": "I would have said it differently",
        "importanceAssessment": "About right",
    }
    if improvements is not None:
        payload["improvements"] = improvements
    return payload


class FakeBackend:
    """
    Scripted GenerationBackend.

    Args:
        responses: agent_name -> raw text, or a list of raw texts consumed in order
        evaluations: character name -> evaluator payload dict (or raw text)
        delays: character name -> seconds to sleep before answering
        failures: character name -> exception to raise
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        evaluations: Optional[Dict[str, Any]] = None,
        delays: Optional[Dict[str, float]] = None,
        failures: Optional[Dict[str, Exception]] = None,
    ):
        self.responses = {k: list(v) if isinstance(v, list) else v for k, v in (responses or {}).items()}
        self.evaluations = evaluations or {}
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls: List[Dict[str, Any]] = []
        self.cancelled: List[str] = []

    def calls_for(self, agent_name: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["agent_name"] == agent_name]

    async def complete(self, messages, agent_name):
        self.calls.append({"agent_name": agent_name, "messages": messages})

        if agent_name == "character_evaluator":
            return await self._evaluate(messages)

        scripted = self.responses[agent_name]
        if isinstance(scripted, list):
            return scripted.pop(0)
        return scripted

    async def _evaluate(self, messages):
        match = _PERSONA_NAME.match(messages[0]["content"])
        name = match.group(1)
        try:
            if name in self.delays:
                await asyncio.sleep(self.delays[name])
        except asyncio.CancelledError:
            self.cancelled.append(name)
            raise
        if name in self.failures:
            raise self.failures[name]
        payload = self.evaluations[name]
        return payload if isinstance(payload, str) else json.dumps(payload)


def episode_json(content: str) -> str:
    return json.dumps({"content": content})


@pytest.fixture(autouse=True)
def _isolated_singletons():
    """Fresh router and a file-less studio logger for every test."""
    reset_llm_router()
    init_logger(settings=None)
    yield
    reset_llm_router()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        output_language="Japanese",
        previous_episode_summary_threshold=2000,
        bearer_key=None,
    )


@pytest.fixture
def story():
    return {"title": "T", "background": "B", "summary": "S"}


@pytest.fixture
def episode():
    return {"title": "E1", "additionalElements": "betrayal", "continuityType": "independent"}


@pytest.fixture
def ann():
    return {"name": "Ann", "age": "20", "description": "hero", "isProtagonist": True}


@pytest.fixture
def bo():
    return {"name": "Bo", "age": 31, "role": "rival"}


@pytest.fixture
def workflow_input(story, episode, ann, bo):
    return {
        "story": story,
        "episode": episode,
        "characters": [ann, bo],
        "recipientId": "user-1",
    }


@pytest.fixture
def make_adapter():
    def _make(backend):
        return GenerationAdapter(backend)
    return _make
