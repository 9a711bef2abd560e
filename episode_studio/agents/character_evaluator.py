"""
Character Evaluator Agent - one per character on the panel

Each evaluation call gets its own CharacterPersona, built by value from the
character profile, so concurrent evaluations never share configuration.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from episode_studio.agents.base import AgentProfile
from episode_studio.models import CharacterProfile, Relationship
from episode_studio.prompts.reviews import get_character_evaluator_instructions


AGENT_NAME = "character_evaluator"


@dataclass(frozen=True)
class CharacterPersona:
    """Every profile attribute the evaluator is parameterized by"""

    name: str
    age: str
    is_protagonist: bool = False
    gender: Optional[str] = None
    role: Optional[str] = None
    importance: Optional[str] = None
    description: Optional[str] = None
    personality: Optional[str] = None
    appearance: Optional[str] = None
    motivation: Optional[str] = None
    backstory: Optional[str] = None
    speech_style: Optional[str] = None
    typical_actions: Tuple[str, ...] = ()
    relationships: Tuple[Relationship, ...] = ()

    @classmethod
    def from_profile(cls, profile: CharacterProfile) -> "CharacterPersona":
        return cls(
            name=profile.name,
            age=profile.age,
            is_protagonist=profile.is_protagonist,
            gender=profile.gender,
            role=profile.role,
            importance=profile.importance,
            description=profile.description,
            personality=profile.personality,
            appearance=profile.appearance,
            motivation=profile.motivation,
            backstory=profile.backstory,
            speech_style=profile.speech_style,
            typical_actions=tuple(profile.typical_actions),
            relationships=tuple(profile.relationships),
        )


def create_character_evaluator_agent(persona: CharacterPersona) -> AgentProfile:
    """
    Create the evaluator for one character.

    Args:
        persona: Character configuration for this call

    Returns:
        AgentProfile whose instructions speak as the character
    """
    return AgentProfile(
        name=AGENT_NAME,
        display_name=persona.name,
        instructions=get_character_evaluator_instructions(persona),
    )
