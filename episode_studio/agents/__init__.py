"""Agents package for Episode Studio"""

from .base import AgentProfile
from .episode_generator import create_episode_generator_agent
from .character_evaluator import CharacterPersona, create_character_evaluator_agent
from .summary import create_summary_agent

__all__ = [
    "AgentProfile",
    "create_episode_generator_agent",
    "CharacterPersona",
    "create_character_evaluator_agent",
    "create_summary_agent",
]
