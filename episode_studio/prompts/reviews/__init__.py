"""
Character Panel Review Prompts

Every character in the cast reviews the draft in parallel, each through the
same prompt parameterized by their own persona.
"""

from .evaluate_episode import (
    get_character_evaluator_instructions,
    get_evaluate_episode_prompt,
)

__all__ = [
    "get_character_evaluator_instructions",
    "get_evaluate_episode_prompt",
]
