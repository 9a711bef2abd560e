"""
Writing Prompts Package

- write_episode: composes the episode brief from story, episode and cast
- revise_episode: single revision pass from character feedback
"""

from .write_episode import (
    compose_episode_prompt,
    get_continuity_phrase,
    CONTINUITY_PHRASES,
    PROTAGONIST_MARKER,
)
from .revise_episode import get_revise_episode_prompt

__all__ = [
    "compose_episode_prompt",
    "get_continuity_phrase",
    "CONTINUITY_PHRASES",
    "PROTAGONIST_MARKER",
    "get_revise_episode_prompt",
]
