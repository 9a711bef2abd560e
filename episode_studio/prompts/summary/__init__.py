"""Summary prompts"""

from .summarize_episode import get_summarize_episode_prompt

__all__ = ["get_summarize_episode_prompt"]
