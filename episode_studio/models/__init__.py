"""
Models package - Pydantic data models for Episode Studio

Re-exports all models for cleaner imports:
    from episode_studio.models import StoryContext, EpisodeContext, CharacterProfile
"""

from episode_studio.models.models import *
