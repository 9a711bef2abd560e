"""Configuration package for Episode Studio"""

from .settings import Settings, get_settings
from .limits import (
    EVALUATION_TEXT_MAX_LENGTH,
    HIGHLIGHTS_MAX_LENGTH,
    IMPROVEMENTS_MAX_LENGTH,
    CHARACTER_VOICE_MAX_LENGTH,
    IMPORTANCE_ASSESSMENT_MAX_LENGTH,
    IMPROVEMENTS_REQUIRED_BELOW,
    LOW_BAND_UPPER,
    HIGH_BAND_LOWER,
)

__all__ = [
    "Settings",
    "get_settings",
    "EVALUATION_TEXT_MAX_LENGTH",
    "HIGHLIGHTS_MAX_LENGTH",
    "IMPROVEMENTS_MAX_LENGTH",
    "CHARACTER_VOICE_MAX_LENGTH",
    "IMPORTANCE_ASSESSMENT_MAX_LENGTH",
    "IMPROVEMENTS_REQUIRED_BELOW",
    "LOW_BAND_UPPER",
    "HIGH_BAND_LOWER",
]
