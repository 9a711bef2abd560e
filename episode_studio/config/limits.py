"""
Centralized Validation Limits

Content length limits and scoring thresholds in one place.
Import these in the Pydantic models, the revision service and the
notification transports.
"""

# =============================================================================
# EVALUATION FIELD LIMITS (wire contract with the evaluator model)
# =============================================================================

EVALUATION_TEXT_MAX_LENGTH = 100
HIGHLIGHTS_MAX_LENGTH = 50
IMPROVEMENTS_MAX_LENGTH = 100
CHARACTER_VOICE_MAX_LENGTH = 50
IMPORTANCE_ASSESSMENT_MAX_LENGTH = 30

# Sub-score and total score range
SCORE_MIN = 1
SCORE_MAX = 5

# =============================================================================
# SCORING THRESHOLDS
# =============================================================================

# improvements is mandatory strictly below this total score
IMPROVEMENTS_REQUIRED_BELOW = 3.5

# Band boundaries: low < 4.0 <= mid < 4.5 <= high
LOW_BAND_UPPER = 4.0
HIGH_BAND_LOWER = 4.5

# =============================================================================
# NOTIFICATION PREVIEWS
# =============================================================================

PUSH_PREVIEW_LENGTH = 50
EMAIL_PREVIEW_LENGTH = 100
PREVIEW_ELLIPSIS = "..."

# LINE buttons template titles are capped at 40 characters
PUSH_TITLE_MAX_LENGTH = 40
