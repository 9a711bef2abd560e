"""
Pydantic data models for Episode Studio

Wire format is camelCase (matching the evaluator's JSON contract and the
workflow API); Python attributes are snake_case. Both spellings are accepted
on input.

FIELD LIMITS
============
When modifying these limits, also update the evaluator instructions in
episode_studio/prompts/reviews/evaluate_episode.py.

| Field                  | Min | Max | Model              |
|------------------------|-----|-----|--------------------|
| totalScore             | 1.0 | 5.0 | EvaluationResponse |
| breakdown.*            | 1   | 5   | EvaluationBreakdown|
| evaluation             | 1   | 100 | EvaluationResponse |
| highlights             | 1   | 50  | EvaluationResponse |
| improvements           | -   | 100 | EvaluationResponse |
| characterVoice         | 1   | 50  | EvaluationResponse |
| importanceAssessment   | 1   | 30  | EvaluationResponse |
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal, Union

from episode_studio.config.limits import (
    SCORE_MIN,
    SCORE_MAX,
    EVALUATION_TEXT_MAX_LENGTH,
    HIGHLIGHTS_MAX_LENGTH,
    IMPROVEMENTS_MAX_LENGTH,
    CHARACTER_VOICE_MAX_LENGTH,
    IMPORTANCE_ASSESSMENT_MAX_LENGTH,
    IMPROVEMENTS_REQUIRED_BELOW,
)


ContinuityType = Literal["sequential", "independent", "parallel"]
DeliveryChannel = Literal["push", "email"]


class CamelModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Story Inputs
# ============================================================================

class StoryContext(CamelModel):
    """Series-level context, immutable for a pipeline run"""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    background: str
    summary: str
    genre: Optional[str] = None
    theme: Optional[str] = None
    world_settings: Optional[str] = None


class EpisodeContext(CamelModel):
    """
    The episode being written.

    previous_episode_content is the only field that changes during a run:
    long prior-episode text is swapped for its summary before composition
    (use model_copy, the model itself is frozen).
    """
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    additional_elements: str = Field(..., description="Key element to emphasize in this episode")
    continuity_type: ContinuityType
    previous_episode_content: Optional[str] = None
    episode_number: Optional[int] = Field(None, ge=1)


class Relationship(CamelModel):
    model_config = ConfigDict(frozen=True)

    target_character_name: str = Field(..., min_length=1)
    relationship_type: str = Field(..., min_length=1)
    description: Optional[str] = None


class CharacterProfile(CamelModel):
    """A character appearing in the episode"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    age: str
    gender: Optional[str] = None
    role: Optional[str] = Field(None, description="Role in the story (protagonist, rival, mentor, etc.)")
    importance: Optional[str] = Field(None, description="Importance level (main, supporting, minor, etc.)")
    description: Optional[str] = None
    is_protagonist: bool = False
    personality: Optional[str] = None
    appearance: Optional[str] = None
    motivation: Optional[str] = None
    backstory: Optional[str] = None
    speech_style: Optional[str] = None
    typical_actions: List[str] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)

    @field_validator("age", mode="before")
    @classmethod
    def _age_as_text(cls, v: Union[str, int]) -> str:
        # Ages arrive as "20", 20 or "unknown"
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("typical_actions", "relationships", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


# ============================================================================
# Evaluation Contract
# ============================================================================

class EvaluationBreakdown(CamelModel):
    """Five integer sub-scores, 1-5"""

    character_accuracy: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    motivation_consistency: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    role_appropriateness: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    relationship_depiction: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    emotional_authenticity: int = Field(..., ge=SCORE_MIN, le=SCORE_MAX)

    def mean(self) -> float:
        scores = [
            self.character_accuracy,
            self.motivation_consistency,
            self.role_appropriateness,
            self.relationship_depiction,
            self.emotional_authenticity,
        ]
        return sum(scores) / len(scores)


class EvaluationResponse(CamelModel):
    """
    What the evaluator model must return for one character.

    total_score is produced by the model and is not recomputed from
    breakdown. improvements becomes mandatory strictly below 3.5.
    """

    total_score: float = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    breakdown: EvaluationBreakdown
    evaluation: str = Field(..., min_length=1, max_length=EVALUATION_TEXT_MAX_LENGTH)
    highlights: str = Field(..., min_length=1, max_length=HIGHLIGHTS_MAX_LENGTH)
    improvements: Optional[str] = Field(None, max_length=IMPROVEMENTS_MAX_LENGTH)
    character_voice: str = Field(..., min_length=1, max_length=CHARACTER_VOICE_MAX_LENGTH)
    importance_assessment: str = Field(..., min_length=1, max_length=IMPORTANCE_ASSESSMENT_MAX_LENGTH)

    @field_validator("total_score")
    @classmethod
    def _one_decimal_place(cls, v: float) -> float:
        if round(v, 1) != v:
            raise ValueError("totalScore must have at most one decimal place")
        return v

    @model_validator(mode="after")
    def _improvements_for_low_scores(self):
        if self.total_score < IMPROVEMENTS_REQUIRED_BELOW and not self.improvements:
            raise ValueError(
                f"improvements is required when totalScore is below {IMPROVEMENTS_REQUIRED_BELOW}"
            )
        return self


class CharacterEvaluation(EvaluationResponse):
    """An evaluation attributed to the character who gave it"""

    character_name: str = Field(..., min_length=1)


# ============================================================================
# Generation Outputs
# ============================================================================

class GeneratedEpisode(CamelModel):
    content: str = Field(..., min_length=1)


class EpisodeSummary(CamelModel):
    summary: str = Field(..., min_length=1)


# ============================================================================
# Pipeline Envelopes
# ============================================================================

class EpisodeWorkflowInput(CamelModel):
    """Input record for one workflow run"""

    story: StoryContext
    episode: EpisodeContext
    characters: List[CharacterProfile] = Field(default_factory=list)
    recipient_id: str = Field(..., min_length=1)


class DraftEnvelope(CamelModel):
    """Content plus the cast, threaded from compose to evaluate"""

    content: str = Field(..., min_length=1)
    characters: List[CharacterProfile]
    recipient_id: str = Field(..., min_length=1)


class ReviewedEnvelope(CamelModel):
    """Output of evaluate-and-revise"""

    content: str = Field(..., min_length=1)
    evaluations: List[CharacterEvaluation]
    is_revised: bool
    recipient_id: str = Field(..., min_length=1)


class DeliveryResult(CamelModel):
    success: bool
    channel: Optional[DeliveryChannel] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


class EpisodeWorkflowOutput(CamelModel):
    """Final workflow output"""

    content: str
    evaluations: List[CharacterEvaluation]
    is_revised: bool
    delivery: DeliveryResult
