"""
Unit tests for the Pydantic models - evaluator contract and input records.
"""

import pytest
from pydantic import ValidationError

from episode_studio.models import (
    CharacterProfile,
    EpisodeContext,
    EvaluationResponse,
    CharacterEvaluation,
    EpisodeWorkflowInput,
    DraftEnvelope,
)

from conftest import make_evaluation


class TestEvaluationResponse:
    """totalScore range and precision, conditional improvements, field limits"""

    def test_valid_payload(self):
        response = EvaluationResponse.model_validate(make_evaluation(4.2))
        assert response.total_score == 4.2
        assert response.breakdown.character_accuracy == 4
        assert response.improvements is None

    def test_score_exactly_3_5_without_improvements_is_valid(self):
        """The improvements requirement is strictly below 3.5."""
        response = EvaluationResponse.model_validate(make_evaluation(3.5))
        assert response.improvements is None

    def test_score_below_3_5_requires_improvements(self):
        with pytest.raises(ValidationError, match="improvements"):
            EvaluationResponse.model_validate(make_evaluation(3.4))

    def test_score_below_3_5_rejects_empty_improvements(self):
        with pytest.raises(ValidationError):
            EvaluationResponse.model_validate(make_evaluation(2.0, improvements=""))

    def test_score_below_3_5_with_improvements(self):
        response = EvaluationResponse.model_validate(make_evaluation(3.0, improvements="add conflict"))
        assert response.improvements == "add conflict"

    def test_two_decimal_places_rejected(self):
        with pytest.raises(ValidationError, match="one decimal"):
            EvaluationResponse.model_validate(make_evaluation(4.25))

    def test_near_threshold_precision_rejected(self):
        with pytest.raises(ValidationError):
            EvaluationResponse.model_validate(make_evaluation(3.4999, improvements="x"))

    def test_integer_score_accepted(self):
        payload = make_evaluation(4)
        response = EvaluationResponse.model_validate(payload)
        assert response.total_score == 4.0

    @pytest.mark.parametrize("score", [0.9, 5.1])
    def test_score_out_of_range(self, score):
        with pytest.raises(ValidationError):
            EvaluationResponse.model_validate(make_evaluation(score, improvements="x"))

    def test_breakdown_must_be_in_range(self):
        payload = make_evaluation(4.0)
        payload["breakdown"]["emotionalAuthenticity"] = 6
        with pytest.raises(ValidationError):
            EvaluationResponse.model_validate(payload)

    def test_highlights_length_limit(self):
        with pytest.raises(ValidationError):
            EvaluationResponse.model_validate(make_evaluation(4.0, highlights="x" * 51))

    def test_importance_assessment_length_limit(self):
        payload = make_evaluation(4.0)
        payload["importanceAssessment"] = "x" * 31
        with pytest.raises(ValidationError):
            EvaluationResponse.model_validate(payload)

    def test_breakdown_mean(self):
        payload = make_evaluation(4.0)
        payload["breakdown"]["characterAccuracy"] = 5
        response = EvaluationResponse.model_validate(payload)
        assert response.breakdown.mean() == pytest.approx(4.2)

    def test_serializes_camel_case(self):
        evaluation = CharacterEvaluation(character_name="Ann", **EvaluationResponse.model_validate(
            make_evaluation(4.0)).model_dump())
        dumped = evaluation.model_dump(by_alias=True)
        assert dumped["characterName"] == "Ann"
        assert dumped["totalScore"] == 4.0
        assert "characterVoice" in dumped


class TestInputRecords:

    def test_character_age_accepts_int(self):
        assert CharacterProfile(name="Bo", age=31).age == "31"

    def test_character_defaults(self):
        character = CharacterProfile.model_validate({"name": "Ann", "age": "20"})
        assert character.is_protagonist is False
        assert character.typical_actions == []
        assert character.relationships == []

    def test_character_null_lists_become_empty(self):
        character = CharacterProfile.model_validate(
            {"name": "Ann", "age": "20", "typicalActions": None, "relationships": None}
        )
        assert character.typical_actions == []

    def test_character_is_immutable(self):
        character = CharacterProfile(name="Ann", age="20")
        with pytest.raises(ValidationError):
            character.name = "Bo"

    def test_episode_rejects_unknown_continuity(self):
        with pytest.raises(ValidationError):
            EpisodeContext(title="E1", additional_elements="x", continuity_type="flashback")

    def test_episode_summary_swap_via_copy(self):
        episode = EpisodeContext(
            title="E1", additional_elements="x", continuity_type="sequential",
            previous_episode_content="long text",
        )
        swapped = episode.model_copy(update={"previous_episode_content": "short"})
        assert swapped.previous_episode_content == "short"
        assert episode.previous_episode_content == "long text"

    def test_workflow_input_requires_recipient(self, story, episode, ann):
        with pytest.raises(ValidationError):
            EpisodeWorkflowInput.model_validate({"story": story, "episode": episode, "characters": [ann]})

    def test_envelope_ignores_extra_fields(self, ann):
        envelope = DraftEnvelope.model_validate(
            {"content": "text", "characters": [ann], "recipientId": "u1", "isRevised": True}
        )
        assert envelope.content == "text"
        assert not hasattr(envelope, "is_revised")

    def test_envelope_rejects_missing_content(self, ann):
        with pytest.raises(ValidationError):
            DraftEnvelope.model_validate({"characters": [ann], "recipientId": "u1"})
