"""
Unit tests for the episode writing prompt - pure string construction.

Run with: python -m pytest tests/test_prompt_composer.py -v
"""

import pytest

from episode_studio.prompts.writing import (
    compose_episode_prompt,
    get_continuity_phrase,
    get_revise_episode_prompt,
    CONTINUITY_PHRASES,
    PROTAGONIST_MARKER,
)
from episode_studio.services.errors import InputValidationError


class TestContinuityPhrase:

    def test_known_types_have_phrases(self):
        for continuity_type in ["sequential", "independent", "parallel"]:
            assert get_continuity_phrase(continuity_type) == CONTINUITY_PHRASES[continuity_type]

    def test_unknown_type_is_empty(self):
        assert get_continuity_phrase("flashback") == ""
        assert get_continuity_phrase(None) == ""


class TestComposeEpisodePrompt:

    def test_basic_scenario(self, story, episode, ann):
        """Story, episode, key element, continuity marker and protagonist block all present."""
        prompt = compose_episode_prompt(story, episode, [ann])

        assert "T" in prompt
        assert "E1" in prompt
        assert "betrayal" in prompt
        assert CONTINUITY_PHRASES["independent"] in prompt
        assert f"1. **Ann** {PROTAGONIST_MARKER}" in prompt

    def test_deterministic(self, story, episode, ann, bo):
        assert compose_episode_prompt(story, episode, [ann, bo]) == \
            compose_episode_prompt(story, episode, [ann, bo])

    def test_absent_optional_fields_produce_no_line(self, story, episode, ann):
        prompt = compose_episode_prompt(story, episode, [ann])

        assert "None" not in prompt
        assert "Gender:" not in prompt
        assert "Genre:" not in prompt
        assert "Episode Number:" not in prompt
        assert "- Description: hero" in prompt

    def test_present_optional_fields_rendered(self, episode, ann):
        story = {
            "title": "T", "background": "B", "summary": "S",
            "genre": "Fantasy", "theme": "Trust", "worldSettings": "Floating islands",
        }
        character = dict(ann, personality="stubborn", typicalActions=["hums", "paces"])
        prompt = compose_episode_prompt(story, dict(episode, episodeNumber=3), [character])

        assert "Genre: Fantasy" in prompt
        assert "Theme: Trust" in prompt
        assert "World Settings: Floating islands" in prompt
        assert "Episode Number: 3" in prompt
        assert "- Personality: stubborn" in prompt
        assert "- Typical Actions: hums, paces" in prompt

    def test_non_protagonist_has_no_marker(self, story, episode, bo):
        prompt = compose_episode_prompt(story, episode, [bo])
        assert "1. **Bo**\n" in prompt
        assert "- Age: 31" in prompt

    def test_no_relationships_section_without_relationships(self, story, episode, ann, bo):
        prompt = compose_episode_prompt(story, episode, [ann, bo])
        assert "## Relationships" not in prompt

    def test_single_relationship_single_line(self, story, episode, ann, bo):
        ann = dict(ann, relationships=[
            {"targetCharacterName": "Bo", "relationshipType": "rival", "description": "since school"}
        ])
        prompt = compose_episode_prompt(story, episode, [ann, bo])

        assert "## Relationships" in prompt
        relationship_lines = [l for l in prompt.splitlines() if "→" in l]
        assert relationship_lines == ["- Ann → Bo: rival (since school)"]

    def test_sequential_continuity_line(self, story, ann):
        episode = {"title": "E1", "additionalElements": "x", "continuityType": "sequential"}
        prompt = compose_episode_prompt(story, episode, [ann])
        assert f"Continuity: {CONTINUITY_PHRASES['sequential']}" in prompt

    def test_section_order(self, story, ann, bo):
        episode = {
            "title": "E2", "additionalElements": "reunion", "continuityType": "sequential",
            "previousEpisodeContent": "They parted ways.",
        }
        ann = dict(ann, relationships=[{"targetCharacterName": "Bo", "relationshipType": "friend"}])
        prompt = compose_episode_prompt(story, episode, [ann, bo])

        headings = ["# Episode Writing Brief", "## Story", "## Episode", "## Previous Episode",
                    "## Characters", "## Relationships", "## Writing Guidelines"]
        positions = [prompt.index(h) for h in headings]
        assert positions == sorted(positions)
        assert "They parted ways." in prompt

    def test_previous_episode_section_only_when_present(self, story, episode, ann):
        prompt = compose_episode_prompt(story, episode, [ann])
        assert "## Previous Episode" not in prompt

    def test_output_language_in_guidelines(self, story, episode, ann):
        prompt = compose_episode_prompt(story, episode, [ann], output_language="English")
        assert prompt.rstrip().endswith("Write the episode in English.")

    def test_missing_required_field_raises(self, episode, ann):
        with pytest.raises(InputValidationError) as exc_info:
            compose_episode_prompt({"title": "T", "summary": "S"}, episode, [ann])
        assert "story" in str(exc_info.value)
        assert exc_info.value.errors

    def test_missing_character_name_raises(self, story, episode):
        with pytest.raises(InputValidationError):
            compose_episode_prompt(story, episode, [{"age": "20"}])

    def test_empty_cast_still_composes(self, story, episode):
        prompt = compose_episode_prompt(story, episode, [])
        assert "## Characters" in prompt


class TestRevisePrompt:

    def test_contains_draft_and_feedback(self):
        prompt = get_revise_episode_prompt("DRAFT", "### Priority Improvements\n- Ann", "Japanese")
        assert "DRAFT" in prompt
        assert "### Priority Improvements" in prompt
        assert "Japanese" in prompt
