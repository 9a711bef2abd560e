"""
Episode Writing Prompt

Builds the brief handed to the episode generator from the story, the episode
request and the cast. Pure string construction: same input, same prompt.

Section order is fixed:
    header → story → episode → previous episode (optional) → characters
    → relationships (optional) → writing guidelines
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from episode_studio.models import StoryContext, EpisodeContext, CharacterProfile
from episode_studio.services.errors import InputValidationError


CONTINUITY_PHRASES: Dict[str, str] = {
    "sequential": "A direct continuation of the previous episode",
    "independent": "A standalone episode that can be enjoyed on its own",
    "parallel": "An episode that runs in parallel with the previous one on the same timeline",
}

PROTAGONIST_MARKER = "[PROTAGONIST]"

# (attribute, label) pairs rendered only when present
_OPTIONAL_CHARACTER_FIELDS = [
    ("gender", "Gender"),
    ("role", "Role"),
    ("importance", "Importance"),
    ("description", "Description"),
    ("personality", "Personality"),
    ("appearance", "Appearance"),
    ("motivation", "Motivation"),
    ("backstory", "Backstory"),
    ("speech_style", "Speech Style"),
]


def get_continuity_phrase(continuity_type: Optional[str]) -> str:
    """Readable phrase for a continuity type, empty string when unknown."""
    return CONTINUITY_PHRASES.get(continuity_type or "", "")


def _coerce(model: type, value: Union[BaseModel, Dict[str, Any]], label: str):
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise InputValidationError(f"Invalid {label}: {e.error_count()} error(s)",
                                   e.errors(include_url=False, include_context=False)) from e


def _format_character(index: int, character: CharacterProfile) -> str:
    header = f"{index}. **{character.name}**"
    if character.is_protagonist:
        header += f" {PROTAGONIST_MARKER}"

    lines = [header, f"   - Age: {character.age}"]
    for attr, label in _OPTIONAL_CHARACTER_FIELDS:
        value = getattr(character, attr)
        if value:
            lines.append(f"   - {label}: {value}")
    if character.typical_actions:
        lines.append(f"   - Typical Actions: {', '.join(character.typical_actions)}")
    return "\n".join(lines)


def _relationship_lines(characters: Sequence[CharacterProfile]) -> List[str]:
    lines = []
    for character in characters:
        for rel in character.relationships:
            line = f"- {character.name} → {rel.target_character_name}: {rel.relationship_type}"
            if rel.description:
                line += f" ({rel.description})"
            lines.append(line)
    return lines


def compose_episode_prompt(
    story: Union[StoryContext, Dict[str, Any]],
    episode: Union[EpisodeContext, Dict[str, Any]],
    characters: Sequence[Union[CharacterProfile, Dict[str, Any]]],
    output_language: str = "Japanese"
) -> str:
    """
    Generate the episode writing prompt for the episode generator.

    Optional story, episode and character fields only produce a line when
    they have a value. The relationships section appears only when at least
    one character has a relationship.

    Args:
        story: Series context (model or raw dict)
        episode: Episode request (model or raw dict)
        characters: Cast for this episode (models or raw dicts)
        output_language: Language the episode must be written in

    Returns:
        Formatted prompt string

    Raises:
        InputValidationError: if any record is missing a required field
    """
    story = _coerce(StoryContext, story, "story")
    episode = _coerce(EpisodeContext, episode, "episode")
    cast = [_coerce(CharacterProfile, c, f"character #{i + 1}") for i, c in enumerate(characters)]

    parts = [
        "# Episode Writing Brief",
        "",
        "You are a professional story writer.",
        "Write the next episode of the series described below.",
        "",
        "## Story",
        f"Title: {story.title}",
        f"Background: {story.background}",
        f"Summary: {story.summary}",
    ]
    if story.genre:
        parts.append(f"Genre: {story.genre}")
    if story.theme:
        parts.append(f"Theme: {story.theme}")
    if story.world_settings:
        parts.append(f"World Settings: {story.world_settings}")

    parts.extend(["", "## Episode", f"Title: {episode.title}"])
    if episode.episode_number is not None:
        parts.append(f"Episode Number: {episode.episode_number}")
    continuity = get_continuity_phrase(episode.continuity_type)
    if continuity:
        parts.append(f"Continuity: {continuity}")
    parts.append(f"Key Element to Emphasize: {episode.additional_elements}")

    if episode.previous_episode_content:
        parts.extend(["", "## Previous Episode", episode.previous_episode_content])

    parts.extend(["", "## Characters"])
    for i, character in enumerate(cast, 1):
        parts.append(_format_character(i, character))

    relationships = _relationship_lines(cast)
    if relationships:
        parts.extend(["", "## Relationships"])
        parts.extend(relationships)

    parts.extend([
        "",
        "## Writing Guidelines",
        "1. **Structure**: Give the episode a clear opening, development, climax and resolution.",
        "2. **Dialogue**: Write natural dialogue that reflects each character's speech style.",
        "3. **Characters**: Keep every character consistent with the profile above; "
        f"the character marked {PROTAGONIST_MARKER} drives the episode.",
        f"4. **Key Element**: Make \"{episode.additional_elements}\" central to the episode.",
        "5. **Continuity**: Respect the continuity described above and any previous episode.",
        "6. **Length**: Roughly 1000-2000 characters, immersive enough to read in one sitting.",
        "",
        f"Write the episode in {output_language}.",
    ])

    return "\n".join(parts)
