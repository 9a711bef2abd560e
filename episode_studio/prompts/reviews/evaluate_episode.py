"""
Character Evaluation Prompts

Each character on the panel reads the draft and scores it from their own
point of view. The instructions are parameterized entirely by the persona
passed in; nothing is looked up from shared state.
"""

from typing import TYPE_CHECKING

from episode_studio.config.limits import (
    EVALUATION_TEXT_MAX_LENGTH,
    HIGHLIGHTS_MAX_LENGTH,
    IMPROVEMENTS_MAX_LENGTH,
    CHARACTER_VOICE_MAX_LENGTH,
    IMPORTANCE_ASSESSMENT_MAX_LENGTH,
    IMPROVEMENTS_REQUIRED_BELOW,
)

if TYPE_CHECKING:
    from episode_studio.agents.character_evaluator import CharacterPersona


def _persona_profile(persona: "CharacterPersona") -> str:
    lines = [
        f"- Name: {persona.name}",
        f"- Age: {persona.age}",
        f"- Protagonist: {'yes' if persona.is_protagonist else 'no'}",
        f"- Role: {persona.role or 'undefined'}",
        f"- Importance: {persona.importance or 'undefined'}",
    ]
    optional = [
        ("Gender", persona.gender),
        ("Description", persona.description),
        ("Personality", persona.personality),
        ("Appearance", persona.appearance),
        ("Motivation", persona.motivation),
        ("Backstory", persona.backstory),
        ("Speech Style", persona.speech_style),
    ]
    for label, value in optional:
        if value:
            lines.append(f"- {label}: {value}")
    if persona.typical_actions:
        lines.append(f"- Typical Actions: {', '.join(persona.typical_actions)}")
    for rel in persona.relationships:
        line = f"- Relationship with {rel.target_character_name}: {rel.relationship_type}"
        if rel.description:
            line += f" ({rel.description})"
        lines.append(line)
    return "\n".join(lines)


def get_character_evaluator_instructions(persona: "CharacterPersona") -> str:
    """
    Generate the system instructions for one character evaluator.

    Args:
        persona: Immutable character configuration for this evaluation call

    Returns:
        System prompt telling the model to judge the episode as this character
    """
    name = persona.name
    return f"""You are "{name}", evaluating an episode from your own point of view.

## Your Profile
{_persona_profile(persona)}

## Evaluation Criteria (each scored 1-5, integers)
1. characterAccuracy: Are your personality, speech and behavior portrayed faithfully?
2. motivationConsistency: Do your actions follow from your motivation and backstory?
3. roleAppropriateness: Is your role and importance in the story handled appropriately?
4. relationshipDepiction: Are your relationships with other characters depicted naturally?
5. emotionalAuthenticity: Do your emotions and inner life feel authentic?

## Output Fields
- totalScore: overall score 1.0-5.0 with exactly one decimal place (the average of the five criteria)
- breakdown: the five criteria above
- evaluation: your candid impression in your own voice ({EVALUATION_TEXT_MAX_LENGTH} characters max)
- highlights: what you liked most ({HIGHLIGHTS_MAX_LENGTH} characters max)
- improvements: what should change ({IMPROVEMENTS_MAX_LENGTH} characters max, REQUIRED when totalScore is below {IMPROVEMENTS_REQUIRED_BELOW})
- characterVoice: what {name} would really say or do here ({CHARACTER_VOICE_MAX_LENGTH} characters max, strongly in character)
- importanceAssessment: was your importance treated appropriately ({IMPORTANCE_ASSESSMENT_MAX_LENGTH} characters max)

Notes:
- Speak in the first person as {name}
- Be honest and constructive
- When the score is low, give concrete improvements"""


def get_evaluate_episode_prompt(episode_content: str) -> str:
    """User message asking the persona to evaluate the draft."""
    return f"Please evaluate the following episode:\n\n{episode_content}"
