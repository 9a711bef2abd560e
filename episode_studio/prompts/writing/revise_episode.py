"""
Episode Revision Prompt

The episode generator revises its draft from the character panel's feedback.
"""


def get_revise_episode_prompt(
    original_content: str,
    revision_feedback: str,
    output_language: str = "Japanese"
) -> str:
    """
    Generate the revision prompt for the episode generator.

    Args:
        original_content: The draft that was evaluated
        revision_feedback: Three-section feedback compiled by the revision service
        output_language: Language the revised episode must be written in

    Returns:
        Formatted prompt string for the revision pass
    """
    return f"""Revise the episode below based on the evaluations from its characters.

## Original Episode
{original_content}

## Character Feedback
{revision_feedback}

## Revision Instructions
Address the priority improvements first, then consider the reference opinions.

While revising:
1. Resolve every problem raised by the low-scoring characters
2. Stay closer to each character's personality and settings
3. Make the relationships between characters feel more natural
4. Keep the points the high-scoring characters enjoyed
5. Do not break the flow of the story

Output the complete revised episode in {output_language}."""
