"""
Previous Episode Summary Prompt
"""


def get_summarize_episode_prompt(previous_episode_content: str) -> str:
    """User message asking the summary agent to condense the previous episode."""
    return f"""Summarize the following episode so the writer of the next episode can keep continuity.

## Episode
{previous_episode_content}"""
