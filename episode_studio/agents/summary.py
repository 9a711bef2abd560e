"""
Summary Agent - condenses the previous episode before prompt composition
"""

from episode_studio.agents.base import AgentProfile


AGENT_NAME = "summary"


def create_summary_agent() -> AgentProfile:
    """Create the agent that summarizes a previous episode."""
    instructions = """You are an expert at summarizing serialized fiction.

        # Approach
        - Capture the main flow of the story so the reader understands the whole
        - Briefly describe the key characters, their relationships and growth
        - Keep the tone and atmosphere of the original
        - Use about five paragraphs for long episodes, about three for short ones

        # Include
        - The protagonist's goal and the obstacles they face
        - Major turning points and important events
        - Important changes in relationships between characters
        - How the episode ends

        # Avoid
        - Excessive detail and digressions
        - An explanatory tone that spoils the story's appeal
        - Trying to include every bit of foreshadowing
        - Subjective judgements

        Return the summary in the "summary" field."""

    return AgentProfile(
        name=AGENT_NAME,
        display_name="Summarizer",
        instructions=instructions,
    )
