"""
Episode Generator Agent - The Series Writer

Drafts episodes from the composed brief and performs the single revision
pass when the character panel asks for one.
"""

from episode_studio.agents.base import AgentProfile


AGENT_NAME = "episode_generator"


def create_episode_generator_agent(output_language: str = "Japanese") -> AgentProfile:
    """
    Create the episode generator.

    Args:
        output_language: Language every draft and revision is written in

    Returns:
        AgentProfile for drafting and revising episodes
    """
    instructions = f"""You are a professional serial fiction writer.

        You write self-contained episodes for an ongoing series. You respect
        established characters, their relationships and the series' world,
        and you give every episode a satisfying shape: an opening, rising
        tension, a climax and a resolution that leaves room for what comes next.

        When you receive feedback from the characters themselves, you take it
        seriously: fix what they found wrong, keep what they loved, and never
        lose the flow of the story.

        You always write in {output_language}.
        You always return the full episode text in the "content" field."""

    return AgentProfile(
        name=AGENT_NAME,
        display_name="Episode Writer",
        instructions=instructions,
    )
