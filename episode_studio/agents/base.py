"""
Agent profile shared by all Episode Studio agents.

An agent here is just a router key plus system instructions; the
Generation Adapter turns it into a model call.
"""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class AgentProfile:
    """Router key, display name and system instructions for one agent"""

    name: str
    display_name: str
    instructions: str

    def build_messages(self, user_prompt: str) -> List[Dict[str, str]]:
        """Role-tagged messages: system instructions followed by the task."""
        return [
            {"role": "system", "content": self.instructions},
            {"role": "user", "content": user_prompt},
        ]
