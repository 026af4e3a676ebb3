"""
Language-model completion service interface.
"""

from abc import ABC, abstractmethod
from typing import Dict, List


class CompletionService(ABC):
    """Abstract chat completion capability."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        scenario: str = "consultation_turn",
    ) -> str:
        """
        Produce the assistant's next reply.

        Args:
            system_prompt: Instruction injected fresh for this call
            history: Role/content pairs, oldest first
            scenario: Prompt scenario used for telemetry

        Raises:
            CompletionError: when the call fails or times out
        """
        pass

    @abstractmethod
    async def complete_json(self, system_prompt: str, user_prompt: str, scenario: str) -> str:
        """Request a JSON-object response and return the raw text."""
        pass
