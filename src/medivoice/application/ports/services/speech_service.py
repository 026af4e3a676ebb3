"""
Speech synthesis service interface for text-to-speech conversion.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SpeechSynthesisService(ABC):
    """Abstract service for speech synthesis."""

    @abstractmethod
    async def synthesize(self, text: str, speaker: Optional[str] = None) -> str:
        """
        Synthesize speech for text.

        Returns:
            Base64-encoded audio

        Raises:
            SpeechSynthesisError: on timeout, transport error or an unsuccessful result
        """
        pass
