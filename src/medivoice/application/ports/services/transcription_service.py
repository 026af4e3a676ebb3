"""
Transcription service interface for audio-to-text conversion.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class TranscriptionResult:
    text: str
    language: Optional[str] = None


class TranscriptionService(ABC):
    """Abstract service for audio transcription."""

    @abstractmethod
    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        """
        Transcribe an uploaded audio clip.

        Args:
            audio: Raw audio bytes
            filename: Original upload filename
            content_type: MIME type of the upload
            language: Consultation language tag used as a hint

        Raises:
            TranscriptionError: on timeout, transport error or an unsuccessful result
        """
        pass
