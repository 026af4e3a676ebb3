"""
Text-to-speech over the voice service's /synthesize-base64 endpoint.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from medivoice.application.ports.services.speech_service import SpeechSynthesisService
from medivoice.core.config import VoiceServiceSettings
from medivoice.core.exceptions import SpeechSynthesisError

logger = logging.getLogger(__name__)


def truncate_for_speech(text: str, max_words: int) -> str:
    """Keep the first max_words words; mark the cut with an ellipsis."""
    words = (text or "").split()
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + "..."


class VoiceSpeechSynthesisService(SpeechSynthesisService):
    """Synthesizes replies as base64 audio with a bounded timeout."""

    def __init__(self, settings: Optional[VoiceServiceSettings] = None) -> None:
        self._settings = settings or VoiceServiceSettings()

    async def synthesize(self, text: str, speaker: Optional[str] = None) -> str:
        spoken = truncate_for_speech(text, self._settings.max_words)
        if not spoken:
            raise SpeechSynthesisError("nothing to synthesize")

        payload = {
            "text": spoken,
            "speaker": speaker or self._settings.speaker,
            "temperature": self._settings.temperature,
            "repetition_penalty": self._settings.repetition_penalty,
            "max_length": self._settings.max_length,
        }
        url = f"{self._settings.url}/synthesize-base64"
        timeout = aiohttp.ClientTimeout(total=self._settings.synthesis_timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise SpeechSynthesisError(
                            f"HTTP {response.status}",
                            {"status": response.status, "body": error_text[:200]},
                        )
                    result = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise SpeechSynthesisError(
                f"timed out after {self._settings.synthesis_timeout_seconds}s"
            ) from e
        except aiohttp.ClientError as e:
            raise SpeechSynthesisError(str(e)) from e
        except ValueError as e:
            raise SpeechSynthesisError(f"malformed response: {e}") from e

        if not isinstance(result, dict):
            raise SpeechSynthesisError("malformed response: expected a JSON object")

        audio = result.get("audio")
        if not result.get("success") or not audio:
            raise SpeechSynthesisError(result.get("error") or "synthesis unsuccessful")

        logger.info(f"✅ Synthesized {len(spoken.split())} words with speaker {payload['speaker']}")
        return audio
