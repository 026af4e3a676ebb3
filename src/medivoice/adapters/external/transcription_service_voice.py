"""
Speech-to-text over the voice service's /transcribe endpoint.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from medivoice.application.ports.services.transcription_service import (
    TranscriptionResult,
    TranscriptionService,
)
from medivoice.core.config import VoiceServiceSettings
from medivoice.core.constants import LANGUAGE_CODES
from medivoice.core.exceptions import TranscriptionError

logger = logging.getLogger(__name__)


def to_language_code(language: Optional[str]) -> Optional[str]:
    """Map a consultation language tag to its ISO code; codes pass through."""
    if not language:
        return None
    tag = language.strip().lower()
    return LANGUAGE_CODES.get(tag, tag)


class VoiceTranscriptionService(TranscriptionService):
    """Transcribes uploaded audio with a bounded timeout and no retries."""

    def __init__(self, settings: Optional[VoiceServiceSettings] = None) -> None:
        self._settings = settings or VoiceServiceSettings()

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        if not audio:
            raise TranscriptionError("empty audio upload")

        form = aiohttp.FormData()
        form.add_field(
            "audio",
            audio,
            filename=filename or "audio.webm",
            content_type=content_type or "application/octet-stream",
        )
        code = to_language_code(language)
        if code:
            form.add_field("language", code)

        url = f"{self._settings.url}/transcribe"
        timeout = aiohttp.ClientTimeout(total=self._settings.transcription_timeout_seconds)
        logger.info(f"Transcribing {len(audio)} bytes (language hint: {code or 'none'})")

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, data=form) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise TranscriptionError(
                            f"HTTP {response.status}",
                            {"status": response.status, "body": error_text[:200]},
                        )
                    payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TranscriptionError(
                f"timed out after {self._settings.transcription_timeout_seconds}s"
            ) from e
        except aiohttp.ClientError as e:
            raise TranscriptionError(str(e)) from e
        except ValueError as e:
            raise TranscriptionError(f"malformed response: {e}") from e

        if not isinstance(payload, dict):
            raise TranscriptionError("malformed response: expected a JSON object")

        if not payload.get("success"):
            raise TranscriptionError(payload.get("error") or "transcription unsuccessful")

        return TranscriptionResult(
            text=payload.get("text") or "",
            language=payload.get("language"),
        )
