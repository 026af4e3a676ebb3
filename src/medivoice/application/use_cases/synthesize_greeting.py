"""Synthesize Greeting use case: speak a doctor's opening remarks."""

import logging
from typing import Optional

from ...core.constants import DEFAULT_SPEAKER
from ...core.exceptions import SpeechSynthesisError
from ...domain.errors import InvalidInputError, VoiceProcessingError
from ..ports.repositories.session_repo import ConsultationSessionRepository
from ..ports.services.speech_service import SpeechSynthesisService

logger = logging.getLogger("medivoice")


class SynthesizeGreetingUseCase:
    """Turn greeting text into audio, using the session's doctor voice when known."""

    def __init__(
        self,
        speech_service: SpeechSynthesisService,
        session_repository: ConsultationSessionRepository,
    ):
        self._speech_service = speech_service
        self._session_repository = session_repository

    async def execute(self, text: str, owner_id: str, session_id: Optional[str] = None) -> str:
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Invalid input: greeting text is required", field="text")

        speaker = DEFAULT_SPEAKER
        if session_id:
            session = await self._session_repository.get(session_id, owner_id)
            if session and session.doctor_profile.voice_id:
                speaker = session.doctor_profile.voice_id

        try:
            return await self._speech_service.synthesize(text, speaker=speaker)
        except SpeechSynthesisError as e:
            logger.error(f"❌ Greeting synthesis failed: {e.message}")
            raise VoiceProcessingError(e.message) from e
