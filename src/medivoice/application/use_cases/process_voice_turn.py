"""Process Voice Turn use case: one patient/doctor exchange in a consultation.

Stage is derived from the persisted transcript. On ongoing turns the
enrichment and completion calls run concurrently and are joined; either may
fail without failing the turn. The user/assistant message pair is appended
in a single write once the reply is known.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from ...core.constants import (
    DEFAULT_LANGUAGE,
    DEFAULT_SPEAKER,
    FALLBACK_COMPLETION_TEXT,
    GREETING_PLACEHOLDER,
)
from ...core.exceptions import TranscriptionError
from ...domain.entities.consultation import ConsultationSession, Message
from ...domain.enums.consultation import ConversationStage, MessageRole
from ...domain.errors import (
    InvalidInputError,
    SessionClosedError,
    SessionNotFoundError,
    VoiceProcessingError,
)
from ...domain.value_objects.session_id import SessionId
from ...observability.tracing import add_span_attribute, set_span_status, trace_operation
from ..dto.consultation_dto import VoiceTurnRequest, VoiceTurnResponse
from ..ports.repositories.session_repo import ConsultationSessionRepository
from ..ports.services.completion_service import CompletionService
from ..ports.services.enrichment_service import EnrichmentAnalysis, EnrichmentService
from ..ports.services.speech_service import SpeechSynthesisService
from ..ports.services.transcription_service import TranscriptionService
from ..utils.prompt_selector import GREETING_INSTRUCTION, select_system_prompt
from ..utils.response_sanitizer import sanitize

logger = logging.getLogger("medivoice")


class ProcessVoiceTurnUseCase:
    """Use case for running one consultation turn."""

    def __init__(
        self,
        session_repository: ConsultationSessionRepository,
        transcription_service: TranscriptionService,
        enrichment_service: EnrichmentService,
        completion_service: CompletionService,
        speech_service: SpeechSynthesisService,
        default_language: str = DEFAULT_LANGUAGE,
    ):
        self._session_repository = session_repository
        self._transcription_service = transcription_service
        self._enrichment_service = enrichment_service
        self._completion_service = completion_service
        self._speech_service = speech_service
        self._default_language = default_language

    async def execute(self, request: VoiceTurnRequest) -> VoiceTurnResponse:
        """Execute the turn. Nothing is written unless the turn completes."""
        with trace_operation(
            "voice_turn",
            {"turn.voice": request.is_voice, "turn.has_session": bool(request.session_id)},
        ) as span:
            session: Optional[ConsultationSession] = None
            if request.session_id:
                session = await self._session_repository.get(request.session_id, request.owner_id)
                if not session:
                    raise SessionNotFoundError(request.session_id)
                if session.is_closed:
                    raise SessionClosedError(request.session_id)

            # Language is read once and threaded through every adapter call
            language = self._resolve_language(session, request.language)
            user_text = await self._resolve_user_text(request, language)

            if session is None:
                session = await self._create_session(request, language, user_text)

            stage = session.stage
            add_span_attribute(span, "turn.stage", stage.value)
            logger.info(
                f"Turn for session {session.session_id.value}: stage={stage.value} "
                f"language={language} voice={request.is_voice}"
            )

            if stage == ConversationStage.ONGOING and not user_text:
                raise InvalidInputError("Invalid input: missing user message", field="userMessage")

            system_prompt = select_system_prompt(
                session.doctor_profile.name,
                session.doctor_profile.specialty,
                language,
                stage,
            )

            if stage == ConversationStage.GREETING:
                history = [{"role": MessageRole.USER.value, "content": GREETING_INSTRUCTION}]
                raw_reply = await self._complete(system_prompt, history, "consultation_greeting")
                analysis = None
            else:
                history = self._history_for(session) + [
                    {"role": MessageRole.USER.value, "content": user_text}
                ]
                raw_reply, analysis = await self._complete_with_enrichment(
                    system_prompt, history, user_text, language
                )

            reply = sanitize(raw_reply, language)
            enrichment = analysis.to_enrichment_data() if analysis else None

            user_message = Message(
                role=MessageRole.USER,
                content=GREETING_PLACEHOLDER if stage == ConversationStage.GREETING else user_text,
                language=language,
                enrichment_data=enrichment,
            )
            assistant_message = Message(role=MessageRole.ASSISTANT, content=reply)
            await self._session_repository.append_turn(
                session.session_id.value,
                request.owner_id,
                [user_message, assistant_message],
            )

            audio_base64 = None
            if request.is_voice:
                audio_base64 = await self._synthesize(reply, session.doctor_profile.voice_id)

            add_span_attribute(span, "turn.enriched", analysis is not None)
            set_span_status(span, success=True)

            return VoiceTurnResponse(
                session_id=session.session_id.value,
                user_text="" if stage == ConversationStage.GREETING else user_text,
                doctor_response=reply,
                language=language,
                natlas_enhanced=analysis is not None,
                is_new_consultation=stage == ConversationStage.GREETING,
                audio_base64=audio_base64,
                metadata=self._metadata_for(analysis),
            )

    def _resolve_language(self, session: Optional[ConsultationSession], requested: Optional[str]) -> str:
        if session is not None and session.language:
            return session.language
        tag = (requested or "").strip().lower()
        return tag or self._default_language

    async def _resolve_user_text(self, request: VoiceTurnRequest, language: str) -> str:
        if not request.is_voice:
            return (request.user_message or "").strip()

        try:
            result = await self._transcription_service.transcribe(
                request.audio,
                filename=request.audio_filename,
                content_type=request.audio_content_type,
                language=language,
            )
        except TranscriptionError as e:
            logger.error(f"❌ Transcription failed: {e.message}")
            raise VoiceProcessingError(e.message) from e

        text = (result.text or "").strip()
        logger.info(f"✅ Transcribed {len(text)} chars (detected language: {result.language or 'n/a'})")
        return text

    async def _create_session(self, request: VoiceTurnRequest, language: str, user_text: str) -> ConsultationSession:
        session = ConsultationSession(
            session_id=SessionId.generate(),
            owner_id=request.owner_id,
            doctor_profile=request.doctor_profile,
            language=language,
            note=user_text or None,
        )
        created = await self._session_repository.create(session)
        logger.info(f"✅ Created consultation session {created.session_id.value} for {request.owner_id}")
        return created

    @staticmethod
    def _history_for(session: ConsultationSession) -> List[Dict[str, str]]:
        # Role/content only; enrichment stays out of the model context
        return [{"role": m.role.value, "content": m.content} for m in session.conversation]

    async def _complete(self, system_prompt: str, history: List[Dict[str, str]], scenario: str) -> str:
        try:
            return await self._completion_service.complete(system_prompt, history, scenario=scenario)
        except Exception as e:
            logger.warning(f"⚠️  Completion failed, using fallback reply: {e}")
            return FALLBACK_COMPLETION_TEXT

    async def _complete_with_enrichment(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        user_text: str,
        language: str,
    ) -> Tuple[str, Optional[EnrichmentAnalysis]]:
        """Run enrichment and completion concurrently; wait for both to settle."""
        enrichment_result, completion_result = await asyncio.gather(
            self._enrichment_service.analyze(user_text, language),
            self._completion_service.complete(system_prompt, history, scenario="consultation_turn"),
            return_exceptions=True,
        )

        if isinstance(completion_result, BaseException):
            logger.warning(f"⚠️  Completion failed, using fallback reply: {completion_result}")
            reply = FALLBACK_COMPLETION_TEXT
        else:
            reply = completion_result

        analysis: Optional[EnrichmentAnalysis] = None
        if isinstance(enrichment_result, BaseException):
            logger.warning(f"⚠️  Enrichment failed, continuing without it: {enrichment_result}")
        elif enrichment_result is not None and enrichment_result.success:
            analysis = enrichment_result
        else:
            logger.info("Enrichment unavailable for this turn")

        return reply, analysis

    async def _synthesize(self, text: str, voice_id: Optional[str]) -> Optional[str]:
        try:
            return await self._speech_service.synthesize(text, speaker=voice_id or DEFAULT_SPEAKER)
        except Exception as e:
            logger.warning(f"⚠️  Speech synthesis failed, returning text only: {e}")
            return None

    @staticmethod
    def _metadata_for(analysis: Optional[EnrichmentAnalysis]) -> Optional[Dict[str, object]]:
        if analysis is None:
            return None
        return {
            "keywords": list(analysis.medical_keywords),
            "severity": analysis.severity,
            "matchType": analysis.match_type,
            "cached": analysis.cached,
        }
