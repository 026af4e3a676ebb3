"""
Voice consultation endpoints: run a turn, read sessions, speak a greeting.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request, status
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from ...application.dto.consultation_dto import VoiceTurnRequest
from ...application.use_cases.get_consultation_sessions import (
    GetConsultationSessionUseCase,
    ListConsultationSessionsUseCase,
)
from ...application.use_cases.process_voice_turn import ProcessVoiceTurnUseCase
from ...application.use_cases.synthesize_greeting import SynthesizeGreetingUseCase
from ...domain.entities.consultation import DoctorProfile
from ..deps import (
    CompletionServiceDep,
    CurrentUserDep,
    EnrichmentServiceDep,
    RateLimited,
    SessionRepositoryDep,
    SettingsDep,
    SpeechServiceDep,
    TranscriptionServiceDep,
)
from ..errors import APIError, BadRequestError
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.consultation import (
    DoctorProfileIn,
    GreetingData,
    GreetingRequest,
    SessionOut,
    VoiceChatRequest,
    VoiceChatResponse,
    VoiceTurnData,
)
from ..utils.responses import ok, request_id_of

logger = logging.getLogger("medivoice")

router = APIRouter(prefix="/api/voice-chat", tags=["voice-chat"], dependencies=[RateLimited])

MISSING_FIELDS_MESSAGE = "Invalid input: missing user message or doctor profile"


def _doctor_from(profile: Optional[DoctorProfileIn]) -> DoctorProfile:
    if profile is None or not (profile.name or "").strip() or not (profile.specialty or "").strip():
        raise BadRequestError(MISSING_FIELDS_MESSAGE, {"field": "doctorProfile"})
    return DoctorProfile(
        name=profile.name.strip(),
        specialty=profile.specialty.strip(),
        voice_id=profile.voice_id,
        agent_prompt=profile.agent_prompt,
        description=profile.description,
    )


async def _read_json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be a JSON object")
    return body


async def _turn_from_json(request: Request, owner_id: str) -> VoiceTurnRequest:
    body = await _read_json_body(request)
    try:
        payload = VoiceChatRequest.model_validate(body)
    except PydanticValidationError as e:
        raise BadRequestError(MISSING_FIELDS_MESSAGE, {"errors": e.errors(include_url=False, include_context=False)})

    user_message = payload.canonical_message()
    if not user_message:
        raise BadRequestError(MISSING_FIELDS_MESSAGE, {"field": "userMessage"})

    return VoiceTurnRequest(
        owner_id=owner_id,
        doctor_profile=_doctor_from(payload.canonical_doctor()),
        user_message=user_message,
        language=payload.language,
        session_id=payload.session_id or None,
    )


async def _turn_from_form(request: Request, owner_id: str) -> VoiceTurnRequest:
    form = await request.form()
    audio = form.get("audio")
    doctor_name = (form.get("doctor_name") or "").strip()
    doctor_specialty = (form.get("doctor_specialty") or "").strip()

    if not isinstance(audio, UploadFile) or not doctor_name or not doctor_specialty:
        raise BadRequestError("Missing required fields: audio, doctor_name, doctor_specialty")

    audio_bytes = await audio.read()
    if not audio_bytes:
        raise BadRequestError("Uploaded audio is empty", {"field": "audio"})

    logger.info(f"Voice turn upload: {audio.filename} ({len(audio_bytes)} bytes, {audio.content_type})")
    return VoiceTurnRequest(
        owner_id=owner_id,
        doctor_profile=_doctor_from(DoctorProfileIn(name=doctor_name, specialty=doctor_specialty)),
        language=(form.get("language") or None),
        session_id=(form.get("sessionId") or None),
        audio=audio_bytes,
        audio_filename=audio.filename or "audio.webm",
        audio_content_type=audio.content_type,
    )


@router.post(
    "",
    response_model=VoiceChatResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Missing user message or doctor profile"},
        401: {"description": "Missing or invalid credentials"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        502: {"model": ErrorResponse, "description": "Voice processing failed"},
    },
)
async def voice_chat(
    request: Request,
    owner_id: CurrentUserDep,
    settings: SettingsDep,
    session_repo: SessionRepositoryDep,
    transcription_service: TranscriptionServiceDep,
    enrichment_service: EnrichmentServiceDep,
    completion_service: CompletionServiceDep,
    speech_service: SpeechServiceDep,
):
    """
    Run one consultation turn.

    Accepts a JSON text turn or a multipart voice turn. Without a sessionId
    a new session is opened and its first turn is the doctor's greeting.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        dto_request = await _turn_from_form(request, owner_id)
    elif content_type.startswith("application/json"):
        dto_request = await _turn_from_json(request, owner_id)
    else:
        raise APIError(
            "UNSUPPORTED_MEDIA_TYPE",
            "Content-Type must be application/json or multipart/form-data",
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            {"content_type": content_type},
        )

    use_case = ProcessVoiceTurnUseCase(
        session_repo,
        transcription_service,
        enrichment_service,
        completion_service,
        speech_service,
        default_language=settings.consultation.default_language,
    )
    result = await use_case.execute(dto_request)

    return VoiceChatResponse(
        session_id=result.session_id,
        request_id=request_id_of(request),
        data=VoiceTurnData(
            user_text=result.user_text,
            doctor_response=result.doctor_response,
            language=result.language,
            natlas_enhanced=result.natlas_enhanced,
            audio_base64=result.audio_base64,
            is_new_consultation=result.is_new_consultation,
            metadata=result.metadata,
        ),
    )


@router.get(
    "",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_voice_chat(
    request: Request,
    owner_id: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    session_id: Optional[str] = Query(None, alias="sessionId"),
    history: bool = False,
):
    """Fetch one session (?sessionId=) or the caller's history (?history=true)."""
    if history:
        sessions = await ListConsultationSessionsUseCase(session_repo).execute(owner_id)
        return ok(request, data=[SessionOut.from_domain(s).model_dump(by_alias=True, mode="json") for s in sessions])

    if not session_id:
        raise BadRequestError("Provide sessionId or history=true")

    session = await GetConsultationSessionUseCase(session_repo).execute(session_id, owner_id)
    return ok(request, data=SessionOut.from_domain(session).model_dump(by_alias=True, mode="json"))


@router.post(
    "/greeting",
    response_model=ApiResponse[GreetingData],
    responses={
        400: {"model": ErrorResponse, "description": "Missing greeting text"},
        502: {"model": ErrorResponse, "description": "Speech synthesis failed"},
    },
)
async def synthesize_greeting(
    request: Request,
    owner_id: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    speech_service: SpeechServiceDep,
):
    """Synthesize the doctor's greeting text as base64 audio."""
    body = await _read_json_body(request)
    try:
        payload = GreetingRequest.model_validate(body)
    except PydanticValidationError as e:
        raise BadRequestError("Invalid greeting request", {"errors": e.errors(include_url=False, include_context=False)})

    if not (payload.text or "").strip():
        raise BadRequestError("Text is required", {"field": "text"})

    audio = await SynthesizeGreetingUseCase(speech_service, session_repo).execute(
        payload.text, owner_id, payload.session_id
    )
    return ok(
        request,
        data=GreetingData(audio_base64=audio, text=payload.text.strip(), session_id=payload.session_id),
    )
