"""
Consultation session management: open, read and delete sessions.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request, status
from pydantic import ValidationError as PydanticValidationError

from ...application.dto.consultation_dto import CreateSessionRequest
from ...application.use_cases.create_consultation_session import CreateConsultationSessionUseCase
from ...application.use_cases.delete_consultation_session import DeleteConsultationSessionUseCase
from ...application.use_cases.get_consultation_sessions import (
    GetConsultationSessionUseCase,
    ListConsultationSessionsUseCase,
)
from ...domain.entities.consultation import DoctorProfile
from ..deps import CurrentUserDep, RateLimited, SessionRepositoryDep, SettingsDep
from ..errors import BadRequestError
from ..schemas.common import ErrorResponse
from ..schemas.consultation import CreateChatSessionRequest, CreateChatSessionResponse, SessionOut
from ..utils.responses import ok

logger = logging.getLogger("medivoice")

router = APIRouter(prefix="/api/chat-session", tags=["chat-session"], dependencies=[RateLimited])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateChatSessionResponse,
    responses={400: {"model": ErrorResponse, "description": "Notes and doctor required"}},
)
async def create_chat_session(
    request: Request,
    owner_id: CurrentUserDep,
    settings: SettingsDep,
    session_repo: SessionRepositoryDep,
):
    """Open a consultation session with notes and a selected doctor."""
    try:
        payload = CreateChatSessionRequest.model_validate(await request.json())
    except (ValueError, PydanticValidationError):
        raise BadRequestError("Notes and doctor required")

    doctor = payload.selected_doctor
    if not payload.notes or doctor is None or not doctor.name or not doctor.specialty:
        raise BadRequestError("Notes and doctor required")

    use_case = CreateConsultationSessionUseCase(
        session_repo, max_note_chars=settings.consultation.max_note_chars
    )
    session = await use_case.execute(
        CreateSessionRequest(
            owner_id=owner_id,
            notes=payload.notes,
            doctor_profile=DoctorProfile(
                name=doctor.name.strip(),
                specialty=doctor.specialty.strip(),
                voice_id=doctor.voice_id,
                agent_prompt=doctor.agent_prompt,
                description=doctor.description,
            ),
            language=payload.language,
        )
    )
    return CreateChatSessionResponse(session_id=session.session_id.value)


@router.get(
    "",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_chat_session(
    request: Request,
    owner_id: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    session_id: Optional[str] = Query(None, alias="sessionId"),
):
    """Fetch one session, or every session of the caller with sessionId=all."""
    if not session_id:
        raise BadRequestError("Session ID required")

    if session_id == "all":
        sessions = await ListConsultationSessionsUseCase(session_repo).execute(owner_id)
        return ok(request, data=[SessionOut.from_domain(s).model_dump(by_alias=True, mode="json") for s in sessions])

    session = await GetConsultationSessionUseCase(session_repo).execute(session_id, owner_id)
    return ok(request, data=SessionOut.from_domain(session).model_dump(by_alias=True, mode="json"))


@router.delete(
    "",
    responses={
        400: {"model": ErrorResponse, "description": "Session ID required"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def delete_chat_session(
    request: Request,
    owner_id: CurrentUserDep,
    session_repo: SessionRepositoryDep,
    session_id: Optional[str] = Query(None, alias="sessionId"),
):
    """Delete one of the caller's sessions."""
    if not session_id:
        raise BadRequestError("Session ID required")

    await DeleteConsultationSessionUseCase(session_repo).execute(session_id, owner_id)
    return ok(request, message="Session deleted")
