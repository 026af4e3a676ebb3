"""Create Consultation Session use case.

Opens a session ahead of the first voice turn. The patient's notes are kept
on the session; the conversation stays empty so the first turn is a greeting.
"""

import logging

from ...domain.entities.consultation import ConsultationSession
from ...domain.errors import InvalidInputError
from ...domain.value_objects.session_id import SessionId
from ..dto.consultation_dto import CreateSessionRequest
from ..ports.repositories.session_repo import ConsultationSessionRepository
from ..utils.prompt_selector import normalize_language

logger = logging.getLogger("medivoice")


class CreateConsultationSessionUseCase:
    """Use case for opening a consultation session."""

    def __init__(self, session_repository: ConsultationSessionRepository, max_note_chars: int = 5000):
        self._session_repository = session_repository
        self._max_note_chars = max_note_chars

    async def execute(self, request: CreateSessionRequest) -> ConsultationSession:
        notes = (request.notes or "").strip()
        if not notes:
            raise InvalidInputError("Invalid input: notes are required", field="notes")
        if len(notes) > self._max_note_chars:
            raise InvalidInputError(
                f"Invalid input: notes exceed {self._max_note_chars} characters",
                field="notes",
            )

        session = ConsultationSession(
            session_id=SessionId.generate(),
            owner_id=request.owner_id,
            doctor_profile=request.doctor_profile,
            language=normalize_language(request.language),
            note=notes,
        )
        created = await self._session_repository.create(session)
        logger.info(
            f"✅ Opened session {created.session_id.value} with "
            f"{created.doctor_profile.name} ({created.doctor_profile.specialty})"
        )
        return created
