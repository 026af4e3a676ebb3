"""Read use cases for consultation sessions, always scoped to the caller."""

from typing import List

from ...domain.entities.consultation import ConsultationSession
from ...domain.errors import SessionNotFoundError
from ..ports.repositories.session_repo import ConsultationSessionRepository


class GetConsultationSessionUseCase:
    """Fetch one session of the caller."""

    def __init__(self, session_repository: ConsultationSessionRepository):
        self._session_repository = session_repository

    async def execute(self, session_id: str, owner_id: str) -> ConsultationSession:
        # Another caller's session is indistinguishable from a missing one
        session = await self._session_repository.get(session_id, owner_id)
        if not session:
            raise SessionNotFoundError(session_id)
        return session


class ListConsultationSessionsUseCase:
    """All sessions of the caller, newest first. Empty when there are none."""

    def __init__(self, session_repository: ConsultationSessionRepository):
        self._session_repository = session_repository

    async def execute(self, owner_id: str) -> List[ConsultationSession]:
        return await self._session_repository.list_for_owner(owner_id)
