"""Delete Consultation Session use case."""

import logging

from ...domain.errors import SessionNotFoundError
from ..ports.repositories.session_repo import ConsultationSessionRepository

logger = logging.getLogger("medivoice")


class DeleteConsultationSessionUseCase:
    def __init__(self, session_repository: ConsultationSessionRepository):
        self._session_repository = session_repository

    async def execute(self, session_id: str, owner_id: str) -> None:
        deleted = await self._session_repository.delete(session_id, owner_id)
        if not deleted:
            raise SessionNotFoundError(session_id)
        logger.info(f"Deleted session {session_id} for {owner_id}")
