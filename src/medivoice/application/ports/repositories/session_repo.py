"""
Consultation session repository interface.

Every read and write is scoped to the owning user.
"""

from typing import List, Optional

from medivoice.domain.entities.consultation import (
    ConsultationSession,
    MedicalReport,
    Message,
)


class ConsultationSessionRepository:
    """Repository interface for consultation sessions."""

    async def create(self, session: ConsultationSession) -> ConsultationSession:
        """Persist a new session."""
        raise NotImplementedError

    async def get(self, session_id: str, owner_id: str) -> Optional[ConsultationSession]:
        """Find a session by ID; None if absent or owned by someone else."""
        raise NotImplementedError

    async def append_turn(self, session_id: str, owner_id: str, messages: List[Message]) -> None:
        """Atomically append messages to the end of the conversation."""
        raise NotImplementedError

    async def list_for_owner(self, owner_id: str) -> List[ConsultationSession]:
        """All sessions of an owner, newest first."""
        raise NotImplementedError

    async def save_report(self, session_id: str, owner_id: str, report: MedicalReport) -> None:
        """Attach the compiled report and close the session."""
        raise NotImplementedError

    async def delete(self, session_id: str, owner_id: str) -> bool:
        """Delete a session. Returns False when nothing matched."""
        raise NotImplementedError

    async def count_for_owner(self, owner_id: str) -> int:
        """Count sessions of an owner."""
        raise NotImplementedError
