"""Get User Stats use case: consultation counts for the dashboard."""

from ..dto.consultation_dto import UserStats
from ..ports.repositories.session_repo import ConsultationSessionRepository


class GetUserStatsUseCase:
    """Summarise a caller's consultation history."""

    def __init__(self, session_repository: ConsultationSessionRepository):
        self._session_repository = session_repository

    async def execute(self, owner_id: str) -> UserStats:
        sessions = await self._session_repository.list_for_owner(owner_id)

        last_consultation = None
        if sessions:
            latest = sessions[0]
            last_consultation = {
                "sessionId": latest.session_id.value,
                "createdOn": latest.created_on.isoformat(),
                "selectedDoctor": {
                    "name": latest.doctor_profile.name,
                    "specialty": latest.doctor_profile.specialty,
                },
                "note": latest.note,
            }

        return UserStats(
            total_consultations=len(sessions),
            last_consultation=last_consultation,
            patient_history_count=len(sessions),
        )
