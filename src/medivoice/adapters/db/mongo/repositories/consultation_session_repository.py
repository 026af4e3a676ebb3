"""
MongoDB implementation of ConsultationSessionRepository.
"""

import logging
from datetime import datetime
from typing import List, Optional

from medivoice.application.ports.repositories.session_repo import ConsultationSessionRepository
from medivoice.domain.entities.consultation import (
    ConsultationSession,
    DoctorProfile,
    EnrichmentData,
    MedicalReport,
    Message,
)
from medivoice.domain.enums.consultation import MessageRole, SessionStatus
from medivoice.domain.errors import SessionNotFoundError
from medivoice.domain.value_objects.session_id import SessionId

from ..models.consultation_m import (
    ConsultationSessionMongo,
    DoctorProfileMongo,
    EnrichmentDataMongo,
    MedicalReportMongo,
    MessageMongo,
)

logger = logging.getLogger(__name__)


class MongoConsultationSessionRepository(ConsultationSessionRepository):
    """MongoDB implementation of ConsultationSessionRepository."""

    async def create(self, session: ConsultationSession) -> ConsultationSession:
        """Insert a new session document."""
        session_mongo = self._domain_to_mongo(session)
        await session_mongo.insert()
        return self._mongo_to_domain(session_mongo)

    async def get(self, session_id: str, owner_id: str) -> Optional[ConsultationSession]:
        """Find a session by ID within the owner's sessions."""
        session_mongo = await ConsultationSessionMongo.find_one(
            ConsultationSessionMongo.session_id == session_id,
            ConsultationSessionMongo.owner_id == owner_id,
        )
        if not session_mongo:
            return None
        return self._mongo_to_domain(session_mongo)

    async def append_turn(self, session_id: str, owner_id: str, messages: List[Message]) -> None:
        """Append messages with a single $push; concurrent turns never overwrite each other."""
        collection = ConsultationSessionMongo.get_motor_collection()
        result = await collection.update_one(
            {"session_id": session_id, "owner_id": owner_id},
            {
                "$push": {
                    "conversation": {
                        "$each": [self._message_to_mongo(m).model_dump() for m in messages]
                    }
                },
                "$set": {"updated_at": datetime.utcnow()},
            },
        )
        if result.matched_count == 0:
            raise SessionNotFoundError(session_id)

    async def list_for_owner(self, owner_id: str) -> List[ConsultationSession]:
        """All sessions of an owner, newest first."""
        sessions_mongo = await ConsultationSessionMongo.find(
            ConsultationSessionMongo.owner_id == owner_id
        ).sort([("created_on", -1)]).to_list()
        return [self._mongo_to_domain(s) for s in sessions_mongo]

    async def save_report(self, session_id: str, owner_id: str, report: MedicalReport) -> None:
        """Attach the report and close the session; the conversation is not touched."""
        collection = ConsultationSessionMongo.get_motor_collection()
        result = await collection.update_one(
            {"session_id": session_id, "owner_id": owner_id},
            {
                "$set": {
                    "report": self._report_to_mongo(report).model_dump(),
                    "status": SessionStatus.CLOSED.value,
                    "updated_at": datetime.utcnow(),
                }
            },
        )
        if result.matched_count == 0:
            raise SessionNotFoundError(session_id)

    async def delete(self, session_id: str, owner_id: str) -> bool:
        """Delete a session by ID."""
        session_mongo = await ConsultationSessionMongo.find_one(
            ConsultationSessionMongo.session_id == session_id,
            ConsultationSessionMongo.owner_id == owner_id,
        )
        if not session_mongo:
            return False
        await session_mongo.delete()
        return True

    async def count_for_owner(self, owner_id: str) -> int:
        return await ConsultationSessionMongo.find(
            ConsultationSessionMongo.owner_id == owner_id
        ).count()

    def _domain_to_mongo(self, session: ConsultationSession) -> ConsultationSessionMongo:
        """Convert domain entity to MongoDB model."""
        profile = session.doctor_profile
        return ConsultationSessionMongo(
            session_id=session.session_id.value,
            owner_id=session.owner_id,
            doctor_profile=DoctorProfileMongo(
                name=profile.name,
                specialty=profile.specialty,
                voice_id=profile.voice_id,
                agent_prompt=profile.agent_prompt,
                description=profile.description,
            ),
            language=session.language,
            conversation=[self._message_to_mongo(m) for m in session.conversation],
            report=self._report_to_mongo(session.report) if session.report else None,
            status=session.status.value,
            note=session.note,
            created_on=session.created_on,
        )

    @staticmethod
    def _message_to_mongo(message: Message) -> MessageMongo:
        enrichment = None
        if message.enrichment_data:
            enrichment = EnrichmentDataMongo(
                keywords=list(message.enrichment_data.keywords),
                severity=message.enrichment_data.severity,
                translation=message.enrichment_data.translation,
                cultural_context=message.enrichment_data.cultural_context,
            )
        return MessageMongo(
            role=message.role.value,
            content=message.content,
            timestamp=message.timestamp,
            language=message.language,
            enrichment_data=enrichment,
        )

    @staticmethod
    def _report_to_mongo(report: MedicalReport) -> MedicalReportMongo:
        return MedicalReportMongo(
            session_id=report.session_id,
            agent=report.agent,
            user=report.user,
            timestamp=report.timestamp,
            main_complaint=report.main_complaint,
            symptoms=list(report.symptoms),
            summary=report.summary,
            duration=report.duration,
            severity=report.severity,
            medications_mentioned=list(report.medications_mentioned),
            recommendations=list(report.recommendations),
        )

    def _mongo_to_domain(self, session_mongo: ConsultationSessionMongo) -> ConsultationSession:
        """Convert MongoDB model to domain entity."""
        profile = session_mongo.doctor_profile
        conversation = [
            Message(
                role=MessageRole(m.role),
                content=m.content,
                timestamp=m.timestamp,
                language=m.language,
                enrichment_data=EnrichmentData(
                    keywords=list(m.enrichment_data.keywords),
                    severity=m.enrichment_data.severity,
                    translation=m.enrichment_data.translation,
                    cultural_context=m.enrichment_data.cultural_context,
                ) if m.enrichment_data else None,
            )
            for m in session_mongo.conversation
        ]

        report = None
        if session_mongo.report:
            r = session_mongo.report
            report = MedicalReport(
                session_id=r.session_id,
                agent=r.agent,
                user=r.user,
                timestamp=r.timestamp,
                main_complaint=r.main_complaint,
                symptoms=list(r.symptoms),
                summary=r.summary,
                duration=r.duration,
                severity=r.severity,
                medications_mentioned=list(r.medications_mentioned),
                recommendations=list(r.recommendations),
            )

        return ConsultationSession(
            session_id=SessionId(session_mongo.session_id),
            owner_id=session_mongo.owner_id,
            doctor_profile=DoctorProfile(
                name=profile.name,
                specialty=profile.specialty,
                voice_id=profile.voice_id,
                agent_prompt=profile.agent_prompt,
                description=profile.description,
            ),
            language=session_mongo.language,
            conversation=conversation,
            report=report,
            status=SessionStatus(session_mongo.status),
            note=session_mongo.note,
            created_on=session_mongo.created_on,
        )
