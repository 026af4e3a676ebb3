"""Consultation session domain entities.

A session owns an ordered, append-only transcript of messages plus a
snapshot of the doctor persona it was opened with.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..enums.consultation import ConversationStage, MessageRole, SessionStatus
from ..errors import InvalidDoctorProfileError, SessionClosedError
from ..value_objects.session_id import SessionId


@dataclass(frozen=True)
class DoctorProfile:
    """Snapshot of the doctor persona captured when a session is opened."""

    name: str
    specialty: str
    voice_id: Optional[str] = None
    agent_prompt: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise InvalidDoctorProfileError("name", self.name)
        if not self.specialty or not str(self.specialty).strip():
            raise InvalidDoctorProfileError("specialty", self.specialty)


@dataclass(frozen=True)
class EnrichmentData:
    """Keyword/severity analysis attached to a user message."""

    keywords: List[str] = field(default_factory=list)
    severity: str = "moderate"
    translation: str = ""
    cultural_context: str = ""


@dataclass(frozen=True)
class Message:
    """One utterance in the transcript. Never mutated after append."""

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=datetime.utcnow)
    language: Optional[str] = None
    enrichment_data: Optional[EnrichmentData] = None


@dataclass
class MedicalReport:
    """Structured clinical report compiled from a finished transcript."""

    session_id: str
    agent: str
    user: str
    timestamp: str
    main_complaint: str
    symptoms: List[str]
    summary: str
    duration: str
    severity: str
    medications_mentioned: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "agent": self.agent,
            "user": self.user,
            "timestamp": self.timestamp,
            "mainComplaint": self.main_complaint,
            "symptoms": list(self.symptoms),
            "summary": self.summary,
            "duration": self.duration,
            "severity": self.severity,
            "medicationsMentioned": list(self.medications_mentioned),
            "recommendations": list(self.recommendations),
        }


@dataclass
class ConsultationSession:
    """A single patient consultation with one doctor persona."""

    session_id: SessionId
    owner_id: str
    doctor_profile: DoctorProfile
    language: str = "english"
    conversation: List[Message] = field(default_factory=list)
    report: Optional[MedicalReport] = None
    status: SessionStatus = SessionStatus.ACTIVE
    note: Optional[str] = None
    created_on: datetime = field(default_factory=datetime.utcnow)

    @property
    def stage(self) -> ConversationStage:
        """Greeting iff nothing has been said yet."""
        if not self.conversation:
            return ConversationStage.GREETING
        return ConversationStage.ONGOING

    @property
    def is_closed(self) -> bool:
        return self.status == SessionStatus.CLOSED

    def is_owned_by(self, owner_id: str) -> bool:
        return self.owner_id == owner_id

    def latest_enrichment(self) -> Optional[EnrichmentData]:
        """Most recent enrichment attached to a user message, if any."""
        for message in reversed(self.conversation):
            if message.role == MessageRole.USER and message.enrichment_data:
                return message.enrichment_data
        return None

    def append_turn(self, messages: List[Message]) -> None:
        """Append messages in order. Existing entries are left untouched."""
        self.conversation.extend(messages)

    def close_with_report(self, report: MedicalReport) -> None:
        if self.is_closed:
            raise SessionClosedError(self.session_id.value)
        self.report = report
        self.status = SessionStatus.CLOSED
