"""
Consultation API schemas.

Wire format is camelCase; fields are declared snake_case with aliases and
accept either spelling on input.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...domain.entities.consultation import ConsultationSession, Message
from .common import ApiResponse


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================


class DoctorProfileIn(CamelModel):
    """Doctor persona as sent by clients."""

    name: Optional[str] = Field(None, description="Doctor display name")
    specialty: Optional[str] = Field(None, description="Doctor specialty")
    voice_id: Optional[str] = Field(None, alias="voiceId", description="Synthesis voice")
    agent_prompt: Optional[str] = Field(None, alias="agentPrompt", description="Persona prompt")
    description: Optional[str] = Field(None, description="Persona description")


class VoiceChatRequest(CamelModel):
    """JSON body of a text turn. Aliased inputs are folded by the router."""

    session_id: Optional[str] = Field(None, alias="sessionId")
    user_message: Optional[str] = Field(None, alias="userMessage")
    note: Optional[str] = None
    notes: Optional[str] = None
    language: Optional[str] = None
    doctor_profile: Optional[DoctorProfileIn] = Field(None, alias="doctorProfile")
    selected_doctor: Optional[DoctorProfileIn] = Field(None, alias="selectedDoctor")

    def canonical_message(self) -> Optional[str]:
        for candidate in (self.user_message, self.note, self.notes):
            if candidate and candidate.strip():
                return candidate.strip()
        return None

    def canonical_doctor(self) -> Optional[DoctorProfileIn]:
        return self.doctor_profile or self.selected_doctor


class GreetingRequest(CamelModel):
    text: Optional[str] = None
    session_id: Optional[str] = Field(None, alias="sessionId")
    doctor_name: Optional[str] = Field(None, alias="doctorName")
    doctor_specialty: Optional[str] = Field(None, alias="doctorSpecialty")


class CreateChatSessionRequest(CamelModel):
    notes: Optional[str] = None
    selected_doctor: Optional[DoctorProfileIn] = Field(None, alias="selectedDoctor")
    language: Optional[str] = None


class EnrichmentIn(CamelModel):
    keywords: List[str] = Field(default_factory=list)
    severity: Optional[str] = None


class ReportMessageIn(CamelModel):
    role: str
    content: str
    enrichment_data: Optional[EnrichmentIn] = Field(None, alias="enrichmentData")
    natlas_data: Optional[EnrichmentIn] = Field(None, alias="natlasData")


class SessionParamsIn(CamelModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    selected_doctor: Optional[DoctorProfileIn] = Field(None, alias="selectedDoctor")
    user_name: Optional[str] = Field(None, alias="userName")


class MedicalReportRequest(CamelModel):
    session_id: Optional[str] = Field(None, alias="sessionId")
    session_params: Optional[SessionParamsIn] = Field(None, alias="sessionParams")
    messages: List[ReportMessageIn] = Field(default_factory=list)


class SuggestDoctorsRequest(CamelModel):
    notes: Optional[str] = None
    language: Optional[str] = None


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================


class VoiceTurnData(CamelModel):
    user_text: str = Field(..., alias="userText")
    doctor_response: str = Field(..., alias="doctorResponse")
    language: str
    natlas_enhanced: bool = Field(..., alias="natlasEnhanced")
    audio_base64: Optional[str] = Field(None, alias="audioBase64")
    is_new_consultation: bool = Field(..., alias="isNewConsultation")
    metadata: Optional[Dict[str, Any]] = None


class VoiceChatResponse(ApiResponse[VoiceTurnData]):
    """Turn envelope: the session id sits next to the payload."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")


class CreateChatSessionResponse(CamelModel):
    success: bool = True
    session_id: str = Field(..., alias="sessionId")


class DoctorProfileOut(CamelModel):
    name: str
    specialty: str
    voice_id: Optional[str] = Field(None, alias="voiceId")
    agent_prompt: Optional[str] = Field(None, alias="agentPrompt")
    description: Optional[str] = None


class EnrichmentOut(CamelModel):
    keywords: List[str]
    severity: str
    translation: str
    cultural_context: str = Field(..., alias="culturalContext")


class MessageOut(CamelModel):
    role: str
    content: str
    timestamp: datetime
    language: Optional[str] = None
    enrichment_data: Optional[EnrichmentOut] = Field(None, alias="enrichmentData")

    @classmethod
    def from_domain(cls, message: Message) -> "MessageOut":
        enrichment = None
        if message.enrichment_data:
            enrichment = EnrichmentOut(
                keywords=list(message.enrichment_data.keywords),
                severity=message.enrichment_data.severity,
                translation=message.enrichment_data.translation,
                cultural_context=message.enrichment_data.cultural_context,
            )
        return cls(
            role=message.role.value,
            content=message.content,
            timestamp=message.timestamp,
            language=message.language,
            enrichment_data=enrichment,
        )


class SessionOut(CamelModel):
    session_id: str = Field(..., alias="sessionId")
    doctor_profile: DoctorProfileOut = Field(..., alias="doctorProfile")
    language: str
    conversation: List[MessageOut]
    report: Optional[Dict[str, Any]] = None
    status: str
    note: Optional[str] = None
    created_on: datetime = Field(..., alias="createdOn")

    @classmethod
    def from_domain(cls, session: ConsultationSession) -> "SessionOut":
        profile = session.doctor_profile
        return cls(
            session_id=session.session_id.value,
            doctor_profile=DoctorProfileOut(
                name=profile.name,
                specialty=profile.specialty,
                voice_id=profile.voice_id,
                agent_prompt=profile.agent_prompt,
                description=profile.description,
            ),
            language=session.language,
            conversation=[MessageOut.from_domain(m) for m in session.conversation],
            report=session.report.to_dict() if session.report else None,
            status=session.status.value,
            note=session.note,
            created_on=session.created_on,
        )


class GreetingData(CamelModel):
    audio_base64: str = Field(..., alias="audioBase64")
    text: str
    session_id: Optional[str] = Field(None, alias="sessionId")


class UserStatsOut(CamelModel):
    total_consultations: int = Field(..., alias="totalConsultations")
    last_consultation: Optional[Dict[str, Any]] = Field(None, alias="lastConsultation")
    patient_history_count: int = Field(..., alias="patientHistoryCount")


class DoctorOut(CamelModel):
    id: int
    name: str
    specialty: str
    description: str
    voice_id: Optional[str] = Field(None, alias="voiceId")


class DoctorSuggestionOut(CamelModel):
    doctors: List[DoctorOut]
    natlas_enhancement: Optional[Dict[str, Any]] = Field(None, alias="natlasEnhancement")
    fallback_used: bool = Field(..., alias="fallbackUsed")
