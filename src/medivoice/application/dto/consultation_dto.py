"""Consultation DTOs passed between the API layer and use cases."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...domain.entities.consultation import DoctorProfile


@dataclass
class VoiceTurnRequest:
    """Request DTO for one consultation turn (text or audio)."""

    owner_id: str
    doctor_profile: DoctorProfile
    user_message: Optional[str] = None
    language: Optional[str] = None
    session_id: Optional[str] = None
    audio: Optional[bytes] = None
    audio_filename: str = "audio.webm"
    audio_content_type: Optional[str] = None

    @property
    def is_voice(self) -> bool:
        return self.audio is not None


@dataclass
class VoiceTurnResponse:
    """Response DTO for one consultation turn."""

    session_id: str
    user_text: str
    doctor_response: str
    language: str
    natlas_enhanced: bool
    is_new_consultation: bool
    audio_base64: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class CreateSessionRequest:
    """Request DTO for opening a session ahead of the first turn."""

    owner_id: str
    notes: str
    doctor_profile: DoctorProfile
    language: Optional[str] = None


@dataclass
class ReportMessage:
    """A transcript entry as supplied to the report compiler."""

    role: str
    content: str
    severity: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class GenerateReportRequest:
    """Request DTO for compiling the medical report of a session."""

    owner_id: str
    session_id: str
    messages: List[ReportMessage]
    doctor_name: Optional[str] = None
    doctor_specialty: Optional[str] = None
    user_display_name: Optional[str] = None


@dataclass
class DoctorSuggestionRequest:
    notes: str
    language: Optional[str] = None


@dataclass
class DoctorSuggestionResponse:
    doctors: List[Dict[str, Any]]
    natlas_enhancement: Optional[Dict[str, Any]]
    fallback_used: bool


@dataclass
class UserStats:
    total_consultations: int
    last_consultation: Optional[Dict[str, Any]]
    patient_history_count: int
