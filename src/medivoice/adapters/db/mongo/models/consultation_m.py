"""
MongoDB Beanie models for consultation sessions.

The conversation is an embedded array; turns are appended with $push so the
stored order is the conversation order.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document
from pydantic import BaseModel, Field


class DoctorProfileMongo(BaseModel):
    """Embedded snapshot of the doctor persona."""
    name: str = Field(..., description="Doctor display name")
    specialty: str = Field(..., description="Doctor specialty")
    voice_id: Optional[str] = Field(None, description="Speech synthesis voice")
    agent_prompt: Optional[str] = Field(None, description="Persona prompt template")
    description: Optional[str] = Field(None, description="Short persona description")


class EnrichmentDataMongo(BaseModel):
    """Embedded keyword/severity analysis of a user message."""
    keywords: List[str] = Field(default_factory=list)
    severity: str = Field(default="moderate")
    translation: str = Field(default="")
    cultural_context: str = Field(default="")


class MessageMongo(BaseModel):
    """Embedded transcript entry."""
    role: str = Field(..., description="user or assistant")
    content: str = Field(..., description="Utterance text")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    language: Optional[str] = Field(None, description="Language used for a user turn")
    enrichment_data: Optional[EnrichmentDataMongo] = None


class MedicalReportMongo(BaseModel):
    """Embedded compiled report."""
    session_id: str
    agent: str
    user: str
    timestamp: str
    main_complaint: str
    symptoms: List[str] = Field(default_factory=list)
    summary: str
    duration: str
    severity: str
    medications_mentioned: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ConsultationSessionMongo(Document):
    """MongoDB model for a consultation session."""
    session_id: str = Field(..., description="Unique session ID")
    owner_id: str = Field(..., description="User that created the session")
    doctor_profile: DoctorProfileMongo
    language: str = Field(default="english")
    conversation: List[MessageMongo] = Field(default_factory=list)
    report: Optional[MedicalReportMongo] = None
    status: str = Field(default="active")  # active, closed
    note: Optional[str] = Field(None, description="Patient notes the session was opened with")
    created_on: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "consultation_sessions"
        indexes = [
            "session_id",
            "owner_id",
            "created_on",
            [("owner_id", 1), ("created_on", -1)],  # Caller history, newest first
        ]
