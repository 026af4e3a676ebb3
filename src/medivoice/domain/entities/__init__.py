"""
Domain entities package.
"""

from .consultation import (
    ConsultationSession,
    DoctorProfile,
    EnrichmentData,
    MedicalReport,
    Message,
)

__all__ = [
    "ConsultationSession",
    "DoctorProfile",
    "EnrichmentData",
    "MedicalReport",
    "Message",
]
