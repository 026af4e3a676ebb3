"""
Domain-specific error types for consultation rule violations.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class SessionNotFoundError(DomainError):
    """Session absent, or owned by another caller."""

    def __init__(self, session_id: str) -> None:
        message = f"Session '{session_id}' not found"
        super().__init__(message, "SESSION_NOT_FOUND", {"session_id": session_id})


class SessionClosedError(DomainError):
    """Session already closed by a compiled report."""

    def __init__(self, session_id: str) -> None:
        message = f"Session '{session_id}' is already closed"
        super().__init__(message, "SESSION_CLOSED", {"session_id": session_id})


class InvalidInputError(DomainError):
    """Required consultation input is missing or malformed."""

    def __init__(self, message: str = "Invalid input: missing user message or doctor profile", field: Optional[str] = None) -> None:
        super().__init__(message, "INVALID_INPUT", {"field": field} if field else {})


class InvalidDoctorProfileError(DomainError):
    """Doctor profile without name or specialty."""

    def __init__(self, field: str, value: Any) -> None:
        message = f"Invalid doctor profile. Field: {field}, Value: {value}"
        super().__init__(message, "INVALID_DOCTOR_PROFILE", {"field": field, "value": value})


class VoiceProcessingError(DomainError):
    """Audio could not be transcribed; the turn is aborted."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Voice processing failed: {reason}",
            "VOICE_PROCESSING_FAILED",
            {"reason": reason},
        )


class ReportGenerationError(DomainError):
    """The model did not return a parseable report."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Report generation failed: {reason}",
            "REPORT_GENERATION_FAILED",
            {"reason": reason},
        )


class InvalidReportError(DomainError):
    """Compiled report failed structural validation."""

    def __init__(self, missing_fields: list) -> None:
        super().__init__(
            "Invalid report structure",
            "INVALID_REPORT",
            {"invalid_fields": missing_fields},
        )
