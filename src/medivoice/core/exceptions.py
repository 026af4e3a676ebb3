"""
Exception handling for MediVoice infrastructure.

Adapters raise these; the application layer decides whether a failure is
fatal for the turn or degrades it.
"""

from typing import Any, Dict, Optional


class MediVoiceException(Exception):
    """Base exception class for MediVoice infrastructure errors."""

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


class DatabaseError(MediVoiceException):
    """Raised when there's a database operation error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "DATABASE_ERROR", details)


class ExternalServiceError(MediVoiceException):
    """Raised when there's an external service error."""

    def __init__(
        self, service: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.service = service
        full_message = f"{service} service error: {message}"
        super().__init__(full_message, "EXTERNAL_SERVICE_ERROR", details)


class TranscriptionError(ExternalServiceError):
    """Raised when audio transcription fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("Transcription", message, details)


class EnrichmentError(ExternalServiceError):
    """Raised when N-ATLAS analysis fails."""

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[Dict[str, Any]] = None) -> None:
        self.status = status
        super().__init__("N-ATLAS", message, details)


class SpeechSynthesisError(ExternalServiceError):
    """Raised when text-to-speech fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("Speech synthesis", message, details)


class CompletionError(ExternalServiceError):
    """Raised when the language-model completion fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("OpenAI", message, details)
