"""
Consultation stage, status and role enums.
"""

from enum import Enum


class ConversationStage(str, Enum):
    """Stage of a consultation, derived from the transcript length."""
    GREETING = "greeting"  # No messages persisted yet
    ONGOING = "ongoing"


class SessionStatus(str, Enum):
    """Lifecycle of a consultation session (active -> closed only)."""
    ACTIVE = "active"
    CLOSED = "closed"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
