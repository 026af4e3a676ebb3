"""
Session ID value object for consultation sessions.
Format: UUID4 string.
"""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionId:
    """Immutable consultation session identifier."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not isinstance(self.value, str):
            raise ValueError("Session ID must be a non-empty string")
        if not self.value.strip():
            raise ValueError("Session ID cannot be blank")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> "SessionId":
        """Generate a new random session ID."""
        return cls(str(uuid.uuid4()))
