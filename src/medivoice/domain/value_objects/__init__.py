"""
Value objects package for domain layer.
"""

from .session_id import SessionId

__all__ = [
    "SessionId",
]
