"""
Rate limiting capability.
"""

from abc import ABC, abstractmethod


class RateLimiter(ABC):
    """Decides whether another request from a caller key is allowed."""

    @abstractmethod
    def check(self, key: str) -> bool:
        """Record one request for key; False when its window is exhausted."""
        pass
