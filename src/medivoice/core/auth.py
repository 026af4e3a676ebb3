"""
Authentication service for consultation endpoints.

Callers authenticate with an API key (X-API-Key header or Authorization
Bearer token). Each key maps to the user id that owns the sessions created
with it.
"""

import logging
import os
from typing import Dict, Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service for validating users and API keys"""

    def __init__(self, api_keys: Optional[str] = None):
        """Initialize authentication service with API keys from the environment."""
        self.api_keys: Dict[str, str] = {}
        self._load_api_keys(api_keys)

    def _load_api_keys(self, api_keys_str: Optional[str]) -> None:
        if api_keys_str is None:
            api_keys_str = os.getenv("API_KEYS", "")
        if api_keys_str:
            self._parse_api_keys(api_keys_str)
            logger.info(f"✅ Loaded {len(self.api_keys)} API key(s)")
        else:
            logger.warning("⚠️  No API keys configured. Authentication will fail for all requests.")

    def _parse_api_keys(self, api_keys_str: str) -> None:
        """
        Parse API keys string.
        Format: "key1:user1,key2:user2" (comma-separated key:user pairs)
        """
        if not api_keys_str or not api_keys_str.strip():
            return

        for pair in api_keys_str.split(","):
            pair = pair.strip()
            if not pair:
                continue

            if ":" in pair:
                key, user_id = (part.strip() for part in pair.split(":", 1))
                if key and user_id:
                    self.api_keys[key] = user_id
            else:
                # If no colon, use the key itself as user identifier
                self.api_keys[pair] = pair

    def validate_api_key(self, api_key: Optional[str]) -> str:
        """
        Validate API key and return user ID.

        Raises:
            HTTPException: If API key is invalid or missing
        """
        if not api_key:
            raise HTTPException(
                status_code=401,
                detail="Authentication required. Provide X-API-Key header or Authorization Bearer token.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if api_key.startswith("Bearer "):
            api_key = api_key[7:].strip()

        if api_key in self.api_keys:
            user_id = self.api_keys[api_key]
            logger.debug(f"✅ API key validated for user: {user_id}")
            return user_id

        logger.warning(f"❌ Invalid API key attempted: {api_key[:6]}...")
        raise HTTPException(
            status_code=401,
            detail="Invalid API key or token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    def get_user_from_request(self, api_key: Optional[str] = None, auth_header: Optional[str] = None) -> str:
        """
        Extract and validate user ID from request headers.

        Priority:
        1. X-API-Key header
        2. Authorization Bearer token
        """
        if api_key:
            return self.validate_api_key(api_key)

        if auth_header and auth_header.startswith("Bearer "):
            return self.validate_api_key(auth_header[7:].strip())

        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide X-API-Key header or Authorization Bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )


# Global instance
_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get global authentication service instance (singleton)"""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def reset_auth_service() -> None:
    """Forget the cached service so API_KEYS is re-read."""
    global _auth_service
    _auth_service = None
