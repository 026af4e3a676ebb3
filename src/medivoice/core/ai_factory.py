"""
AI client factory.

Centralizes creation of the Azure OpenAI client so adapters never read
credentials themselves.
"""

from __future__ import annotations

from typing import Optional

from .ai_client import AzureAIClient

_ai_client: Optional[AzureAIClient] = None


def get_ai_client() -> AzureAIClient:
    """Get the shared AI client, created on first use."""
    global _ai_client
    if _ai_client is None:
        _ai_client = AzureAIClient()
    return _ai_client


__all__ = ["get_ai_client", "AzureAIClient"]
