"""FastAPI dependency providers.

Tests swap any of these through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from ..adapters.db.mongo.repositories.consultation_session_repository import (
    MongoConsultationSessionRepository,
)
from ..adapters.external.completion_service_openai import OpenAICompletionService
from ..adapters.external.enrichment_service_natlas import NatlasEnrichmentService
from ..adapters.external.speech_service_voice import VoiceSpeechSynthesisService
from ..adapters.external.transcription_service_voice import VoiceTranscriptionService
from ..adapters.services.in_memory_rate_limiter import InMemoryRateLimiter
from ..application.ports.repositories.session_repo import ConsultationSessionRepository
from ..application.ports.services.completion_service import CompletionService
from ..application.ports.services.enrichment_service import EnrichmentService
from ..application.ports.services.rate_limiter import RateLimiter
from ..application.ports.services.speech_service import SpeechSynthesisService
from ..application.ports.services.transcription_service import TranscriptionService
from ..core.config import Settings, get_settings
from .errors import RateLimitError


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache()
def get_session_repository() -> ConsultationSessionRepository:
    """Get consultation session repository instance."""
    return MongoConsultationSessionRepository()


@lru_cache()
def get_transcription_service() -> TranscriptionService:
    return VoiceTranscriptionService(get_settings().voice_service)


@lru_cache()
def get_speech_service() -> SpeechSynthesisService:
    return VoiceSpeechSynthesisService(get_settings().voice_service)


@lru_cache()
def get_enrichment_service() -> EnrichmentService:
    return NatlasEnrichmentService(get_settings().natlas)


@lru_cache()
def get_completion_service() -> CompletionService:
    """Get completion service instance (requires Azure OpenAI credentials)."""
    return OpenAICompletionService(settings=get_settings().completion)


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    settings = get_settings().rate_limit
    return InMemoryRateLimiter(
        max_requests=settings.max_requests,
        window_seconds=settings.window_seconds,
    )


def get_current_user(request: Request) -> str:
    """
    Get current authenticated user ID from request state.

    The authentication middleware stores it before any router runs.
    """
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return user_id


def client_key(request: Request) -> str:
    """Rate-limit key: first X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(
    request: Request,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> None:
    if not settings.rate_limit.enabled:
        return
    key = client_key(request)
    if not limiter.check(key):
        raise RateLimitError(details={"client": key})


# Dependency annotations for FastAPI
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SessionRepositoryDep = Annotated[ConsultationSessionRepository, Depends(get_session_repository)]
TranscriptionServiceDep = Annotated[TranscriptionService, Depends(get_transcription_service)]
SpeechServiceDep = Annotated[SpeechSynthesisService, Depends(get_speech_service)]
EnrichmentServiceDep = Annotated[EnrichmentService, Depends(get_enrichment_service)]
CompletionServiceDep = Annotated[CompletionService, Depends(get_completion_service)]
CurrentUserDep = Annotated[str, Depends(get_current_user)]
RateLimited = Depends(enforce_rate_limit)
