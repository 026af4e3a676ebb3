"""
Shared fixtures: in-memory fakes for every port and a TestClient wired to them.

The app lifespan (MongoDB/Beanie) is not started; routers receive the fakes
through dependency overrides.
"""

import os

import pytest

os.environ.setdefault("APP_ENV", "testing")
os.environ["API_KEYS"] = "test-key:user-1,other-key:user-2"

from fastapi.testclient import TestClient  # noqa: E402

from fakes import (  # noqa: E402
    FakeCompletionService,
    FakeEnrichmentService,
    FakeSpeechService,
    FakeTranscriptionService,
    InMemorySessionRepository,
    make_analysis,
)
from medivoice.adapters.services.in_memory_rate_limiter import InMemoryRateLimiter  # noqa: E402
from medivoice.api import deps  # noqa: E402
from medivoice.api.routers import health  # noqa: E402
from medivoice.app import app  # noqa: E402
from medivoice.core.auth import reset_auth_service  # noqa: E402


@pytest.fixture
def session_repo():
    return InMemorySessionRepository()


@pytest.fixture
def completion_service():
    return FakeCompletionService()


@pytest.fixture
def enrichment_service():
    return FakeEnrichmentService(make_analysis())


@pytest.fixture
def transcription_service():
    return FakeTranscriptionService()


@pytest.fixture
def speech_service():
    return FakeSpeechService()


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(max_requests=1000, window_seconds=60.0)


@pytest.fixture
def client(session_repo, completion_service, enrichment_service, transcription_service, speech_service, rate_limiter):
    reset_auth_service()
    app.dependency_overrides.update(
        {
            deps.get_session_repository: lambda: session_repo,
            deps.get_completion_service: lambda: completion_service,
            deps.get_enrichment_service: lambda: enrichment_service,
            deps.get_transcription_service: lambda: transcription_service,
            deps.get_speech_service: lambda: speech_service,
            deps.get_rate_limiter: lambda: rate_limiter,
            health.check_database: lambda: True,
        }
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_auth_service()
