"""
HTTP adapter tests against a local aiohttp server returning unusable bodies.
"""

import pytest
from aiohttp import test_utils, web

from medivoice.adapters.external.enrichment_service_natlas import NatlasEnrichmentService
from medivoice.adapters.external.speech_service_voice import VoiceSpeechSynthesisService
from medivoice.adapters.external.transcription_service_voice import VoiceTranscriptionService
from medivoice.core.config import NatlasSettings, VoiceServiceSettings
from medivoice.core.exceptions import SpeechSynthesisError, TranscriptionError

MALFORMED = "not json{"
NOT_AN_OBJECT = "[1, 2, 3]"


def json_body_server(path, body):
    hits = []

    async def handler(request):
        hits.append(request.path)
        return web.Response(text=body, content_type="application/json")

    app = web.Application()
    app.router.add_post(path, handler)
    return test_utils.TestServer(app), hits


def base_url(server):
    return f"http://{server.host}:{server.port}"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [MALFORMED, NOT_AN_OBJECT])
async def test_transcription_rejects_unusable_body(body):
    server, _ = json_body_server("/transcribe", body)
    async with server:
        service = VoiceTranscriptionService(VoiceServiceSettings(url=base_url(server)))

        with pytest.raises(TranscriptionError):
            await service.transcribe(b"webm-bytes", language="english")


@pytest.mark.asyncio
async def test_transcription_success_payload():
    server, hits = json_body_server("/transcribe", '{"success": true, "text": " Ori n fo mi ", "language": "yo"}')
    async with server:
        service = VoiceTranscriptionService(VoiceServiceSettings(url=base_url(server)))

        result = await service.transcribe(b"webm-bytes", language="yoruba")

    assert result.text == " Ori n fo mi "
    assert result.language == "yo"
    assert hits == ["/transcribe"]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [MALFORMED, NOT_AN_OBJECT])
async def test_synthesis_rejects_unusable_body(body):
    server, _ = json_body_server("/synthesize-base64", body)
    async with server:
        service = VoiceSpeechSynthesisService(VoiceServiceSettings(url=base_url(server)))

        with pytest.raises(SpeechSynthesisError):
            await service.synthesize("Hello there", speaker="idera")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [MALFORMED, NOT_AN_OBJECT])
async def test_natlas_unusable_body_is_retried_then_dropped(body):
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    server, hits = json_body_server("/analyze", body)
    async with server:
        service = NatlasEnrichmentService(
            NatlasSettings(api_url=base_url(server), max_attempts=2, base_delay_seconds=1.0),
            sleep=fake_sleep,
        )

        result = await service.analyze("Ori n fo mi", "yoruba")

    assert result is None
    assert hits == ["/analyze", "/analyze"]
    assert sleeps == [1.0]
