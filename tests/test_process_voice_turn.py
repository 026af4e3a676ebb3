"""
Consultation turn tests: greeting/ongoing stages, concurrent enrichment,
degradation on downstream failures and session scoping.
"""

import asyncio

import pytest

from fakes import FakeCompletionService, FakeEnrichmentService, make_analysis, make_session
from medivoice.application.dto.consultation_dto import VoiceTurnRequest
from medivoice.application.use_cases.process_voice_turn import ProcessVoiceTurnUseCase
from medivoice.application.utils.prompt_selector import GREETING_INSTRUCTION
from medivoice.core.constants import FALLBACK_COMPLETION_TEXT, GREETING_PLACEHOLDER
from medivoice.core.exceptions import CompletionError, DatabaseError, SpeechSynthesisError, TranscriptionError
from medivoice.domain.entities.consultation import DoctorProfile, MedicalReport, Message
from medivoice.domain.enums.consultation import MessageRole
from medivoice.domain.errors import SessionClosedError, SessionNotFoundError, VoiceProcessingError

DOCTOR = DoctorProfile(name="Dr. Adaeze Okafor", specialty="General Physician", voice_id="idera")


@pytest.fixture
def use_case(session_repo, transcription_service, enrichment_service, completion_service, speech_service):
    return ProcessVoiceTurnUseCase(
        session_repo,
        transcription_service,
        enrichment_service,
        completion_service,
        speech_service,
    )


def text_turn(message="I have a headache", session_id=None, language=None, owner_id="user-1"):
    return VoiceTurnRequest(
        owner_id=owner_id,
        doctor_profile=DOCTOR,
        user_message=message,
        language=language,
        session_id=session_id,
    )


@pytest.mark.asyncio
async def test_first_turn_opens_session_with_greeting(use_case, session_repo, completion_service, enrichment_service):
    result = await use_case.execute(text_turn("Hello doctor", language="English"))

    assert result.is_new_consultation is True
    assert result.user_text == ""
    assert result.natlas_enhanced is False
    assert result.language == "english"

    session = session_repo.sessions[result.session_id]
    assert session.note == "Hello doctor"
    assert [m.role for m in session.conversation] == [MessageRole.USER, MessageRole.ASSISTANT]
    assert session.conversation[0].content == GREETING_PLACEHOLDER
    assert session.conversation[1].content == result.doctor_response

    call = completion_service.calls[0]
    assert call["scenario"] == "consultation_greeting"
    assert call["history"] == [{"role": "user", "content": GREETING_INSTRUCTION}]
    assert "Dr. Adaeze Okafor" in call["system_prompt"]
    assert enrichment_service.calls == []


@pytest.mark.asyncio
async def test_ongoing_turn_uses_history_and_enrichment(use_case, session_repo, completion_service, enrichment_service):
    first = await use_case.execute(text_turn("Hello doctor"))
    completion_service.reply = "How long have you had the headache?"

    result = await use_case.execute(text_turn("My head hurts", session_id=first.session_id))

    assert result.is_new_consultation is False
    assert result.user_text == "My head hurts"
    assert result.natlas_enhanced is True
    assert result.metadata["keywords"] == ["headache"]
    assert result.metadata["severity"] == "mild"

    call = completion_service.calls[-1]
    assert call["scenario"] == "consultation_turn"
    assert call["history"][0] == {"role": "user", "content": GREETING_PLACEHOLDER}
    assert call["history"][-1] == {"role": "user", "content": "My head hurts"}
    assert enrichment_service.calls == [("My head hurts", "english")]

    conversation = session_repo.sessions[first.session_id].conversation
    assert len(conversation) == 4
    assert conversation[2].enrichment_data.keywords == ["headache"]
    assert conversation[3].content == "How long have you had the headache?"


@pytest.mark.asyncio
async def test_completion_failure_uses_fallback_reply(use_case, session_repo, completion_service):
    first = await use_case.execute(text_turn("Hello"))
    completion_service.error = CompletionError("timed out")

    result = await use_case.execute(text_turn("Still there?", session_id=first.session_id))

    assert result.doctor_response == FALLBACK_COMPLETION_TEXT
    assert session_repo.sessions[first.session_id].conversation[-1].content == FALLBACK_COMPLETION_TEXT


@pytest.mark.asyncio
async def test_enrichment_failure_does_not_fail_turn(use_case, enrichment_service):
    first = await use_case.execute(text_turn("Hello"))
    enrichment_service.error = RuntimeError("N-ATLAS down")

    result = await use_case.execute(text_turn("I feel dizzy", session_id=first.session_id))

    assert result.natlas_enhanced is False
    assert result.metadata is None


@pytest.mark.asyncio
async def test_unsuccessful_analysis_is_not_attached(use_case, session_repo, enrichment_service):
    first = await use_case.execute(text_turn("Hello"))
    enrichment_service.analysis = None

    result = await use_case.execute(text_turn("I feel dizzy", session_id=first.session_id))

    assert result.natlas_enhanced is False
    assert session_repo.sessions[first.session_id].conversation[2].enrichment_data is None


@pytest.mark.asyncio
async def test_reply_is_sanitized_before_storing(use_case, session_repo, completion_service):
    completion_service.reply = "Doctor: Hello there (Note: be gentle) what is your name?"

    result = await use_case.execute(text_turn("Hi"))

    assert result.doctor_response == "Hello there what is your name?"
    assert session_repo.sessions[result.session_id].conversation[1].content == result.doctor_response


@pytest.mark.asyncio
async def test_session_language_wins_over_request(use_case, session_repo, completion_service):
    session = make_session(language="yoruba", conversation=[
        Message(role=MessageRole.USER, content=GREETING_PLACEHOLDER),
        Message(role=MessageRole.ASSISTANT, content="Ẹ n lẹ o"),
    ])
    await session_repo.create(session)

    result = await use_case.execute(text_turn("Ori n fọ mi", session_id=session.session_id.value, language="english"))

    assert result.language == "yoruba"
    assert "Yoruba" in completion_service.calls[-1]["system_prompt"]


@pytest.mark.asyncio
async def test_unknown_session_is_not_found(use_case):
    with pytest.raises(SessionNotFoundError):
        await use_case.execute(text_turn("Hello", session_id="does-not-exist"))


@pytest.mark.asyncio
async def test_other_owners_session_is_not_found(use_case, session_repo):
    session = make_session(owner_id="user-2")
    await session_repo.create(session)

    with pytest.raises(SessionNotFoundError):
        await use_case.execute(text_turn("Hello", session_id=session.session_id.value))


@pytest.mark.asyncio
async def test_closed_session_rejects_turns(use_case, session_repo):
    session = make_session()
    session.close_with_report(
        MedicalReport(
            session_id=session.session_id.value,
            agent="Dr. Ibrahim Musa, Specialty: Cardiologist",
            user="Anonymous",
            timestamp="2024-01-01T00:00:00Z",
            main_complaint="Chest pain",
            symptoms=["chest pain"],
            summary="Summary",
            duration="1 day",
            severity="moderate",
            medications_mentioned=[],
            recommendations=[],
        )
    )
    await session_repo.create(session)

    with pytest.raises(SessionClosedError):
        await use_case.execute(text_turn("Hello again", session_id=session.session_id.value))
    assert session_repo.append_calls == []


@pytest.mark.asyncio
async def test_voice_turn_transcribes_and_synthesizes(use_case, transcription_service, speech_service):
    request = VoiceTurnRequest(owner_id="user-1", doctor_profile=DOCTOR, audio=b"webm-bytes", language="hausa")

    result = await use_case.execute(request)

    assert transcription_service.calls[0]["language"] == "hausa"
    assert result.audio_base64 == speech_service.audio
    assert speech_service.calls[0]["speaker"] == "idera"


@pytest.mark.asyncio
async def test_transcription_failure_aborts_without_writes(use_case, session_repo, transcription_service):
    transcription_service.error = TranscriptionError("HTTP 500")
    request = VoiceTurnRequest(owner_id="user-1", doctor_profile=DOCTOR, audio=b"webm-bytes")

    with pytest.raises(VoiceProcessingError):
        await use_case.execute(request)
    assert session_repo.sessions == {}


@pytest.mark.asyncio
async def test_speech_failure_returns_text_only(use_case, speech_service):
    speech_service.error = SpeechSynthesisError("timed out")
    request = VoiceTurnRequest(owner_id="user-1", doctor_profile=DOCTOR, audio=b"webm-bytes")

    result = await use_case.execute(request)

    assert result.audio_base64 is None
    assert result.doctor_response


@pytest.mark.asyncio
async def test_text_turns_skip_synthesis(use_case, speech_service):
    result = await use_case.execute(text_turn("Hello"))

    assert result.audio_base64 is None
    assert speech_service.calls == []


def opened_session(session_repo):
    session = make_session(conversation=[
        Message(role=MessageRole.USER, content=GREETING_PLACEHOLDER),
        Message(role=MessageRole.ASSISTANT, content="Hello, what brings you in today?"),
    ])
    session_repo.sessions[session.session_id.value] = session
    return session


@pytest.mark.asyncio
async def test_persistence_failure_fails_turn_without_audio(use_case, session_repo, speech_service):
    session = opened_session(session_repo)

    async def failing_append(session_id, owner_id, messages):
        raise DatabaseError("write concern timeout")

    session_repo.append_turn = failing_append
    request = VoiceTurnRequest(
        owner_id="user-1",
        doctor_profile=DOCTOR,
        audio=b"webm-bytes",
        session_id=session.session_id.value,
    )

    with pytest.raises(DatabaseError):
        await use_case.execute(request)
    assert speech_service.calls == []
    assert len(session_repo.sessions[session.session_id.value].conversation) == 2


@pytest.mark.asyncio
async def test_transcription_failure_leaves_existing_session_untouched(use_case, session_repo, transcription_service):
    session = opened_session(session_repo)
    transcription_service.error = TranscriptionError("HTTP 500")
    request = VoiceTurnRequest(
        owner_id="user-1",
        doctor_profile=DOCTOR,
        audio=b"webm-bytes",
        session_id=session.session_id.value,
    )

    with pytest.raises(VoiceProcessingError):
        await use_case.execute(request)
    assert len(session_repo.sessions[session.session_id.value].conversation) == 2
    assert session_repo.append_calls == []


class RendezvousEnrichment(FakeEnrichmentService):
    def __init__(self, started, other_started):
        super().__init__(make_analysis())
        self.started = started
        self.other_started = other_started

    async def analyze(self, text, language):
        self.started.set()
        await asyncio.wait_for(self.other_started.wait(), timeout=1.0)
        return await super().analyze(text, language)


class RendezvousCompletion(FakeCompletionService):
    def __init__(self, started, other_started):
        super().__init__(reply="How long has it hurt?")
        self.started = started
        self.other_started = other_started

    async def complete(self, system_prompt, history, scenario="consultation_turn"):
        if scenario == "consultation_turn":
            self.started.set()
            await asyncio.wait_for(self.other_started.wait(), timeout=1.0)
        return await super().complete(system_prompt, history, scenario)


@pytest.mark.asyncio
async def test_enrichment_and_completion_run_concurrently(session_repo, transcription_service, speech_service):
    enrichment_started = asyncio.Event()
    completion_started = asyncio.Event()
    use_case = ProcessVoiceTurnUseCase(
        session_repo,
        transcription_service,
        RendezvousEnrichment(enrichment_started, completion_started),
        RendezvousCompletion(completion_started, enrichment_started),
        speech_service,
    )
    session = opened_session(session_repo)

    # Each fake waits for the other to start, so a sequential run times out
    result = await use_case.execute(text_turn("My head hurts", session_id=session.session_id.value))

    assert result.natlas_enhanced is True
    assert result.doctor_response == "How long has it hurt?"
    assert len(session_repo.sessions[session.session_id.value].conversation) == 4
