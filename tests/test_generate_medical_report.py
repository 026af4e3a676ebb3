"""
Medical report compilation tests.
"""

import pytest

from fakes import make_session
from medivoice.application.dto.consultation_dto import GenerateReportRequest, ReportMessage
from medivoice.application.use_cases.generate_medical_report import (
    GenerateMedicalReportUseCase,
    validate_report,
)
from medivoice.core.exceptions import CompletionError
from medivoice.domain.entities.consultation import EnrichmentData, Message
from medivoice.domain.enums.consultation import MessageRole, SessionStatus
from medivoice.domain.errors import (
    InvalidInputError,
    InvalidReportError,
    ReportGenerationError,
    SessionClosedError,
    SessionNotFoundError,
)


@pytest.fixture
def session(session_repo):
    session = make_session(conversation=[
        Message(role=MessageRole.USER, content="Session started"),
        Message(role=MessageRole.ASSISTANT, content="Hello, what brings you in?"),
        Message(
            role=MessageRole.USER,
            content="I have a headache",
            enrichment_data=EnrichmentData(keywords=["headache"], severity="moderate"),
        ),
        Message(role=MessageRole.ASSISTANT, content="How long has it lasted?"),
    ])
    session_repo.sessions[session.session_id.value] = session
    return session


@pytest.fixture
def use_case(session_repo, completion_service):
    return GenerateMedicalReportUseCase(session_repo, completion_service, history_limit=3)


def report_request(session_id, messages=None, **kwargs):
    return GenerateReportRequest(
        owner_id="user-1",
        session_id=session_id,
        messages=messages if messages is not None else [
            ReportMessage(role="assistant", content="Hello, what brings you in?"),
            ReportMessage(role="user", content="I have a headache", severity="mild", keywords=["headache"]),
            ReportMessage(role="assistant", content="How long has it lasted?"),
            ReportMessage(role="user", content="Three days"),
        ],
        **kwargs,
    )


@pytest.mark.asyncio
async def test_report_is_stored_and_session_closed(use_case, session, session_repo):
    report = await use_case.execute(report_request(session.session_id.value, user_display_name="Kemi"))

    assert report.session_id == session.session_id.value
    assert report.agent == "Dr. Ibrahim Musa, Specialty: Cardiologist"
    assert report.user == "Kemi"
    assert report.main_complaint == "Persistent headache for three days"
    assert report.medications_mentioned == ["paracetamol"]
    assert report.timestamp.endswith("Z")

    stored = session_repo.sessions[session.session_id.value]
    assert stored.status == SessionStatus.CLOSED
    assert stored.report is report
    assert len(stored.conversation) == 4


@pytest.mark.asyncio
async def test_detected_severity_overrides_model(use_case, session):
    report = await use_case.execute(report_request(session.session_id.value))

    # The model said "severe"; the latest enriched user message said "mild"
    assert report.severity == "mild"


@pytest.mark.asyncio
async def test_stored_enrichment_used_when_request_has_none(use_case, session):
    messages = [ReportMessage(role="user", content="I have a headache")]

    report = await use_case.execute(report_request(session.session_id.value, messages=messages))

    assert report.severity == "moderate"


@pytest.mark.asyncio
async def test_request_doctor_and_anonymous_user(use_case, session):
    report = await use_case.execute(
        report_request(session.session_id.value, doctor_name="Dr. Amina Bello", doctor_specialty="Dermatologist")
    )

    assert report.agent == "Dr. Amina Bello, Specialty: Dermatologist"
    assert report.user == "Anonymous"


@pytest.mark.asyncio
async def test_prompt_keeps_only_trailing_messages(use_case, session, completion_service):
    await use_case.execute(report_request(session.session_id.value))

    call = completion_service.json_calls[0]
    assert call["scenario"] == "medical_report"
    assert "Hello, what brings you in?" not in call["user_prompt"]
    assert "USER: Three days" in call["user_prompt"]
    assert "Detected Symptoms: headache" in call["user_prompt"]


@pytest.mark.asyncio
async def test_json_wrapped_in_prose_is_accepted(use_case, session, completion_service):
    completion_service.report = "Here is the report:\n" + completion_service.report + "\nThanks."

    report = await use_case.execute(report_request(session.session_id.value))

    assert report.duration == "3 days"


@pytest.mark.asyncio
async def test_unparseable_output_fails_and_keeps_session_open(use_case, session, session_repo, completion_service):
    completion_service.report = "I could not produce a report."

    with pytest.raises(ReportGenerationError):
        await use_case.execute(report_request(session.session_id.value))
    assert session_repo.sessions[session.session_id.value].status == SessionStatus.ACTIVE


@pytest.mark.asyncio
async def test_completion_error_becomes_generation_error(use_case, session, completion_service):
    completion_service.error = CompletionError("timed out")

    with pytest.raises(ReportGenerationError):
        await use_case.execute(report_request(session.session_id.value))


@pytest.mark.asyncio
async def test_missing_fields_are_reported(use_case, session, completion_service):
    completion_service.report = '{"symptoms": ["headache"], "summary": "Short."}'

    with pytest.raises(InvalidReportError) as exc_info:
        await use_case.execute(report_request(session.session_id.value))

    invalid = exc_info.value.details["invalid_fields"]
    assert "mainComplaint" in invalid
    assert "duration" in invalid
    assert "symptoms" not in invalid


@pytest.mark.asyncio
async def test_closed_session_cannot_be_reported_twice(use_case, session):
    await use_case.execute(report_request(session.session_id.value))

    with pytest.raises(SessionClosedError):
        await use_case.execute(report_request(session.session_id.value))


@pytest.mark.asyncio
async def test_unknown_session(use_case):
    with pytest.raises(SessionNotFoundError):
        await use_case.execute(report_request("missing"))


@pytest.mark.asyncio
async def test_empty_messages_rejected(use_case, session):
    with pytest.raises(InvalidInputError):
        await use_case.execute(report_request(session.session_id.value, messages=[]))


def test_validate_report_checks_types():
    data = {
        "sessionId": "s",
        "agent": "a",
        "user": "u",
        "timestamp": "t",
        "mainComplaint": "m",
        "symptoms": "not a list",
        "summary": "s",
        "duration": "d",
        "severity": "mild",
        "medicationsMentioned": [],
        "recommendations": [],
    }

    assert validate_report(data) == ["symptoms"]
