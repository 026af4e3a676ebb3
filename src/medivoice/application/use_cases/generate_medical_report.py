"""Generate Medical Report use case.

One-shot transform of a finished consultation transcript into a structured
report. The report is attached to the session, which is closed in the same
write; the stored conversation is left as the turns recorded it.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Tuple

from ...core.constants import DEFAULT_SEVERITY
from ...core.exceptions import CompletionError
from ...domain.entities.consultation import ConsultationSession, MedicalReport
from ...domain.errors import (
    InvalidInputError,
    InvalidReportError,
    ReportGenerationError,
    SessionClosedError,
    SessionNotFoundError,
)
from ..dto.consultation_dto import GenerateReportRequest, ReportMessage
from ..ports.repositories.session_repo import ConsultationSessionRepository
from ..ports.services.completion_service import CompletionService

logger = logging.getLogger("medivoice")

DEFAULT_AGENT_NAME = "Medical AI"
DEFAULT_AGENT_SPECIALTY = "General Practice"
ANONYMOUS_USER = "Anonymous"

REPORT_SYSTEM_PROMPT = """You are a clinical documentation assistant. Write a concise, professional report of a voice consultation between a patient and an AI doctor.

Fill these fields:
- sessionId: the session identifier
- agent: the doctor's name and specialty, e.g. "Dr. Jane Doe, Specialty: Cardiology"
- user: the patient's name, or "Anonymous" when unknown
- timestamp: the current date and time in ISO 8601
- mainComplaint: one sentence stating the patient's main concern
- symptoms: list of symptoms the patient reported (prefer the detected keywords when given)
- summary: three to four sentences covering the conversation and the advice given
- duration: how long the symptoms have lasted, inferred from the conversation
- severity: one of "mild", "moderate", "severe" (prefer the detected severity when given)
- medicationsMentioned: list of medications discussed, empty if none
- recommendations: list of recommendations made to the patient

Respond with a single JSON object with exactly these keys and no other text.
Base the report only on the doctor's profile and the conversation."""

_LIST_FIELDS = ("symptoms", "medicationsMentioned", "recommendations")
_STRING_FIELDS = (
    "sessionId",
    "agent",
    "user",
    "timestamp",
    "mainComplaint",
    "summary",
    "duration",
    "severity",
)


class GenerateMedicalReportUseCase:
    """Use case for compiling and storing a consultation report."""

    def __init__(
        self,
        session_repository: ConsultationSessionRepository,
        completion_service: CompletionService,
        history_limit: int = 10,
    ):
        self._session_repository = session_repository
        self._completion_service = completion_service
        self._history_limit = history_limit

    async def execute(self, request: GenerateReportRequest) -> MedicalReport:
        """Execute the report compilation use case."""
        if not request.session_id or not request.messages:
            raise InvalidInputError("Invalid input: sessionId and messages are required", field="messages")

        session = await self._session_repository.get(request.session_id, request.owner_id)
        if not session:
            raise SessionNotFoundError(request.session_id)
        if session.is_closed:
            raise SessionClosedError(request.session_id)

        agent = self._agent_label(request, session)
        user = (request.user_display_name or "").strip() or ANONYMOUS_USER
        history = request.messages[-self._history_limit:]
        severity, keywords = self._latest_enrichment(history, session)

        user_prompt = self._build_user_prompt(agent, user, severity, keywords, history)

        try:
            raw = await self._completion_service.complete_json(
                REPORT_SYSTEM_PROMPT, user_prompt, scenario="medical_report"
            )
        except CompletionError as e:
            logger.error(f"❌ Report completion failed for {request.session_id}: {e.message}")
            raise ReportGenerationError(e.message) from e

        parsed = self._parse_report_json(raw)

        report_data = dict(parsed)
        report_data.update(
            {
                "sessionId": request.session_id,
                "agent": agent,
                "user": user,
                "timestamp": datetime.utcnow().isoformat() + "Z",
                # Detected severity wins over the model's own estimate
                "severity": severity or parsed.get("severity"),
            }
        )
        for key in _LIST_FIELDS:
            report_data[key] = _as_list(parsed.get(key))

        invalid = validate_report(report_data)
        if invalid:
            logger.warning(f"⚠️  Report for {request.session_id} failed validation: {invalid}")
            raise InvalidReportError(invalid)

        report = MedicalReport(
            session_id=report_data["sessionId"],
            agent=report_data["agent"],
            user=report_data["user"],
            timestamp=report_data["timestamp"],
            main_complaint=report_data["mainComplaint"],
            symptoms=report_data["symptoms"],
            summary=report_data["summary"],
            duration=report_data["duration"],
            severity=report_data["severity"],
            medications_mentioned=report_data["medicationsMentioned"],
            recommendations=report_data["recommendations"],
        )

        await self._session_repository.save_report(request.session_id, request.owner_id, report)
        logger.info(f"✅ Report stored and session {request.session_id} closed")
        return report

    @staticmethod
    def _agent_label(request: GenerateReportRequest, session: ConsultationSession) -> str:
        name = request.doctor_name or session.doctor_profile.name or DEFAULT_AGENT_NAME
        specialty = request.doctor_specialty or session.doctor_profile.specialty or DEFAULT_AGENT_SPECIALTY
        return f"{name}, Specialty: {specialty}"

    @staticmethod
    def _latest_enrichment(
        history: List[ReportMessage], session: ConsultationSession
    ) -> Tuple[str, List[str]]:
        for message in reversed(history):
            if message.role == "user" and (message.severity or message.keywords):
                return message.severity or DEFAULT_SEVERITY, list(message.keywords)

        stored = session.latest_enrichment()
        if stored:
            return stored.severity or DEFAULT_SEVERITY, list(stored.keywords)
        return DEFAULT_SEVERITY, []

    @staticmethod
    def _build_user_prompt(
        agent: str,
        user: str,
        severity: str,
        keywords: List[str],
        history: List[ReportMessage],
    ) -> str:
        transcript = "\n".join(f"{m.role.upper()}: {m.content}" for m in history)
        return (
            "SESSION CONTEXT:\n"
            f"Agent: {agent}\n"
            f"User Name: {user}\n"
            f"Detected Symptoms: {', '.join(keywords) or 'N/A'}\n"
            f"Severity: {severity}\n\n"
            "CONVERSATION HISTORY:\n"
            f"{transcript}\n\n"
            "Fill every field of the JSON object from the conversation above."
        )

    @staticmethod
    def _parse_report_json(raw: str) -> Dict[str, Any]:
        text = (raw or "").strip()
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end < start:
            logger.error(f"❌ Model returned no JSON object: {text[:200]}")
            raise ReportGenerationError("model did not return a JSON object")

        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            logger.error(f"❌ Could not parse report JSON: {e}")
            raise ReportGenerationError("model returned malformed JSON") from e

        if not isinstance(parsed, dict):
            raise ReportGenerationError("model returned malformed JSON")
        return parsed


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value] if value else []


def validate_report(data: Dict[str, Any]) -> List[str]:
    """Return the names of fields that are missing or of the wrong type."""
    invalid: List[str] = [
        key for key in _STRING_FIELDS if not isinstance(data.get(key), str)
    ]
    invalid.extend(key for key in _LIST_FIELDS if not isinstance(data.get(key), list))
    return invalid

