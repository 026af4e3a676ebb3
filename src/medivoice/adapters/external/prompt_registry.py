"""
Prompt registry for LLM scenarios and version tracking.

Every completion is tagged with its scenario and the version of the prompt
that produced it, so telemetry can tell prompt revisions apart.
"""

from __future__ import annotations

from enum import Enum


class PromptScenario(str, Enum):
    """LLM scenarios for telemetry and prompt versioning."""

    CONSULTATION_GREETING = "consultation_greeting"
    CONSULTATION_TURN = "consultation_turn"
    MEDICAL_REPORT = "medical_report"
    DOCTOR_SUGGESTION = "doctor_suggestion"


# Bump the version when the corresponding prompt text changes
PROMPT_VERSIONS: dict[PromptScenario, str] = {
    PromptScenario.CONSULTATION_GREETING: "GREETING_V1_2026-10-01",
    PromptScenario.CONSULTATION_TURN: "TURN_V1_2026-10-01",
    PromptScenario.MEDICAL_REPORT: "REPORT_V1_2026-10-01",
    PromptScenario.DOCTOR_SUGGESTION: "SUGGESTION_V1_2026-10-01",
}


__all__ = ["PromptScenario", "PROMPT_VERSIONS"]
