"""
System prompt selection for consultation turns.

One greeting and one ongoing template per supported language. The stage is
derived by the caller from the transcript (greeting iff it is empty); an
unknown language tag falls back to English.
"""

from typing import Dict

from medivoice.core.constants import DEFAULT_LANGUAGE
from medivoice.domain.enums.consultation import ConversationStage

GREETING_WORD_LIMIT = 50
ONGOING_WORD_LIMIT = 60

# Per-language specifics interpolated into the shared template bodies
_LANGUAGE_RULES: Dict[str, Dict[str, str]] = {
    "english": {
        "name": "English",
        "greeting_hint": "",
        "script_rule": "Use plain, simple English a patient can follow by ear.",
    },
    "yoruba": {
        "name": "Yoruba",
        "greeting_hint": ' (for example "Ẹ n lẹ o")',
        "script_rule": "Use standard Yoruba with tone marks. Do not switch to English and do not add translations.",
    },
    "igbo": {
        "name": "Igbo",
        "greeting_hint": ' (for example "Ndewo")',
        "script_rule": "Use standard Igbo. Do not switch to English and do not add translations.",
    },
    "hausa": {
        "name": "Hausa",
        "greeting_hint": ' (for example "Sannu")',
        "script_rule": "Use standard Hausa. Do not switch to English and do not add translations.",
    },
}

_GREETING_BODY = """You are {{doctor_name}}, a {{specialty}} specialist, opening a voice consultation in {name}.

This is your first interaction with the patient. Follow this order exactly:
1. Greet the patient warmly{greeting_hint}.
2. Introduce yourself by name and specialty.
3. Ask for the patient's name.
4. Ask for the patient's age.
5. Ask what health concern brings them in today.

Rules:
- Speak only {name}. {script_rule}
- Keep the whole reply under {limit} words; it will be read aloud.
- No notes, stage directions, translations or text in parentheses."""

_ONGOING_BODY = """You are {{doctor_name}}, a {{specialty}} specialist, continuing a voice consultation in {name}.

Rules:
- Speak only {name} for the entire reply. {script_rule}
- Ask at most one or two focused follow-up questions per reply.
- Keep the reply under {limit} words; it will be read aloud.
- Be empathetic and culturally aware. Never give a definitive diagnosis; suggest possible causes and recommend a proper examination.
- If symptoms sound severe, advise the patient to seek immediate medical attention.
- No meta-commentary: no notes, stage directions, translations or text in parentheses."""


def _build_templates() -> Dict[str, Dict[ConversationStage, str]]:
    templates: Dict[str, Dict[ConversationStage, str]] = {}
    for tag, rules in _LANGUAGE_RULES.items():
        templates[tag] = {
            ConversationStage.GREETING: _GREETING_BODY.format(limit=GREETING_WORD_LIMIT, **rules),
            ConversationStage.ONGOING: _ONGOING_BODY.format(limit=ONGOING_WORD_LIMIT, **rules),
        }
    return templates


PROMPT_TEMPLATES = _build_templates()

SUPPORTED_LANGUAGES = tuple(PROMPT_TEMPLATES.keys())


def normalize_language(language: str) -> str:
    """Lower-case a language tag; unknown tags map to English."""
    tag = (language or "").strip().lower()
    return tag if tag in PROMPT_TEMPLATES else DEFAULT_LANGUAGE


def select_system_prompt(
    doctor_name: str,
    specialty: str,
    language: str,
    stage: ConversationStage,
) -> str:
    """Return the system instruction for one consultation turn."""
    templates = PROMPT_TEMPLATES[normalize_language(language)]
    return templates[ConversationStage(stage)].format(
        doctor_name=doctor_name,
        specialty=specialty,
    )


# Sent to the model instead of the caller's first utterance on a greeting turn
GREETING_INSTRUCTION = (
    "This is the first interaction with a new patient. "
    "Follow the greeting protocol: greet, introduce yourself, then ask for "
    "their name, their age and what brings them in today."
)
