"""
Post-processing of raw model replies before they are stored or spoken.
"""

import re

from medivoice.core.constants import DEFAULT_LANGUAGE

# Parenthetical/bracketed asides the model leaks despite instructions
_META_PARENTHETICAL = re.compile(
    r"\(\s*(?:follow[-\s]*up(?:\s+questions?)?|this\s+will|this\s+is|note|translation|translated|"
    r"in\s+english|english|pause|waiting|response)\b[^)]*\)",
    re.IGNORECASE,
)
_META_BRACKETED = re.compile(
    r"\[\s*(?:pause|smiles?|laughs?|note|translation|waits?)\b[^\]]*\]",
    re.IGNORECASE,
)
_SPEAKER_LABEL = re.compile(r"^\s*(?:assistant|doctor)\s*:\s*", re.IGNORECASE)
_TRANSLATION_MARKER = re.compile(r"\b(?:translation|english)\s*:", re.IGNORECASE)
_MARKDOWN_EMPHASIS = re.compile(r"\*+")
_WHITESPACE = re.compile(r"\s+")


def _strip_once(text: str, language: str) -> str:
    if language != DEFAULT_LANGUAGE:
        marker = _TRANSLATION_MARKER.search(text)
        if marker and text[: marker.start()].strip():
            # Model code-switched; keep only the target-language part
            text = text[: marker.start()]
    text = _META_PARENTHETICAL.sub(" ", text)
    text = _META_BRACKETED.sub(" ", text)
    text = _SPEAKER_LABEL.sub("", text)
    text = _TRANSLATION_MARKER.sub(" ", text)
    text = _MARKDOWN_EMPHASIS.sub("", text)
    return text


def sanitize(raw_text: str, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Remove meta-commentary and normalise whitespace in a model reply.

    Never raises; if nothing survives cleaning the trimmed original is
    returned instead. Applying it twice gives the same result as once.
    """
    if not raw_text:
        return ""
    language = (language or DEFAULT_LANGUAGE).strip().lower()

    text = raw_text
    while True:
        cleaned = _strip_once(text, language)
        if cleaned == text:
            break
        text = cleaned

    text = _WHITESPACE.sub(" ", text).strip()
    if not text:
        return _WHITESPACE.sub(" ", raw_text).strip()
    return text
