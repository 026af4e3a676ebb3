"""Suggest Doctors use case.

Matches a patient's free-text notes to personas from the doctor catalog.
Enrichment is best effort; when the model's pick cannot be used, keyword
matching over the catalog takes over, then the general practitioners.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from ...core.constants import DEFAULT_SEVERITY, DOCTOR_CATALOG
from ...domain.errors import InvalidInputError
from ..dto.consultation_dto import DoctorSuggestionRequest, DoctorSuggestionResponse
from ..ports.services.completion_service import CompletionService
from ..ports.services.enrichment_service import EnrichmentAnalysis, EnrichmentService
from ..utils.prompt_selector import normalize_language

logger = logging.getLogger("medivoice")

MAX_SUGGESTIONS = 3
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class SuggestDoctorsUseCase:
    """Use case for recommending doctor personas from patient notes."""

    def __init__(
        self,
        completion_service: CompletionService,
        enrichment_service: EnrichmentService,
        catalog: Optional[List[Dict[str, Any]]] = None,
    ):
        self._completion_service = completion_service
        self._enrichment_service = enrichment_service
        self._catalog = catalog if catalog is not None else DOCTOR_CATALOG

    async def execute(self, request: DoctorSuggestionRequest) -> DoctorSuggestionResponse:
        notes = (request.notes or "").strip()
        if not notes:
            raise InvalidInputError("Invalid notes", field="notes")
        language = normalize_language(request.language)

        analysis = await self._analyze(notes, language)
        symptoms = list(analysis.medical_keywords) if analysis else []
        severity = analysis.severity if analysis else DEFAULT_SEVERITY
        enhanced_notes = (analysis.enhanced_notes if analysis else "") or notes

        system_prompt = self._build_system_prompt(symptoms, severity)
        user_prompt = (
            f"Patient symptoms: {enhanced_notes}\n\n"
            f"Return a JSON array of the {MAX_SUGGESTIONS - 1}-{MAX_SUGGESTIONS} most relevant doctor names from the list."
        )

        names: List[Any] = []
        try:
            raw = await self._completion_service.complete(
                system_prompt,
                [{"role": "user", "content": user_prompt}],
                scenario="doctor_suggestion",
            )
            names = parse_name_list(raw)
        except Exception as e:
            logger.warning(f"⚠️  Doctor suggestion completion failed: {e}")

        doctors = self._match_names(names)
        fallback_used = not doctors
        if fallback_used:
            logger.warning("⚠️  Model suggestion unusable, falling back to keyword matching")
            doctors = self._keyword_fallback(notes, symptoms)
        else:
            logger.info(f"✅ Matched {len(doctors)} doctors from model suggestion")

        return DoctorSuggestionResponse(
            doctors=doctors,
            natlas_enhancement=self._enhancement_summary(analysis, language, fallback_used),
            fallback_used=fallback_used,
        )

    async def _analyze(self, notes: str, language: str) -> Optional[EnrichmentAnalysis]:
        try:
            analysis = await self._enrichment_service.analyze(notes, language)
        except Exception as e:
            logger.warning(f"⚠️  Enrichment failed, suggesting without it: {e}")
            return None
        if analysis is None or not analysis.success:
            return None
        return analysis

    def _build_system_prompt(self, symptoms: List[str], severity: str) -> str:
        roster = json.dumps([{"name": d["name"], "specialty": d["specialty"]} for d in self._catalog])
        prompt = (
            f"You are a medical assistant. Based on the patient's symptoms, suggest "
            f"{MAX_SUGGESTIONS - 1}-{MAX_SUGGESTIONS} relevant doctors from this list:\n{roster}\n"
        )
        if symptoms:
            prompt += f"\nDetected symptoms: {', '.join(symptoms)}\nSeverity: {severity}\n"
        prompt += "\nReturn ONLY a JSON array of doctor names, no explanations."
        return prompt

    def _match_names(self, names: List[Any]) -> List[Dict[str, Any]]:
        wanted = []
        for item in names:
            name = item.get("name") if isinstance(item, dict) else item
            if isinstance(name, str) and name.strip():
                wanted.append(name.strip().lower())

        matched = [
            doctor for doctor in self._catalog
            if any(name in doctor["name"].lower() for name in wanted)
        ]
        return matched[:MAX_SUGGESTIONS]

    def _keyword_fallback(self, notes: str, symptoms: List[str]) -> List[Dict[str, Any]]:
        keywords = [s.lower() for s in symptoms if s] or [
            word for word in notes.lower().split() if len(word) > 4
        ]
        matched = [
            doctor for doctor in self._catalog
            if any(
                keyword in f"{doctor['name']} {doctor['specialty']} {doctor['description']}".lower()
                for keyword in keywords
            )
        ]
        if matched:
            return matched[:MAX_SUGGESTIONS]

        general = [
            doctor for doctor in self._catalog
            if "general" in doctor["specialty"].lower() or "family" in doctor["specialty"].lower()
        ]
        return general[:2]

    @staticmethod
    def _enhancement_summary(
        analysis: Optional[EnrichmentAnalysis], language: str, fallback_used: bool
    ) -> Optional[Dict[str, Any]]:
        if analysis is None:
            return None
        match_type = analysis.match_type
        if fallback_used and match_type == "unknown":
            match_type = "fallback"
        return {
            "language": language,
            "translation": analysis.translation,
            "culturalContext": analysis.cultural_context,
            "severity": analysis.severity,
            "detectedSymptoms": list(analysis.medical_keywords),
            "recommendedSpecialties": list(analysis.recommended_specialties),
            "matchType": match_type,
            "similarityScore": analysis.similarity_score,
            "cached": analysis.cached,
        }


def parse_name_list(raw: str) -> List[Any]:
    """Parse a JSON array from model output, tolerating surrounding prose."""
    text = (raw or "").strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_ARRAY.search(text)
        if not match:
            return []
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            logger.warning("⚠️  Could not parse doctor names from model output")
            return []
    return parsed if isinstance(parsed, list) else []
