"""
Medical keyword enrichment service interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from medivoice.core.constants import DEFAULT_SEVERITY
from medivoice.domain.entities.consultation import EnrichmentData


@dataclass
class EnrichmentAnalysis:
    """Result of analysing one piece of patient text."""

    success: bool
    translation: str = ""
    cultural_context: str = ""
    medical_keywords: List[str] = field(default_factory=list)
    severity: str = DEFAULT_SEVERITY
    enhanced_notes: str = ""
    match_type: str = "unknown"
    similarity_score: float = 0.0
    cached: bool = False
    recommended_specialties: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "EnrichmentAnalysis":
        keywords = payload.get("medical_keywords") or []
        specialties = payload.get("recommended_specialties") or []
        return cls(
            success=bool(payload.get("success")),
            translation=payload.get("translation") or "",
            cultural_context=payload.get("cultural_context") or "",
            medical_keywords=list(keywords) if isinstance(keywords, list) else [str(keywords)],
            severity=payload.get("severity") or DEFAULT_SEVERITY,
            enhanced_notes=payload.get("enhanced_notes") or "",
            match_type=payload.get("match_type") or "unknown",
            similarity_score=float(payload.get("similarity_score") or 0.0),
            cached=bool(payload.get("cached", False)),
            recommended_specialties=list(specialties) if isinstance(specialties, list) else [],
        )

    def to_enrichment_data(self) -> EnrichmentData:
        return EnrichmentData(
            keywords=list(self.medical_keywords),
            severity=self.severity or DEFAULT_SEVERITY,
            translation=self.translation,
            cultural_context=self.cultural_context,
        )


class EnrichmentService(ABC):
    """Abstract service extracting keywords/severity/context from free text."""

    @abstractmethod
    async def analyze(self, text: str, language: str) -> Optional[EnrichmentAnalysis]:
        """
        Analyse patient text.

        Returns:
            The analysis, or None once every attempt has failed.
        """
        pass

    @abstractmethod
    async def extract_symptoms(self, text: str, language: str) -> List[str]:
        """Quick symptom extraction; empty list on failure."""
        pass

    @abstractmethod
    async def check_health(self) -> bool:
        """True when the upstream service is healthy and its cache is loaded."""
        pass
