"""
N-ATLAS medical keyword enrichment over HTTP.

analyze() retries with exponential backoff and gives up quietly: callers
treat a None result as "no enrichment for this text".
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import aiohttp

from medivoice.application.ports.services.enrichment_service import (
    EnrichmentAnalysis,
    EnrichmentService,
)
from medivoice.core.config import NatlasSettings
from medivoice.core.exceptions import EnrichmentError

logger = logging.getLogger(__name__)

# Retrying cannot fix these
NON_RETRYABLE_STATUSES = {401, 404}


class NatlasEnrichmentService(EnrichmentService):
    """Client for the N-ATLAS analysis API."""

    def __init__(
        self,
        settings: Optional[NatlasSettings] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or NatlasSettings()
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay before the retry that follows a failed attempt (1-based)."""
        delay = self._settings.base_delay_seconds * (2 ** (attempt - 1))
        return min(delay, self._settings.max_delay_seconds)

    async def analyze(self, text: str, language: str) -> Optional[EnrichmentAnalysis]:
        max_attempts = self._settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                logger.info(f"N-ATLAS analyze attempt {attempt}/{max_attempts}")
                payload = await self._post("/analyze", {"text": text, "language": language})
                analysis = EnrichmentAnalysis.from_payload(payload)
                logger.info(
                    f"✅ N-ATLAS analysis on attempt {attempt}: "
                    f"{analysis.match_type} severity={analysis.severity}"
                )
                return analysis
            except EnrichmentError as e:
                logger.warning(f"⚠️  N-ATLAS attempt {attempt}/{max_attempts} failed: {e.message}")
                if e.status in NON_RETRYABLE_STATUSES:
                    logger.error(f"❌ N-ATLAS returned {e.status}; not retrying")
                    return None

            if attempt < max_attempts:
                delay = self.backoff_delay(attempt)
                logger.info(f"Retrying N-ATLAS in {delay:.1f}s")
                await self._sleep(delay)

        logger.error("❌ N-ATLAS analysis failed after all attempts")
        return None

    async def extract_symptoms(self, text: str, language: str) -> List[str]:
        try:
            payload = await self._post("/quick-symptoms", {"text": text, "language": language})
        except EnrichmentError as e:
            logger.warning(f"⚠️  N-ATLAS quick-symptoms failed: {e.message}")
            return []
        symptoms = payload.get("symptoms") or []
        return list(symptoms) if isinstance(symptoms, list) else []

    async def check_health(self) -> bool:
        url = f"{self._settings.api_url}/health"
        timeout = aiohttp.ClientTimeout(total=self._settings.health_timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    data = await response.json(content_type=None)
        except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as e:
            logger.warning(f"⚠️  N-ATLAS health check failed: {e}")
            return False
        if not isinstance(data, dict):
            return False
        return data.get("status") == "healthy" and bool(data.get("cache_loaded"))

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._settings.api_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self._settings.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=body) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise EnrichmentError(
                            f"HTTP {response.status}: {error_text[:200]}",
                            status=response.status,
                        )
                    payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise EnrichmentError(f"timed out after {self._settings.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise EnrichmentError(str(e)) from e
        except ValueError as e:
            raise EnrichmentError(f"malformed response: {e}") from e

        if not isinstance(payload, dict):
            raise EnrichmentError("malformed response: expected a JSON object")
        return payload
