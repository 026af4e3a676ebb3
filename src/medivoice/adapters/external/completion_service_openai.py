"""
Azure OpenAI implementation of CompletionService.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from medivoice.application.ports.services.completion_service import CompletionService
from medivoice.core.ai_client import AzureAIClient
from medivoice.core.ai_factory import get_ai_client
from medivoice.core.config import CompletionSettings
from medivoice.core.constants import EMPTY_COMPLETION_TEXT
from medivoice.core.exceptions import CompletionError

from .llm_gateway import call_llm_with_telemetry
from .prompt_registry import PromptScenario

logger = logging.getLogger(__name__)


class OpenAICompletionService(CompletionService):
    """Chat completions over Azure OpenAI, bounded by a per-call timeout."""

    def __init__(
        self,
        ai_client: Optional[AzureAIClient] = None,
        settings: Optional[CompletionSettings] = None,
    ) -> None:
        # Built on first call; missing credentials surface as CompletionError
        self._client = ai_client
        self._settings = settings or CompletionSettings()

    def _get_client(self, scenario: PromptScenario) -> AzureAIClient:
        if self._client is None:
            try:
                self._client = get_ai_client()
            except ValueError as e:
                raise CompletionError(str(e), {"scenario": scenario.value}) from e
        return self._client

    async def complete(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        scenario: str = "consultation_turn",
    ) -> str:
        messages = [{"role": "system", "content": system_prompt}] + list(history)
        text = await self._call(
            PromptScenario(scenario),
            messages,
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        return text or EMPTY_COMPLETION_TEXT

    async def complete_json(self, system_prompt: str, user_prompt: str, scenario: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self._call(
            PromptScenario(scenario),
            messages,
            temperature=self._settings.report_temperature,
            max_tokens=self._settings.report_max_tokens,
            response_format={"type": "json_object"},
        )

    async def _call(self, scenario: PromptScenario, messages: List[Dict[str, str]], **kwargs) -> str:
        client = self._get_client(scenario)
        try:
            response = await asyncio.wait_for(
                call_llm_with_telemetry(client, scenario, messages, **kwargs),
                timeout=self._settings.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise CompletionError(
                f"completion timed out after {self._settings.timeout_seconds}s",
                {"scenario": scenario.value},
            ) from e
        except Exception as e:
            raise CompletionError(str(e), {"scenario": scenario.value}) from e

        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return (choices[0].message.content or "").strip()
