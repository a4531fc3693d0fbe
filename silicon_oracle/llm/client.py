"""
OpenAI chat LLM client.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from silicon_oracle.config import openai_api_key, settings
from silicon_oracle.exceptions import GenerationServiceError

DEFAULT_LLM_MODEL = settings.llm_model_name
DEFAULT_TEMPERATURE = settings.llm_temperature

logger = logging.getLogger(__name__)


def status_code_of(exc: OpenAIError) -> int:
    """HTTP status carried by an OpenAI error, 500 when there is none."""
    if isinstance(exc, APIStatusError):
        return exc.status_code or 500
    return 500


class LLMClient:
    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=openai_api_key(),
                timeout=settings.openai_timeout_sec,
                max_retries=settings.openai_max_retries,
            )
        return self._client

    async def chat(self, messages: List[Dict[str, Any]]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=messages,
            )
        except OpenAIError as exc:
            status_code = status_code_of(exc)
            logger.error("Chat completion failed", extra={"model": self.model, "status_code": status_code})
            raise GenerationServiceError(
                f"Errore API OpenAI: {status_code} - {exc}",
                status_code=status_code,
            ) from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


__all__ = ["LLMClient", "DEFAULT_LLM_MODEL", "DEFAULT_TEMPERATURE", "status_code_of"]
