"""
OpenAI text-to-speech client.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from openai import AsyncOpenAI, OpenAIError

from silicon_oracle.config import openai_api_key, settings
from silicon_oracle.exceptions import SpeechServiceError
from silicon_oracle.llm.client import status_code_of

DEFAULT_SPEECH_MODEL = settings.speech_model_name
DEFAULT_VOICE = settings.speech_voice
AUDIO_FORMAT = "mp3"

logger = logging.getLogger(__name__)


class SpeechClient:
    def __init__(
        self,
        model: str = DEFAULT_SPEECH_MODEL,
        voice: str = DEFAULT_VOICE,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.voice = voice
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

    async def synthesize(self, text: str, voice: str | None = None, speed: float | None = None) -> bytes:
        """Render plain text to mp3 bytes."""
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "voice": voice or self.voice,
            "input": text,
            "response_format": AUDIO_FORMAT,
        }
        if speed is not None:
            kwargs["speed"] = speed

        try:
            response = await self.client.audio.speech.create(**kwargs)
        except OpenAIError as exc:
            status_code = status_code_of(exc)
            logger.error("Speech synthesis failed", extra={"voice": kwargs["voice"], "status_code": status_code})
            raise SpeechServiceError(f"Errore TTS: {exc}", status_code=status_code) from exc

        audio = response.content
        if not audio:
            raise SpeechServiceError("Risposta vuota dal servizio TTS dopo una chiamata riuscita.", status_code=500)
        return audio


__all__ = ["SpeechClient", "DEFAULT_SPEECH_MODEL", "DEFAULT_VOICE", "AUDIO_FORMAT"]
