"""Google Gemini reasoning provider (google-genai SDK)."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Reasoning provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    def _client_and_config(self, system: str, temperature: float | None) -> tuple[Any, Any]:
        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GOOGLE_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for this provider. "
                "Install with: pip install 'candidate-query-engine[gemini]'"
            )
            raise ImportError(msg) from None

        config = genai_types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
        )
        return genai.Client(api_key=api_key), config

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> str:
        client, config = self._client_and_config(system, temperature)
        use_model = model or self.default_model

        logger.info("Sending prompt to Gemini API (%s)...", use_model)
        try:
            response = await client.aio.models.generate_content(
                model=use_model,
                contents=prompt,
                config=config,
            )
        finally:
            await client.aio.aclose()

        return response.text or ""

    async def stream(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        client, config = self._client_and_config(system, temperature)
        use_model = model or self.default_model

        logger.info("Streaming from Gemini API (%s)...", use_model)
        try:
            response = await client.aio.models.generate_content_stream(
                model=use_model,
                contents=prompt,
                config=config,
            )
            async with aclosing(response):
                async for chunk in response:
                    if chunk.text:
                        yield chunk.text
        finally:
            await client.aio.aclose()
