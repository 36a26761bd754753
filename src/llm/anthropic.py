"""Anthropic Claude reasoning provider."""

import logging
import os
from collections.abc import AsyncIterator
from typing import Any

from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_MAX_TOKENS = 1024


class AnthropicProvider(LLMProvider):
    """Reasoning provider using the Anthropic Claude API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def _client(self) -> Any:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for this provider. "
                "Install with: pip install 'candidate-query-engine[anthropic]'"
            )
            raise ImportError(msg) from None

        return anthropic.AsyncAnthropic(api_key=api_key)

    def _request(
        self, prompt: str, model: str | None, system: str, temperature: float | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model or self.default_model,
            "max_tokens": _MAX_TOKENS,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        return kwargs

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> str:
        client = self._client()
        kwargs = self._request(prompt, model, system, temperature)

        logger.info("Sending prompt to Anthropic API (%s)...", kwargs["model"])
        async with client:
            message = await client.messages.create(**kwargs)

        return message.content[0].text  # type: ignore[no-any-return]

    async def stream(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        client = self._client()
        kwargs = self._request(prompt, model, system, temperature)

        logger.info("Streaming from Anthropic API (%s)...", kwargs["model"])
        async with client, client.messages.stream(**kwargs) as stream:
            async for text in stream.text_stream:
                if text:
                    yield text
