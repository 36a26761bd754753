"""OpenAI reasoning provider."""

import logging
import os
from collections.abc import AsyncIterator
from typing import Any

from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


def _async_client(**kwargs: Any) -> Any:
    try:
        import openai
    except ImportError:
        msg = (
            "openai is required for this provider. "
            "Install with: pip install 'candidate-query-engine[openai]'"
        )
        raise ImportError(msg) from None
    return openai.AsyncOpenAI(**kwargs)


def _messages(prompt: str, system: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]


class OpenAIProvider(LLMProvider):
    """Reasoning provider using the OpenAI chat completions API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def _client(self) -> Any:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)
        return _async_client(api_key=api_key)

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> str:
        client = self._client()
        use_model = model or self.default_model

        logger.info("Sending prompt to %s (%s)...", self.provider_id, use_model)
        kwargs: dict[str, Any] = {"model": use_model, "messages": _messages(prompt, system)}
        if temperature is not None:
            kwargs["temperature"] = temperature
        async with client:
            response = await client.chat.completions.create(**kwargs)

        return response.choices[0].message.content or ""

    async def stream(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        client = self._client()
        use_model = model or self.default_model

        logger.info("Streaming from %s (%s)...", self.provider_id, use_model)
        kwargs: dict[str, Any] = {
            "model": use_model,
            "messages": _messages(prompt, system),
            "stream": True,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        # Closing this generator early (consumer gone) closes the response
        # and the client, dropping the in-flight HTTP stream.
        async with client:
            response = await client.chat.completions.create(**kwargs)
            async with response:
                async for chunk in response:
                    if not chunk.choices:
                        continue
                    content = chunk.choices[0].delta.content
                    if content:
                        yield content
