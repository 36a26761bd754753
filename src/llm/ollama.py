"""Ollama local reasoning provider (OpenAI-compatible API)."""

import os
from typing import Any

from src.llm.openai import OpenAIProvider, _async_client

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(OpenAIProvider):
    """Reasoning provider using a local Ollama instance via OpenAI-compatible API."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:  # type: ignore[override]
        return None

    def _client(self) -> Any:
        base_url = os.environ.get("OLLAMA_BASE_URL", _OLLAMA_BASE_URL)
        return _async_client(base_url=base_url, api_key="ollama")
