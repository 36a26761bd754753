"""Reasoning providers, resolved by name on first use.

SDK modules are imported only when their provider is instantiated, so the
core pipeline runs with none of them installed.

Usage:
    from src.llm import get_provider

    provider = get_provider("openai")
    text = await provider.complete(message, system=PLAN_SYSTEM_PROMPT)
    async for chunk in provider.stream(context, system=NARRATION_SYSTEM_PROMPT):
        ...
"""

import importlib

from src.llm.base import LLMProvider, strip_code_fence

__all__ = [
    "LLMProvider",
    "available_providers",
    "get_provider",
    "provider_class",
    "strip_code_fence",
]

# provider name → "module:ClassName"
_PROVIDERS: dict[str, str] = {
    "anthropic": "src.llm.anthropic:AnthropicProvider",
    "gemini": "src.llm.gemini:GeminiProvider",
    "ollama": "src.llm.ollama:OllamaProvider",
    "openai": "src.llm.openai:OpenAIProvider",
}


def provider_class(name: str) -> type[LLMProvider]:
    """Resolve a provider name to its adapter class.

    Raises:
        ValueError: If the provider name is not registered.
    """
    target = _PROVIDERS.get(name)
    if target is None:
        msg = f"Unknown LLM provider '{name}'. Available: {', '.join(available_providers())}"
        raise ValueError(msg)
    module_path, _, class_name = target.partition(":")
    cls: type[LLMProvider] = getattr(importlib.import_module(module_path), class_name)
    return cls


def get_provider(name: str) -> LLMProvider:
    """Instantiate a provider by name (anthropic, gemini, ollama, openai)."""
    return provider_class(name)()


def available_providers() -> list[str]:
    return sorted(_PROVIDERS)
