"""Abstract base class for reasoning providers and shared response handling."""

import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_code_fence(raw_text: str) -> str:
    """Remove a ```json ... ``` (or bare ``` ... ```) wrapper if present."""
    cleaned = _FENCE_OPEN.sub("", raw_text.strip())
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


class LLMProvider(ABC):
    """Base class that every reasoning provider must implement.

    Two call shapes are consumed by the pipeline: a single-shot
    completion (plan generation) and a streamed completion (narration).
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai')."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> str:
        """Send a prompt and return the full response text.

        Args:
            prompt: User-side text.
            model: Override the provider's default model. None uses default.
            system: System instruction.
            temperature: Sampling temperature. None uses the SDK default.

        Returns:
            Raw text response from the model.
        """

    @abstractmethod
    def stream(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Send a prompt and yield response text chunks as they arrive.

        Chunk boundaries are whatever the SDK delivers; callers must treat
        each chunk as opaque text.
        """
