"""Shared fixtures: the bundled dataset and a scriptable fake provider."""

from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import pytest

from src.core.schemas import Candidate
from src.core.store import CandidateStore, load_candidates_csv
from src.llm.base import LLMProvider

DATASET_PATH = Path(__file__).parent.parent / "data" / "candidates.csv"


class FakeProvider(LLMProvider):
    """Returns canned plan text and narration chunks; records every call."""

    def __init__(
        self,
        plan_text: str = "",
        chunks: Sequence[str] = (),
        *,
        plan_error: Exception | None = None,
        fail_after_chunks: int | None = None,
    ) -> None:
        self.plan_text = plan_text
        self.chunks = list(chunks)
        self.plan_error = plan_error
        self.fail_after_chunks = fail_after_chunks
        self.complete_calls: list[dict[str, object]] = []
        self.stream_calls: list[dict[str, object]] = []

    @property
    def provider_id(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    @property
    def env_var(self) -> None:
        return None

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> str:
        self.complete_calls.append(
            {"prompt": prompt, "model": model, "system": system, "temperature": temperature},
        )
        if self.plan_error is not None:
            raise self.plan_error
        return self.plan_text

    async def stream(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        self.stream_calls.append(
            {"prompt": prompt, "model": model, "system": system, "temperature": temperature},
        )
        for i, chunk in enumerate(self.chunks):
            if self.fail_after_chunks is not None and i >= self.fail_after_chunks:
                msg = "provider stream failed"
                raise RuntimeError(msg)
            yield chunk


@pytest.fixture
def fake_provider() -> type[FakeProvider]:
    return FakeProvider


@pytest.fixture(scope="session")
def dataset() -> list[Candidate]:
    return load_candidates_csv(DATASET_PATH)


@pytest.fixture
def store(dataset: list[Candidate]) -> CandidateStore:
    return CandidateStore(dataset)
