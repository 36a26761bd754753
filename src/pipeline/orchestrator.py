"""Orchestrator: the per-query think → act1 → act2 → speak state machine.

Data flow:
  1. THINK:  planner turns the utterance into {filter, rank} plans
  2. ACT1:   filter engine narrows the candidate store
  3. ACT2:   ranking engine orders the survivors
  4. SPEAK:  narrator streams a summary, one event per chunk
  5. DONE:   stream closed

Any failure in 1-4 moves to ERROR: one error event, then close. This is the
only place that catches broadly; the components below let errors propagate.
"""

import asyncio
import logging
from contextlib import aclosing
from enum import Enum
from typing import Any

from src.core.config import Settings
from src.core.schemas import Candidate, Phase, PhaseEvent, QueryPlans
from src.core.store import CandidateStore
from src.llm.base import LLMProvider
from src.pipeline.matcher import filter_candidates
from src.pipeline.narrator import narrate
from src.pipeline.planner import generate_plan
from src.pipeline.protocol import EventSink, TransportError
from src.pipeline.ranker import rank_candidates, unresolved_sort_fields

logger = logging.getLogger(__name__)

PHASE_MESSAGES = {
    Phase.THINK: "Analyzing your question and planning the search...",
    Phase.ACT1: "Filtering candidates based on your criteria...",
    Phase.ACT2: "Ranking candidates by relevance...",
    Phase.SPEAK: "Generating your personalized summary...",
}

USER_ERROR_MESSAGE = "Sorry, there was an error processing your request. Please try again."


class PipelineState(Enum):
    THINK = "think"
    ACT1 = "act1"
    ACT2 = "act2"
    SPEAK = "speak"
    DONE = "done"
    ERROR = "error"


class QueryResult:
    """Summary of a single query execution."""

    def __init__(self, message: str) -> None:
        self.message = message
        self.state = PipelineState.THINK
        self.plans: QueryPlans | None = None
        self.filtered_count = 0
        self.ranked_ids: list[str] = []
        self.narration = ""
        self.error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE


class QueryPipeline:
    """Runs queries against a shared, read-only candidate store.

    One instance serves many concurrent queries; per-query state lives in
    the QueryResult and the sink passed to run().
    """

    def __init__(
        self,
        store: CandidateStore,
        provider: LLMProvider,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._settings = settings or Settings()

    async def run(self, message: str, sink: EventSink) -> QueryResult:
        """Execute one query, writing phase events to ``sink``.

        The sink is closed exactly once, whatever the outcome. Cancellation
        (consumer gone) closes the sink and propagates.
        """
        result = QueryResult(message)
        try:
            await self._run_phases(result, sink)
            result.state = PipelineState.DONE
        except asyncio.CancelledError:
            logger.info("Query cancelled during %s", result.state.value)
            result.error = "cancelled"
            result.state = PipelineState.ERROR
            raise
        except TransportError as e:
            logger.warning("Event stream failed during %s: %s", result.state.value, e)
            result.error = str(e)
            result.state = PipelineState.ERROR
        except Exception as e:
            logger.exception("Query failed during %s", result.state.value)
            result.error = str(e) or type(e).__name__
            result.state = PipelineState.ERROR
            await self._send_error(sink)
        finally:
            await sink.close()
        return result

    async def _run_phases(self, result: QueryResult, sink: EventSink) -> None:
        llm = self._settings.llm

        # THINK
        result.state = PipelineState.THINK
        await sink.send(PhaseEvent(phase=Phase.THINK, message=PHASE_MESSAGES[Phase.THINK]))
        plans = await generate_plan(
            result.message,
            self._provider,
            model=llm.plan_model,
            temperature=llm.plan_temperature,
        )
        result.plans = plans
        await sink.send(PhaseEvent(phase=Phase.THINK, data={
            "filterPlan": plans.filter.model_dump(exclude_none=True),
            "rankingPlan": plans.rank.model_dump(exclude_none=True),
        }))

        # ACT1
        result.state = PipelineState.ACT1
        await sink.send(PhaseEvent(phase=Phase.ACT1, message=PHASE_MESSAGES[Phase.ACT1]))
        filtered = filter_candidates(self._store.all(), plans.filter)
        result.filtered_count = len(filtered)
        logger.info("Matched %d of %d candidates", len(filtered), len(self._store))
        await sink.send(PhaseEvent(phase=Phase.ACT1, data={
            "count": len(filtered),
            "matchCount": len(filtered),
            "filterPlan": plans.filter.model_dump(exclude_none=True),
        }))

        # ACT2
        result.state = PipelineState.ACT2
        await sink.send(PhaseEvent(phase=Phase.ACT2, message=PHASE_MESSAGES[Phase.ACT2]))
        ranked = rank_candidates(filtered, plans.rank)
        result.ranked_ids = [c.id for c in ranked]
        await sink.send(PhaseEvent(phase=Phase.ACT2, data=self._ranking_payload(ranked, plans)))

        # SPEAK
        result.state = PipelineState.SPEAK
        await sink.send(PhaseEvent(phase=Phase.SPEAK, message=PHASE_MESSAGES[Phase.SPEAK]))
        narration = self._settings.narration
        chunks: list[str] = []
        stream = narrate(
            result.message,
            ranked,
            self._provider,
            model=llm.narration_model,
            temperature=llm.narration_temperature,
            top_n=narration.top_candidates,
            top_skills=narration.top_skills,
        )
        async with aclosing(stream):
            async for chunk in stream:
                chunks.append(chunk)
                await sink.send(PhaseEvent(phase=Phase.SPEAK, data={"content": chunk}))
        result.narration = "".join(chunks)

    @staticmethod
    def _ranking_payload(ranked: list[Candidate], plans: QueryPlans) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "count": len(ranked),
            "matchCount": len(ranked),
            "topCandidates": [c.model_dump(mode="json") for c in ranked],
            "rankingPlan": plans.rank.model_dump(exclude_none=True),
            "rankedIds": [c.id for c in ranked],
        }
        ignored = unresolved_sort_fields(plans.rank)
        if ignored:
            payload["ignoredFields"] = ignored
        return payload

    @staticmethod
    async def _send_error(sink: EventSink) -> None:
        try:
            await sink.send(PhaseEvent(phase=Phase.ERROR, message=USER_ERROR_MESSAGE))
        except TransportError as e:
            logger.warning("Could not deliver error event: %s", e)
