"""HTTP transport: POST /api/chat streams phase events as NDJSON.

Usage:
    POST /api/chat  {"messages": [{"role": "user", "content": "senior React devs in the US"}]}
    GET  /health
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from starlette.responses import StreamingResponse

from src.core.config import Settings
from src.core.schemas import ChatRequest
from src.core.store import CandidateStore
from src.llm import get_provider
from src.llm.base import LLMProvider
from src.pipeline.orchestrator import QueryPipeline, QueryResult
from src.pipeline.protocol import QueueEventSink

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


async def relay_events(
    sink: QueueEventSink,
    task: asyncio.Task[QueryResult],
) -> AsyncGenerator[bytes, None]:
    """Forward a query's encoded events to the HTTP response body.

    If the response stops early (client disconnected), the sink is marked
    disconnected and the query task is cancelled.
    """
    try:
        async for line in sink.lines():
            yield line.encode("utf-8")
        await task
    finally:
        if not task.done():
            logger.info("Client disconnected, cancelling query")
            sink.disconnect()
            task.cancel()


def create_app(
    settings: Settings | None = None,
    *,
    store: CandidateStore | None = None,
    provider: LLMProvider | None = None,
) -> FastAPI:
    """Build the app. Store and provider are created at startup unless injected."""
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_store = store if store is not None else CandidateStore.from_csv(settings.dataset.path)
        app_provider = provider if provider is not None else get_provider(settings.llm.provider)
        app.state.store = app_store
        app.state.provider_id = app_provider.provider_id
        app.state.pipeline = QueryPipeline(app_store, app_provider, settings)
        logger.info(
            "Serving %d candidates with provider '%s'",
            len(app_store), app_provider.provider_id,
        )
        yield

    app = FastAPI(title="candidate-query-engine", lifespan=lifespan)

    @app.post("/api/chat")
    async def chat(body: ChatRequest, request: Request) -> StreamingResponse:
        pipeline: QueryPipeline = request.app.state.pipeline
        sink = QueueEventSink(
            maxsize=settings.stream.queue_size,
            write_timeout=settings.stream.write_timeout_seconds,
        )
        task = asyncio.create_task(pipeline.run(body.utterance, sink))
        return StreamingResponse(relay_events(sink, task), media_type=NDJSON_MEDIA_TYPE)

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        return {
            "status": "healthy",
            "provider": request.app.state.provider_id,
            "candidates": len(request.app.state.store),
        }

    return app
