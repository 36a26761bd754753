"""Event Stream Protocol: newline-delimited JSON phase events.

Each event is one JSON object on its own line:
    {"phase": "think"|"act1"|"act2"|"speak"|"error", "message"?: str, "data"?: {...}}

Sinks are the outbound side. ``send`` either delivers the event or raises a
TransportError; a closed, disconnected or stalled transport never fails silently.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from typing import TextIO

from src.core.schemas import PhaseEvent

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The outbound event stream can no longer accept writes."""


class StreamClosedError(TransportError):
    """Write attempted on a sink that is closed or whose consumer went away."""


class StreamWriteTimeout(TransportError):
    """A single write exceeded the configured timeout."""


def encode_event(event: PhaseEvent) -> str:
    """Serialize an event to one protocol line (trailing newline included)."""
    return event.model_dump_json(exclude_none=True) + "\n"


def decode_event(line: str) -> PhaseEvent:
    """Parse one protocol line back into a PhaseEvent."""
    return PhaseEvent.model_validate(json.loads(line))


def decode_stream(lines: Iterable[str]) -> list[PhaseEvent]:
    """Parse a sequence of lines (or raw text chunks), skipping blank lines."""
    text = "".join(lines)
    return [decode_event(line) for line in text.splitlines() if line.strip()]


class EventSink(ABC):
    """Outbound side of a query's event stream."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once close() has been called or the consumer has gone away."""

    @abstractmethod
    async def send(self, event: PhaseEvent) -> None:
        """Deliver one event.

        Raises:
            StreamClosedError: The sink is closed or the consumer disconnected.
            StreamWriteTimeout: The write did not complete in time.
        """

    @abstractmethod
    async def close(self) -> None:
        """Signal end-of-stream to the consumer."""


_EOF = object()


class QueueEventSink(EventSink):
    """Bounded in-memory sink drained by an async consumer (e.g. an HTTP response).

    A full queue applies backpressure to the producer; a write that stays
    blocked longer than ``write_timeout`` raises StreamWriteTimeout.
    """

    def __init__(self, maxsize: int = 64, write_timeout: float = 30.0) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._write_timeout = write_timeout
        self._closed = False
        self._disconnected = False

    @property
    def closed(self) -> bool:
        return self._closed or self._disconnected

    async def send(self, event: PhaseEvent) -> None:
        if self.closed:
            msg = f"Cannot write {event.phase.value} event: stream is closed"
            raise StreamClosedError(msg)
        line = encode_event(event)
        try:
            await asyncio.wait_for(self._queue.put(line), timeout=self._write_timeout)
        except TimeoutError:
            msg = f"Write of {event.phase.value} event timed out after {self._write_timeout}s"
            raise StreamWriteTimeout(msg) from None

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._disconnected:
            return
        try:
            await asyncio.wait_for(self._queue.put(_EOF), timeout=self._write_timeout)
        except TimeoutError:
            logger.warning("Consumer stalled; end-of-stream marker not delivered")

    def disconnect(self) -> None:
        """Mark the consumer as gone; later writes raise StreamClosedError."""
        self._disconnected = True

    async def lines(self) -> AsyncIterator[str]:
        """Yield encoded lines in production order until end-of-stream."""
        while True:
            item = await self._queue.get()
            if item is _EOF:
                return
            yield str(item)


class TextStreamSink(EventSink):
    """Sink writing protocol lines to a text stream such as stdout."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed or self._stream.closed

    async def send(self, event: PhaseEvent) -> None:
        if self.closed:
            msg = f"Cannot write {event.phase.value} event: stream is closed"
            raise StreamClosedError(msg)
        try:
            self._stream.write(encode_event(event))
            self._stream.flush()
        except (BrokenPipeError, ValueError) as e:
            raise StreamClosedError(str(e)) from e

    async def close(self) -> None:
        self._closed = True
