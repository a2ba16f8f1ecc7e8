"""
Streaming translation (Anthropic SSE -> OpenAI Chat Completions SSE)

Consumes the upstream `event:` / `data:` lines and re-emits a flat sequence of
`data: <chunk>` frames terminated by `data: [DONE]`.
"""

from __future__ import annotations

import enum
import json
import logging
import time
from typing import AsyncGenerator, AsyncIterator, Awaitable, Callable, Optional

import httpx

from claude2openai.common.errors import UpstreamStreamTruncatedError
from claude2openai.common.sse import SSE_DONE, SSELineDecoder, encode_sse_json
from claude2openai.domain.anthropic import (
    ContentBlockDeltaEvent,
    StreamErrorEvent,
    TextDelta,
    parse_stream_payload,
)
from claude2openai.domain.openai import (
    ChatCompletionChunk,
    ChunkChoice,
    ChunkDelta,
    new_completion_id,
)

logger = logging.getLogger(__name__)

EVENT_PREFIX = "event:"
DATA_PREFIX = "data:"


class StreamState(str, enum.Enum):
    AWAITING_START = "awaiting_start"
    STREAMING = "streaming"
    DONE = "done"


class StreamTranslator:
    """
    Per-exchange state machine.

    The chunk id and creation timestamp are fixed when the translator is
    built and shared by every chunk it emits. Unknown or malformed data
    lines are skipped; only a read failure or a stream that ends before
    `message_stop` is an error.
    """

    def __init__(
        self,
        model: str,
        completion_id: Optional[str] = None,
        created: Optional[int] = None,
    ) -> None:
        self.model = model
        self.completion_id = completion_id or new_completion_id()
        self.created = created if created is not None else int(time.time())
        self.state = StreamState.AWAITING_START
        self.text = ""
        self._decoder = SSELineDecoder()

    def _chunk(self, delta: ChunkDelta, finish_reason: Optional[str] = None) -> bytes:
        chunk = ChatCompletionChunk(
            id=self.completion_id,
            created=self.created,
            model=self.model,
            choices=[ChunkChoice(delta=delta, finish_reason=finish_reason)],
        )
        return encode_sse_json(chunk.to_payload())

    def _handle_event(self, name: str) -> list[bytes]:
        if name == "message_start" and self.state == StreamState.AWAITING_START:
            self.state = StreamState.STREAMING
            return [self._chunk(ChunkDelta(role="assistant"))]

        if name == "message_stop":
            self.state = StreamState.DONE
            return [self._chunk(ChunkDelta(), finish_reason="stop"), SSE_DONE]

        return []

    def _handle_data(self, raw: str) -> list[bytes]:
        if self.state != StreamState.STREAMING:
            return []

        try:
            payload = json.loads(raw)
        except ValueError:
            logger.debug("Skipping malformed stream data line: %r", raw)
            return []

        event = parse_stream_payload(payload)
        if isinstance(event, ContentBlockDeltaEvent) and isinstance(event.delta, TextDelta):
            self.text += event.delta.text
            return [self._chunk(ChunkDelta(content=event.delta.text))]
        if isinstance(event, StreamErrorEvent):
            logger.warning(
                "Upstream stream error event: type=%s message=%s",
                event.error.type,
                event.error.message,
            )
        return []

    def feed_line(self, line: str) -> list[bytes]:
        """
        Advance the state machine by one stripped line.

        Returns:
            list[bytes]: Encoded frames to send to the client, in order
        """
        if self.state == StreamState.DONE or not line:
            return []
        if line.startswith(EVENT_PREFIX):
            return self._handle_event(line[len(EVENT_PREFIX):].strip())
        if line.startswith(DATA_PREFIX):
            return self._handle_data(line[len(DATA_PREFIX):].strip())
        return []

    async def translate(
        self,
        upstream: AsyncIterator[bytes],
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncGenerator[bytes, None]:
        """
        Translate an upstream byte stream into client frames.

        Args:
            upstream: Raw upstream body chunks
            is_disconnected: Checked before every read; reading stops once
                it reports the client has gone

        Yields:
            bytes: One encoded SSE frame per chunk

        Raises:
            UpstreamStreamTruncatedError: The upstream failed or ended before
                `message_stop`
        """
        iterator = upstream.__aiter__()
        while self.state != StreamState.DONE:
            if is_disconnected is not None and await is_disconnected():
                logger.info("Client disconnected, stopping stream %s", self.completion_id)
                return

            try:
                chunk = await iterator.__anext__()
            except StopAsyncIteration:
                for line in self._decoder.flush():
                    for frame in self.feed_line(line):
                        yield frame
                break
            except (httpx.HTTPError, httpx.StreamError) as e:
                raise UpstreamStreamTruncatedError(
                    details={"reason": str(e), "completion_id": self.completion_id}
                ) from e

            for line in self._decoder.feed(chunk):
                for frame in self.feed_line(line):
                    yield frame
                if self.state == StreamState.DONE:
                    break

        if self.state != StreamState.DONE:
            raise UpstreamStreamTruncatedError(details={"completion_id": self.completion_id})

        logger.debug(
            "Stream %s finished: %d characters of content",
            self.completion_id,
            len(self.text),
        )
