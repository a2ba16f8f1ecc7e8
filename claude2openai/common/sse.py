"""
Server-Sent Events helpers

Line-level decoding of upstream event streams and encoding of client frames.
"""

from __future__ import annotations

import json
from typing import Any


class SSELineDecoder:
    """
    Incremental SSE line splitter.

    - Buffers the trailing partial line between chunks
    - Supports CRLF (\\r\\n)
    - Returns lines stripped of surrounding whitespace, blank lines included
    """

    def __init__(self) -> None:
        self._buf = b""

    def feed(self, chunk: bytes) -> list[str]:
        """
        Append bytes and return every line completed by this chunk.
        """
        if not chunk:
            return []

        data = self._buf + chunk
        parts = data.split(b"\n")
        self._buf = parts.pop()  # Keep last incomplete line
        return [self._decode(line) for line in parts]

    def flush(self) -> list[str]:
        """
        Return whatever is left in the buffer once the stream has ended.
        """
        if not self._buf:
            return []
        line, self._buf = self._buf, b""
        return [self._decode(line)]

    @staticmethod
    def _decode(line: bytes) -> str:
        return line.decode("utf-8", errors="replace").strip()


def encode_sse_data(payload: str) -> bytes:
    return f"data: {payload}\n\n".encode("utf-8")


def encode_sse_json(obj: dict[str, Any]) -> bytes:
    return encode_sse_data(json.dumps(obj, ensure_ascii=False))


SSE_DONE = encode_sse_data("[DONE]")
