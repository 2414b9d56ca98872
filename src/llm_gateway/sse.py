"""Server-sent event encoding of gateway stream events.

Each event is written as ``event: <name>`` followed by a single ``data:`` line
holding a JSON object and a blank line.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from llm_gateway.types import StreamChunk, StreamCompleted, StreamEvent, StreamFailed, StreamStarted

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def encode_event(event: StreamEvent, *, provider: str, has_images: bool = False) -> str:
    """Render one StreamEvent as a named SSE frame (start/chunk/complete/error)."""
    if isinstance(event, StreamStarted):
        return format_sse(
            "start",
            {
                "status": "generating",
                "model": event.model,
                "provider": event.provider,
                "has_images": has_images,
            },
        )
    if isinstance(event, StreamChunk):
        return format_sse("chunk", {"content": event.text})
    if isinstance(event, StreamCompleted):
        return format_sse(
            "complete",
            {
                "status": "completed",
                "content": event.final_text,
                "model_used": {"provider": provider, "model": event.model},
            },
        )
    if isinstance(event, StreamFailed):
        return format_sse("error", {"error": event.message, "kind": event.error_kind})
    raise TypeError(f"Unknown stream event: {event!r}")


async def encode_stream(
    events: AsyncIterator[StreamEvent], *, provider: str, has_images: bool = False
) -> AsyncIterator[str]:
    """Encode a stream of events, skipping empty chunks."""
    async with aclosing(events) as stream:
        async for event in stream:
            if isinstance(event, StreamChunk) and not event.text:
                continue
            yield encode_event(event, provider=provider, has_images=has_images)
