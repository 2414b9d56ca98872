"""Helpers shared by the test modules: mock transports and collectors."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from llm_gateway.config import GatewaySettings
from llm_gateway.gateway import Gateway

Handler = Callable[[httpx.Request], httpx.Response]


def make_settings(**overrides: Any) -> GatewaySettings:
    values: dict[str, Any] = {
        "openai_api_key": "sk-openai",
        "anthropic_api_key": "sk-anthropic",
        "deepseek_api_key": "sk-deepseek",
        "gemini_api_key": "gm-key",
        "mistral_api_key": "sk-mistral",
        "simulated_stream_delay": 0,
    }
    values.update(overrides)
    return GatewaySettings(**values)


def make_gateway(handler: Handler, **overrides: Any) -> Gateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Gateway(settings=make_settings(**overrides), http_client=client)


def unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class RecordingHandler:
    """MockTransport handler that returns a fixed response and keeps requests."""

    def __init__(self, response: Callable[[], httpx.Response]) -> None:
        self._response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response()

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict[str, Any]:
        return json.loads(self.last.content)


class ChunkedStream(httpx.AsyncByteStream):
    """Response body that yields ``chunks`` and optionally fails afterwards."""

    def __init__(self, chunks: list[bytes], *, error: Exception | None = None) -> None:
        self._chunks = chunks
        self._error = error
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.closed = True


def sse_line(content: str) -> str:
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n\n"


def openai_completion(content: str = "Hello there", model: str = "gpt-4o-mini") -> dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
    }


def anthropic_message(text: str = "Hello there", model: str = "claude-sonnet-4-20250514") -> dict[str, Any]:
    return {
        "id": "msg_1",
        "type": "message",
        "model": model,
        "content": [{"type": "text", "text": text}],
        "usage": {"input_tokens": 5, "output_tokens": 2},
    }


def gemini_content(text: str = "Hello there") -> dict[str, Any]:
    return {
        "candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}],
        "usageMetadata": {"promptTokenCount": 5, "candidatesTokenCount": 2},
    }


async def collect(stream: AsyncIterator[Any]) -> list[Any]:
    items: list[Any] = []
    async for item in stream:
        items.append(item)
    return items
