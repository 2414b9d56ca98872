"""OpenAI provider implementation.

DeepSeek and Mistral expose the same chat-completions schema and reuse
``OpenAICompatibleProvider`` with their own name and credentials.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from llm_gateway.errors import ProviderConnectionError, StreamDecodeError
from llm_gateway.providers.base import BaseProvider
from llm_gateway.registry import ProviderName
from llm_gateway.types import GenerationOptions, GenerationResult, Turn

_CHAT_PATH = "/chat/completions"
_DATA_PREFIX = "data: "
_DONE = "[DONE]"
# SSE fields that are valid framing even though we ignore them
_SSE_FIELDS = ("data:", "event:", "id:", "retry:", ":")


class _Message(BaseModel):
    # only choices[0] must carry text
    content: str | None = None


class _Choice(BaseModel):
    message: _Message


class _ChatCompletion(BaseModel):
    model: str
    choices: list[_Choice] = Field(min_length=1)
    usage: dict[str, Any] | None = None


class _Delta(BaseModel):
    content: str | None = None


class _ChunkChoice(BaseModel):
    delta: _Delta = Field(default_factory=_Delta)


class _CompletionChunk(BaseModel):
    choices: list[_ChunkChoice] = Field(default_factory=list)

    def delta_text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""


class OpenAICompatibleProvider(BaseProvider):
    """Async wrapper for chat-completions style APIs with native SSE streaming."""

    native_streaming = True

    def endpoint(self, model: str) -> str:
        return self._descriptor.base_url + _CHAT_PATH

    def request_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.api_key_for(self.name)}",
            "Content-Type": "application/json",
        }

    def normalize(self, turns: Sequence[Turn]) -> list[dict[str, Any]]:
        # system turns are kept; this schema accepts them inline
        return [self._serialize_turn(t) for t in turns]

    def build_payload(
        self,
        model: str,
        turns: Sequence[Turn],
        options: GenerationOptions,
        *,
        stream: bool = False,
    ) -> dict[str, Any]:
        return {
            "model": model,
            "messages": self.normalize(turns),
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "stream": stream,
        }

    def parse_full(self, body: bytes, model: str) -> GenerationResult:
        data = self._validate(_ChatCompletion, body)
        return GenerationResult(
            content=self._require_text(
                data.choices[0].message.content, "choices[0].message.content"
            ),
            model=data.model,
            usage=data.usage,
        )

    async def decode_stream(
        self, model: str, turns: Sequence[Turn], options: GenerationOptions
    ) -> AsyncIterator[str]:
        """Yield ``choices[0].delta.content`` fragments from the provider's SSE body."""
        payload = self.build_payload(model, turns, options, stream=True)
        headers = self.request_headers()
        try:
            async with self._client.stream(
                "POST", self.endpoint(model), headers=headers, json=payload
            ) as response:
                if not response.is_success:
                    await response.aread()
                    self._raise_for_status(response)

                async for text in self._iter_deltas(response):
                    yield text
        except httpx.DecodingError as exc:
            raise StreamDecodeError(self.name.value, str(exc)) from exc
        except httpx.TransportError as exc:
            raise ProviderConnectionError(self.name.value, str(exc) or type(exc).__name__) from exc

    async def _iter_deltas(self, response: httpx.Response) -> AsyncIterator[str]:
        framed = False
        unframed = False

        async for line in response.aiter_lines():
            if not line.startswith(_DATA_PREFIX):
                if line.strip() and not line.startswith(_SSE_FIELDS):
                    unframed = True
                continue

            framed = True
            data = line[len(_DATA_PREFIX) :].strip()
            if data == _DONE:
                return

            try:
                chunk = _CompletionChunk.model_validate_json(data)
            except ValidationError:
                self._logger.debug("%s: skipping undecodable stream line: %s", self.name.value, data)
                continue

            text = chunk.delta_text()
            if text:
                yield text

        if unframed and not framed:
            raise StreamDecodeError(self.name.value, "response body is not an event stream")

    @staticmethod
    def _serialize_turn(turn: Turn) -> dict[str, Any]:
        if isinstance(turn.content, str):
            return {"role": turn.role, "content": turn.content}
        return {"role": turn.role, "content": [part.model_dump() for part in turn.content]}


class OpenAIProvider(OpenAICompatibleProvider):
    name = ProviderName.OPENAI
