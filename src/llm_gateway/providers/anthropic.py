"""Anthropic provider implementation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from llm_gateway.providers.base import SimulatedStreamingProvider
from llm_gateway.registry import ProviderName
from llm_gateway.types import GenerationOptions, GenerationResult, ImagePart, TextPart, Turn

_MESSAGES_PATH = "/messages"
_API_VERSION = "2023-06-01"
_ROLES = ("user", "assistant")


class _ContentBlock(BaseModel):
    # tool_use/thinking blocks carry no text
    type: str | None = None
    text: str | None = None


class _MessagesResponse(BaseModel):
    model: str
    content: list[_ContentBlock] = Field(min_length=1)
    usage: dict[str, Any] | None = None


class AnthropicProvider(SimulatedStreamingProvider):
    """Async wrapper for the Anthropic Messages API (streaming is simulated)."""

    name = ProviderName.ANTHROPIC

    def endpoint(self, model: str) -> str:
        return self._descriptor.base_url + _MESSAGES_PATH

    def request_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._settings.api_key_for(self.name),
            "anthropic-version": _API_VERSION,
            "content-type": "application/json",
        }

    def normalize(self, turns: Sequence[Turn]) -> list[dict[str, Any]]:
        # Messages API accepts only user/assistant roles here.
        return [self._serialize_turn(t) for t in turns if t.role in _ROLES]

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
        }

    def parse_full(self, body: bytes, model: str) -> GenerationResult:
        data = self._validate(_MessagesResponse, body)
        text = self._require_text(data.content[0].text, "content[0].text")
        return GenerationResult(content=text, model=data.model, usage=data.usage)

    def _serialize_turn(self, turn: Turn) -> dict[str, Any]:
        if isinstance(turn.content, str):
            return {"role": turn.role, "content": turn.content}

        blocks: list[dict[str, Any]] = []
        for part in turn.content:
            if isinstance(part, TextPart):
                blocks.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                block = self._serialize_image(part)
                if block is not None:
                    blocks.append(block)
        return {"role": turn.role, "content": blocks}

    def _serialize_image(self, part: ImagePart) -> dict[str, Any] | None:
        parsed = part.parse()
        if parsed is None:
            self._logger.debug("anthropic: dropping image that is not a base64 data URI")
            return None
        mime_type, data = parsed
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": mime_type, "data": data},
        }
