"""Google Gemini provider implementation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from llm_gateway.providers.base import SimulatedStreamingProvider
from llm_gateway.registry import ProviderName
from llm_gateway.types import GenerationOptions, GenerationResult, ImagePart, TextPart, Turn

_ROLE_MAP = {"user": "user", "assistant": "model"}


class _Part(BaseModel):
    # inlineData/functionCall parts carry no text
    text: str | None = None


class _Content(BaseModel):
    parts: list[_Part] = Field(min_length=1)


class _Candidate(BaseModel):
    content: _Content


class _GenerateContentResponse(BaseModel):
    candidates: list[_Candidate] = Field(min_length=1)
    usage_metadata: dict[str, Any] | None = Field(None, alias="usageMetadata")


class GeminiProvider(SimulatedStreamingProvider):
    """Async wrapper for the generateContent API (streaming is simulated).

    The API key travels as the ``key`` query parameter and the response does
    not echo the model, so results report the requested model id.
    """

    name = ProviderName.GEMINI

    def endpoint(self, model: str) -> str:
        return f"{self._descriptor.base_url}/{model}:generateContent"

    def request_headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def request_params(self) -> dict[str, str]:
        return {"key": self._settings.api_key_for(self.name)}

    def normalize(self, turns: Sequence[Turn]) -> list[dict[str, Any]]:
        return [
            {"role": _ROLE_MAP[t.role], "parts": self._serialize_parts(t)}
            for t in turns
            if t.role != "system"
        ]

    def build_payload(
        self,
        model: str,
        turns: Sequence[Turn],
        options: GenerationOptions,
        *,
        stream: bool = False,
    ) -> dict[str, Any]:
        return {
            "contents": self.normalize(turns),
            "generationConfig": {
                "maxOutputTokens": options.max_tokens,
                "temperature": options.temperature,
            },
        }

    def parse_full(self, body: bytes, model: str) -> GenerationResult:
        data = self._validate(_GenerateContentResponse, body)
        return GenerationResult(
            content=self._require_text(
                data.candidates[0].content.parts[0].text, "candidates[0].content.parts[0].text"
            ),
            model=model,
            usage=data.usage_metadata,
        )

    def _serialize_parts(self, turn: Turn) -> list[dict[str, Any]]:
        if isinstance(turn.content, str):
            return [{"text": turn.content}]

        parts: list[dict[str, Any]] = []
        for part in turn.content:
            if isinstance(part, TextPart):
                parts.append({"text": part.text})
            elif isinstance(part, ImagePart):
                parsed = part.parse()
                if parsed is None:
                    self._logger.debug("gemini: dropping image that is not a base64 data URI")
                    continue
                mime_type, data = parsed
                parts.append({"inlineData": {"mimeType": mime_type, "data": data}})
        return parts
