"""Provider-agnostic base interfaces and helpers."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from llm_gateway.config import GatewaySettings
from llm_gateway.errors import MalformedResponseError, ProviderConnectionError, ProviderHttpError
from llm_gateway.registry import ProviderDescriptor, ProviderName
from llm_gateway.types import GenerationOptions, GenerationResult, Turn

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class BaseProvider(ABC):
    """Abstract base class for provider implementations.

    Each provider turns shared turns into its request body (``normalize`` and
    ``build_payload``), maps a full response body to a GenerationResult
    (``parse_full``) and produces text deltas for streaming (``decode_stream``).
    """

    name: ProviderName
    native_streaming: bool = False
    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        descriptor: ProviderDescriptor,
        settings: GatewaySettings,
        client: httpx.AsyncClient,
    ) -> None:
        self._descriptor = descriptor
        self._settings = settings
        self._client = client

    @abstractmethod
    def endpoint(self, model: str) -> str:
        """Return the absolute URL to POST to for ``model``."""
        raise NotImplementedError

    @abstractmethod
    def request_headers(self) -> dict[str, str]:
        """Return request headers, including credentials read at call time."""
        raise NotImplementedError

    def request_params(self) -> dict[str, str] | None:
        return None

    @abstractmethod
    def normalize(self, turns: Sequence[Turn]) -> list[dict[str, Any]]:
        """Convert turns into the provider's message list."""
        raise NotImplementedError

    @abstractmethod
    def build_payload(
        self,
        model: str,
        turns: Sequence[Turn],
        options: GenerationOptions,
        *,
        stream: bool = False,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def parse_full(self, body: bytes, model: str) -> GenerationResult:
        """Map a successful response body to a GenerationResult."""
        raise NotImplementedError

    @abstractmethod
    def decode_stream(
        self, model: str, turns: Sequence[Turn], options: GenerationOptions
    ) -> AsyncIterator[str]:
        """Yield text deltas for the request."""
        raise NotImplementedError

    async def generate(
        self, model: str, turns: Sequence[Turn], options: GenerationOptions
    ) -> GenerationResult:
        """Execute one non-streaming request and normalize the result."""
        payload = self.build_payload(model, turns, options)
        headers = self.request_headers()
        try:
            response = await self._client.post(
                self.endpoint(model),
                headers=headers,
                params=self.request_params(),
                json=payload,
            )
        except httpx.TransportError as exc:
            raise ProviderConnectionError(self.name.value, str(exc) or type(exc).__name__) from exc

        self._raise_for_status(response)
        return self.parse_full(response.content, model)

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise ProviderHttpError for any non-2xx response; the body must be read."""
        if not response.is_success:
            raise ProviderHttpError(
                self.name.value,
                response.status_code,
                response.text or response.reason_phrase,
            )

    def _validate(self, schema: type[SchemaT], body: bytes) -> SchemaT:
        try:
            return schema.model_validate_json(body)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
                for err in exc.errors()
            )
            raise MalformedResponseError(
                self.name.value, f"unexpected response body ({problems})"
            ) from exc

    def _require_text(self, text: str | None, path: str) -> str:
        """Return ``text``, raising MalformedResponseError when the field at ``path`` is absent."""
        if text is None:
            raise MalformedResponseError(self.name.value, f"response has no text at {path}")
        return text


class SimulatedStreamingProvider(BaseProvider):
    """Streams by pacing out the words of a full, non-streaming response."""

    async def decode_stream(
        self, model: str, turns: Sequence[Turn], options: GenerationOptions
    ) -> AsyncIterator[str]:
        result = await self.generate(model, turns, options)
        delay = self._settings.simulated_stream_delay
        for index, token in enumerate(result.content.split(" ")):
            if index and delay:
                await asyncio.sleep(delay)
            yield token + " "
