"""Async gateway dispatching conversations to the configured providers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import aclosing
from types import TracebackType
from typing import Any

import httpx

from llm_gateway.config import GatewaySettings
from llm_gateway.errors import GatewayError, ProviderConnectionError, UnsupportedProviderError
from llm_gateway.providers import PROVIDER_CLASSES, BaseProvider
from llm_gateway.registry import DEFAULT_REGISTRY, ProviderName, ProviderRegistry
from llm_gateway.types import (
    GenerationOptions,
    GenerationResult,
    StreamChunk,
    StreamCompleted,
    StreamEvent,
    StreamFailed,
    StreamStarted,
    Turn,
)

TurnLike = Turn | Mapping[str, Any]
OptionsLike = GenerationOptions | Mapping[str, Any] | None


class Gateway:
    """Single entry point for generating completions across providers.

    Example:
        >>> async with Gateway(settings=GatewaySettings(openai_api_key="sk-...")) as gw:
        ...     result = await gw.generate("openai", "gpt-4o-mini", [Turn(role="user", content="Hi")])
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        settings: GatewaySettings | None = None,
        registry: ProviderRegistry = DEFAULT_REGISTRY,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings if settings is not None else GatewaySettings.from_env()
        self._registry = registry
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._settings.timeout_seconds)
        self._providers: dict[ProviderName, BaseProvider] = {}
        for name in registry.list_providers():
            key = ProviderName(name)
            self._providers[key] = PROVIDER_CLASSES[key](
                descriptor=registry.get(name),
                settings=self._settings,
                client=self._client,
            )

    async def aclose(self) -> None:
        """Close the HTTP client if the gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Gateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    def get_provider(self, name: str) -> BaseProvider:
        """Return a provider by name, failing fast for unknown names."""
        provider = self._providers.get(ProviderName.parse(name))
        if provider is None:
            raise UnsupportedProviderError(name)
        return provider

    def list_providers(self) -> tuple[str, ...]:
        return self._registry.list_providers()

    def list_models(self, provider: str) -> tuple[str, ...]:
        return self._registry.list_model_aliases(provider)

    def available_models(self) -> dict[str, list[str]]:
        """Return the model listing of every provider, keyed by provider name."""
        return {p: list(self.list_models(p)) for p in self.list_providers()}

    async def generate(
        self,
        provider: str,
        model_alias: str,
        turns: Iterable[TurnLike],
        options: OptionsLike = None,
    ) -> GenerationResult:
        """Execute a single non-streaming request; no retries."""
        impl = self.get_provider(provider)
        model = self._registry.resolve_model(impl.name.value, model_alias)
        turn_list = _coerce_turns(turns)
        opts = _coerce_options(options)

        self._logger.info(
            "Generating response provider=%s model=%s api_model=%s turns=%d",
            impl.name.value,
            model_alias,
            model,
            len(turn_list),
        )
        try:
            return await impl.generate(model, turn_list, opts)
        except GatewayError as exc:
            self._logger.error(
                "Generation failed provider=%s model=%s error=%s", impl.name.value, model, exc
            )
            raise

    def generate_streaming(
        self,
        provider: str,
        model_alias: str,
        turns: Iterable[TurnLike],
        options: OptionsLike = None,
    ) -> AsyncIterator[StreamEvent]:
        """Return a single-use async iterator of stream events.

        Unknown providers raise UnsupportedProviderError here, before any I/O.
        Once started, the sequence always ends with exactly one
        StreamCompleted or StreamFailed. Closing the iterator early releases
        the underlying HTTP response.
        """
        impl = self.get_provider(provider)
        model = self._registry.resolve_model(impl.name.value, model_alias)
        turn_list = _coerce_turns(turns)
        opts = _coerce_options(options)

        self._logger.info(
            "Generating streaming response provider=%s model=%s api_model=%s turns=%d",
            impl.name.value,
            model_alias,
            model,
            len(turn_list),
        )
        return self._stream_events(impl, model, turn_list, opts)

    async def _stream_events(
        self,
        impl: BaseProvider,
        model: str,
        turns: list[Turn],
        options: GenerationOptions,
    ) -> AsyncIterator[StreamEvent]:
        yield StreamStarted(model=model, provider=impl.name.value)

        parts: list[str] = []
        failure: GatewayError | None = None
        async with aclosing(impl.decode_stream(model, turns, options)) as chunks:
            try:
                async for text in chunks:
                    parts.append(text)
                    yield StreamChunk(text=text)
            except GatewayError as exc:
                failure = exc
            except httpx.HTTPError as exc:
                failure = ProviderConnectionError(impl.name.value, str(exc) or type(exc).__name__)
            except Exception as exc:
                self._logger.exception("Unexpected streaming failure provider=%s", impl.name.value)
                failure = GatewayError(f"{impl.name.value}: {exc}")

        if failure is not None:
            self._logger.error(
                "Streaming failed provider=%s model=%s error=%s", impl.name.value, model, failure
            )
            yield StreamFailed(error_kind=failure.kind, message=str(failure))
            return

        yield StreamCompleted(final_text="".join(parts), model=model)


def _coerce_turns(turns: Iterable[TurnLike]) -> list[Turn]:
    return [t if isinstance(t, Turn) else Turn.model_validate(t) for t in turns]


def _coerce_options(options: OptionsLike) -> GenerationOptions:
    if isinstance(options, GenerationOptions):
        return options
    return GenerationOptions.model_validate(dict(options or {}))


__all__ = ["Gateway"]
