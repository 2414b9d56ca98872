"""Static catalogue of supported providers and their model aliases."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from llm_gateway.errors import UnsupportedProviderError


class ProviderName(str, Enum):
    """Closed set of providers the gateway can dispatch to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    DEEPSEEK = "deepseek"
    GEMINI = "gemini"
    MISTRAL = "mistral"

    @classmethod
    def parse(cls, value: str | ProviderName) -> ProviderName:
        """Return the enum member for ``value`` or raise UnsupportedProviderError."""
        try:
            return cls(value)
        except ValueError as exc:
            raise UnsupportedProviderError(str(value)) from exc


@dataclass(frozen=True)
class ProviderDescriptor:
    """Endpoint and model catalogue for one provider."""

    name: ProviderName
    base_url: str
    model_aliases: Mapping[str, str]
    # openai/anthropic list their alias keys, the rest list literal ids
    expose_aliases: bool = False

    def resolve_model(self, alias: str) -> str:
        if alias in self.model_aliases.values():
            return alias
        return self.model_aliases.get(alias, alias)

    def listed_models(self) -> tuple[str, ...]:
        if self.expose_aliases:
            return tuple(self.model_aliases)
        return tuple(dict.fromkeys(self.model_aliases.values()))


class ProviderRegistry:
    """Read-only lookup over a fixed sequence of provider descriptors."""

    def __init__(self, descriptors: list[ProviderDescriptor]) -> None:
        self._descriptors: Mapping[ProviderName, ProviderDescriptor] = MappingProxyType(
            {d.name: d for d in descriptors}
        )

    def _find(self, provider: str) -> ProviderDescriptor | None:
        try:
            return self._descriptors.get(ProviderName(provider))
        except ValueError:
            return None

    def get(self, provider: str) -> ProviderDescriptor:
        """Return the descriptor for ``provider`` or raise UnsupportedProviderError."""
        descriptor = self._find(provider)
        if descriptor is None:
            raise UnsupportedProviderError(str(provider))
        return descriptor

    def resolve_model(self, provider: str, alias: str) -> str:
        """Map a model alias to the literal id the provider API expects.

        Literal ids pass through unchanged and unknown names are returned
        verbatim, so callers may use uncatalogued models.
        """
        descriptor = self._find(provider)
        if descriptor is None:
            return alias
        return descriptor.resolve_model(alias)

    def list_providers(self) -> tuple[str, ...]:
        return tuple(name.value for name in self._descriptors)

    def list_model_aliases(self, provider: str) -> tuple[str, ...]:
        descriptor = self._find(provider)
        if descriptor is None:
            return ()
        return descriptor.listed_models()

    def get_model_info(self, provider: str) -> Mapping[str, str]:
        """Return the alias -> literal id table, empty for unknown providers."""
        descriptor = self._find(provider)
        if descriptor is None:
            return MappingProxyType({})
        return descriptor.model_aliases


def _descriptor(
    name: ProviderName, base_url: str, models: dict[str, str], *, expose_aliases: bool = False
) -> ProviderDescriptor:
    return ProviderDescriptor(
        name=name,
        base_url=base_url,
        model_aliases=MappingProxyType(dict(models)),
        expose_aliases=expose_aliases,
    )


DEFAULT_REGISTRY = ProviderRegistry(
    [
        _descriptor(
            ProviderName.OPENAI,
            "https://api.openai.com/v1",
            {
                "gpt-4o": "gpt-4o",
                "gpt-4o-mini": "gpt-4o-mini",
                "gpt-4-turbo": "gpt-4-turbo",
                "gpt-4": "gpt-4",
                "gpt-3.5-turbo": "gpt-3.5-turbo",
            },
            expose_aliases=True,
        ),
        _descriptor(
            ProviderName.ANTHROPIC,
            "https://api.anthropic.com/v1",
            {
                "claude-opus-4": "claude-opus-4-20250514",
                "claude-sonnet-4": "claude-sonnet-4-20250514",
                "claude-3-7-sonnet": "claude-3-7-sonnet-20250219",
                "claude-3-5-sonnet": "claude-3-5-sonnet-20241022",
                "claude-3-5-haiku": "claude-3-5-haiku-20241022",
                "claude-3-opus": "claude-3-opus-20240229",
                "claude-3-sonnet": "claude-3-sonnet-20240229",
                "claude-3-haiku": "claude-3-haiku-20240307",
            },
            expose_aliases=True,
        ),
        _descriptor(
            ProviderName.DEEPSEEK,
            "https://api.deepseek.com/v1",
            {"deepseek-chat": "deepseek-chat"},
        ),
        _descriptor(
            ProviderName.GEMINI,
            "https://generativelanguage.googleapis.com/v1beta/models",
            {
                "gemini-1.5-flash": "gemini-1.5-flash",
                "gemini-2.0-flash-exp": "gemini-2.0-flash-exp",
                "gemini-2.0-flash-lite-exp": "gemini-2.0-flash-lite-exp",
                "gemini-2.0-flash-lite-preview-02-05": "gemini-2.0-flash-lite-preview-02-05",
                "gemini-2.0-flash": "gemini-2.0-flash",
            },
        ),
        _descriptor(
            ProviderName.MISTRAL,
            "https://api.mistral.ai/v1",
            {"mistral-large-latest": "mistral-large-latest"},
        ),
    ]
)
