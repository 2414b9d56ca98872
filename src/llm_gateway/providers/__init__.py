"""Provider definitions for llm_gateway."""

from llm_gateway.registry import ProviderName

from .anthropic import AnthropicProvider
from .base import BaseProvider, SimulatedStreamingProvider
from .deepseek import DeepSeekProvider
from .gemini import GeminiProvider
from .mistral import MistralProvider
from .openai import OpenAICompatibleProvider, OpenAIProvider

# One implementation per ProviderName member.
PROVIDER_CLASSES: dict[ProviderName, type[BaseProvider]] = {
    ProviderName.OPENAI: OpenAIProvider,
    ProviderName.ANTHROPIC: AnthropicProvider,
    ProviderName.DEEPSEEK: DeepSeekProvider,
    ProviderName.GEMINI: GeminiProvider,
    ProviderName.MISTRAL: MistralProvider,
}

__all__ = [
    "BaseProvider",
    "SimulatedStreamingProvider",
    "OpenAICompatibleProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "MistralProvider",
    "PROVIDER_CLASSES",
]
