"""Mistral provider implementation (OpenAI-compatible chat completions)."""

from llm_gateway.providers.openai import OpenAICompatibleProvider
from llm_gateway.registry import ProviderName


class MistralProvider(OpenAICompatibleProvider):
    name = ProviderName.MISTRAL
