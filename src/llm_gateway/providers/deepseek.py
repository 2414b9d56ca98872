"""DeepSeek provider implementation (OpenAI-compatible chat completions)."""

from llm_gateway.providers.openai import OpenAICompatibleProvider
from llm_gateway.registry import ProviderName


class DeepSeekProvider(OpenAICompatibleProvider):
    name = ProviderName.DEEPSEEK
