"""Runtime configuration for the gateway.

Public API:
    GatewaySettings: API keys and transport/pacing settings, loadable from env
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field, SecretStr

from llm_gateway.errors import MissingCredentialsError
from llm_gateway.registry import ProviderName

# Data-driven mapping: settings field -> env var
_ENV_MAP: dict[str, str] = {
    "openai_api_key": "OPENAI_API_KEY",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "deepseek_api_key": "DEEPSEEK_API_KEY",
    "gemini_api_key": "GEMINI_API_KEY",
    "mistral_api_key": "MISTRAL_API_KEY",
    "timeout_seconds": "LLM_GATEWAY_TIMEOUT",
    "simulated_stream_delay": "LLM_GATEWAY_STREAM_DELAY",
}


class GatewaySettings(BaseModel):
    """Settings shared by every provider call.

    Attributes:
        openai_api_key: OpenAI API key
        anthropic_api_key: Anthropic API key
        deepseek_api_key: DeepSeek API key
        gemini_api_key: Google Gemini API key
        mistral_api_key: Mistral API key
        timeout_seconds: Timeout for the HTTP client the gateway creates
        simulated_stream_delay: Pause between chunks of a simulated stream
    """

    openai_api_key: SecretStr | None = Field(None, description="OpenAI API key")
    anthropic_api_key: SecretStr | None = Field(None, description="Anthropic API key")
    deepseek_api_key: SecretStr | None = Field(None, description="DeepSeek API key")
    gemini_api_key: SecretStr | None = Field(None, description="Gemini API key")
    mistral_api_key: SecretStr | None = Field(None, description="Mistral API key")
    timeout_seconds: float = Field(120.0, ge=1, le=600, description="Request timeout in seconds")
    simulated_stream_delay: float = Field(
        0.05, ge=0, description="Seconds between chunks of a simulated stream"
    )

    def api_key_for(self, provider: ProviderName) -> str:
        """Return the plain API key for ``provider``.

        Raises:
            MissingCredentialsError: If no key is configured
        """
        field = f"{provider.value}_api_key"
        secret: SecretStr | None = getattr(self, field)
        if secret is None or not secret.get_secret_value():
            raise MissingCredentialsError(provider.value, _ENV_MAP[field])
        return secret.get_secret_value()

    @classmethod
    def from_env(cls) -> GatewaySettings:
        """Create settings from environment variables.

        Environment variables:
            OPENAI_API_KEY, ANTHROPIC_API_KEY, DEEPSEEK_API_KEY,
            GEMINI_API_KEY, MISTRAL_API_KEY: provider API keys
            LLM_GATEWAY_TIMEOUT: HTTP timeout in seconds
            LLM_GATEWAY_STREAM_DELAY: simulated streaming pause in seconds

        Raises:
            pydantic.ValidationError: If a numeric value is out of range
        """
        kwargs: dict[str, Any] = {}
        for field, env_var in _ENV_MAP.items():
            value = os.environ.get(env_var)
            if value is not None:
                kwargs[field] = value
        return cls(**kwargs)


__all__ = ["GatewaySettings"]
