"""Package specific exception hierarchy."""


class GatewayError(Exception):
    """Base exception for llm_gateway package."""

    kind = "gateway"


class UnsupportedProviderError(GatewayError):
    """Raised when a provider name is not one of the known providers."""

    kind = "unsupported_provider"

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported provider: {provider}")
        self.provider = provider


class MissingCredentialsError(GatewayError):
    """Raised when no API key is configured for a provider."""

    kind = "missing_credentials"

    def __init__(self, provider: str, env_var: str) -> None:
        super().__init__(f"{provider}: no API key configured (set {env_var})")
        self.provider = provider
        self.env_var = env_var


class ProviderError(GatewayError):
    """Base for failures reported by, or while talking to, a provider."""

    kind = "provider"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderHttpError(ProviderError):
    """Non-2xx status from the provider; carries the status code and raw body."""

    kind = "provider_http"

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        super().__init__(provider, f"{body or 'HTTP error'} (status {status_code})")
        self.status_code = status_code
        self.body = body


class MalformedResponseError(ProviderError):
    """2xx response whose body lacks the fields we need."""

    kind = "malformed_response"


class StreamDecodeError(ProviderError):
    """The streaming body is not framed as server-sent events at all."""

    kind = "stream_decode"


class ProviderConnectionError(ProviderError):
    """Transport level failure (connect, read, timeout) talking to a provider."""

    kind = "connection"
