from __future__ import annotations

from medaieval.models import ProviderOutcome


class GatewayError(Exception):
    """Base class for AI gateway failures."""


class ProviderError(GatewayError):
    """A single adapter failed; the gateway moves on to the next one."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ConfigurationError(ProviderError):
    pass


class ProviderRequestError(ProviderError):
    pass


class EmptyResponseError(ProviderError):
    pass


class ProviderTimeoutError(EmptyResponseError):
    pass


class MalformedResponseError(ProviderError):
    pass


class UnexpectedShapeError(ProviderError):
    pass


class AllProvidersExhaustedError(GatewayError):
    message = "All AI providers failed. Please check your API credentials."

    def __init__(self, attempts: list[ProviderOutcome] | None = None) -> None:
        super().__init__(self.message)
        self.attempts = list(attempts or [])
