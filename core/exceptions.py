"""
Centralized exception hierarchy for routing errors.

Every backend failure is translated into one of the canonical provider
errors below, so the HTTP layer never has to know which vendor produced it.
Registry errors (unknown provider, unsupported profile) are raised before any
network call and map to client errors.
"""

from __future__ import annotations


class RoutingError(Exception):
    """Base exception for all application-specific errors."""

    code = "Error"

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RoutingError):
    """Exception raised when an inbound request is malformed."""

    code = "InvalidRequest"


class ProviderConfigurationError(RoutingError):
    """Raised when an adapter's profile catalog violates its invariants."""

    code = "ProviderConfiguration"


class ProviderNotFoundError(RoutingError):
    """Raised when a provider name is not registered."""

    code = "ProviderNotFound"

    def __init__(self, provider_name: str) -> None:
        super().__init__(
            f"Provider '{provider_name}' not found",
            {"provider": provider_name},
        )
        self.provider_name = provider_name


class InvalidProfileError(RoutingError):
    """Raised when a profile is not part of a provider's catalog."""

    code = "InvalidProfile"

    def __init__(
        self,
        profile: str,
        provider_name: str,
        available_profiles: list[str],
    ) -> None:
        super().__init__(
            f"Profile '{profile}' is not supported by provider '{provider_name}'. "
            f"Available profiles: {', '.join(available_profiles)}",
            {"profile": profile, "provider": provider_name},
        )
        self.profile = profile
        self.provider_name = provider_name
        self.available_profiles = list(available_profiles)


class ProviderError(RoutingError):
    """Canonical failure raised by a provider adapter."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.provider = provider


class InvalidInputError(ProviderError):
    """Backend rejected the coordinates or profile it was sent."""

    code = "InvalidInput"


class NoRouteFoundError(ProviderError):
    """Backend understood the request but found no path."""

    code = "NoRouteFound"


class RateLimitError(ProviderError):
    """Backend throttled the request."""

    code = "RateLimited"


class UnauthorizedError(ProviderError):
    """Backend credentials are missing or rejected."""

    code = "Unauthorized"


class ServiceUnavailableError(ProviderError):
    """Network-level failure talking to the backend."""

    code = "ServiceUnavailable"


class ProviderTimeoutError(ServiceUnavailableError):
    """Backend call exceeded its deadline."""

    code = "Timeout"


class UnknownProviderError(ProviderError):
    """Unclassified backend failure; keeps the original message."""

    code = "Unknown"


class ExternalServiceError(RoutingError):
    """Non-success HTTP status returned by a backend, before classification."""

    @property
    def status(self) -> int | None:
        return self.details.get("status")

    @property
    def body(self) -> object:
        return self.details.get("body")
