"""
Provider registry.

Maps provider names to adapters and tracks the default provider. The map is
populated at startup and read without locking on the request path; every
write builds a new dict and swaps it in whole, so readers always see a
complete snapshot.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from core.exceptions import (
    InvalidProfileError,
    ProviderConfigurationError,
    ProviderNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from routing.providers.base import RouteProvider
    from routing.schemas import ProfileMetadata, RouteRequest, UserPlan

logger = logging.getLogger(__name__)


class ProviderRegistry:
    def __init__(
        self,
        providers: Iterable[RouteProvider] = (),
        *,
        default_provider: str | None = None,
    ) -> None:
        self._providers: Mapping[str, RouteProvider] = MappingProxyType({})
        self._default_provider: str | None = None
        for provider in providers:
            self.register_provider(provider)
        if default_provider is not None:
            self.set_default_provider(default_provider)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    # --- registration -------------------------------------------------------

    def register_provider(self, provider: RouteProvider) -> None:
        """Register an adapter; a later registration under the same name wins."""
        providers = dict(self._providers)
        if provider.name in providers:
            logger.info("Replacing registered provider %s", provider.name)
        providers[provider.name] = provider
        self._providers = MappingProxyType(providers)
        if self._default_provider is None:
            self._default_provider = provider.name
        logger.debug("Registered provider %s", provider.name)

    @property
    def default_provider_name(self) -> str:
        if self._default_provider is None:
            msg = "No routing providers are registered"
            raise ProviderConfigurationError(msg)
        return self._default_provider

    def set_default_provider(self, name: str) -> None:
        if name not in self._providers:
            raise ProviderNotFoundError(name)
        self._default_provider = name
        logger.info("Default routing provider set to %s", name)

    # --- lookup -------------------------------------------------------------

    def get_provider(self, name: str) -> RouteProvider:
        provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def has_provider(self, name: str) -> bool:
        return name in self._providers

    def get_all_providers(self) -> list[RouteProvider]:
        return list(self._providers.values())

    def get_available_providers(self, plan: UserPlan = "free") -> list[RouteProvider]:
        """Providers a user on ``plan`` may route with.

        Every registered provider is currently offered on every plan.
        """
        return self.get_all_providers()

    def get_provider_profiles(self, name: str) -> list[ProfileMetadata]:
        return list(self.get_provider(name).profiles)

    def is_valid_profile(self, name: str, profile: str) -> bool:
        provider = self._providers.get(name)
        return provider is not None and provider.is_valid_profile(profile)

    def validate_profile(self, name: str, profile: str) -> None:
        provider = self.get_provider(name)
        if not provider.is_valid_profile(profile):
            raise InvalidProfileError(profile, name, provider.profile_ids)

    # --- selection ----------------------------------------------------------

    def select_provider(self, request: RouteRequest) -> RouteProvider:
        """Resolve the adapter for a request and validate its profile.

        Pure lookup: raises ProviderNotFoundError or InvalidProfileError
        before any backend is contacted.
        """
        name = (
            request.provider
            if request.provider is not None
            else self.default_provider_name
        )
        provider = self.get_provider(name)
        if request.profile is not None and not provider.is_valid_profile(
            request.profile
        ):
            raise InvalidProfileError(request.profile, name, provider.profile_ids)
        return provider


def build_registry(
    enabled: Iterable[str] | None = None,
    *,
    default_provider: str | None = None,
) -> ProviderRegistry:
    """Construct the process registry from configuration.

    Unknown names in ROUTING_PROVIDERS are logged and skipped. When the
    configured default is not registered, the first registered provider is
    used instead.
    """
    from config import (
        get_default_provider,
        get_enabled_providers,
        get_health_check_timeout,
        get_request_timeout,
    )
    from routing.providers import PROVIDER_CLASSES

    names = list(enabled) if enabled is not None else get_enabled_providers()
    timeout = get_request_timeout()
    health_check_timeout = get_health_check_timeout()

    registry = ProviderRegistry()
    for name in names:
        provider_cls = PROVIDER_CLASSES.get(name)
        if provider_cls is None:
            logger.warning(
                "Ignoring unknown routing provider %r (known: %s)",
                name,
                ", ".join(sorted(PROVIDER_CLASSES)),
            )
            continue
        registry.register_provider(
            provider_cls(timeout=timeout, health_check_timeout=health_check_timeout),
        )

    if not len(registry):
        msg = "No routing providers enabled; check ROUTING_PROVIDERS"
        raise ProviderConfigurationError(msg, {"enabled": names})

    wanted = default_provider or get_default_provider()
    if registry.has_provider(wanted):
        registry.set_default_provider(wanted)
    else:
        logger.warning(
            "Default provider %r is not registered; falling back to %s",
            wanted,
            registry.default_provider_name,
        )

    logger.info(
        "Routing registry ready: providers=%s default=%s timeout=%.1fs",
        ", ".join(p.name for p in registry.get_all_providers()),
        registry.default_provider_name,
        timeout,
    )
    return registry
