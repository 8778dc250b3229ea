"""
Routing orchestration shared by the HTTP routes and health checks.

These functions take the registry explicitly so handlers and tests can pass
in whichever registry they were given.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from routing.profiles import sort_profiles
from routing.schemas import (
    CanonicalRouteResponse,
    DirectionsRequest,
    ProviderInfo,
    ProviderProfilesResponse,
    ProvidersResponse,
    RouteRequest,
    UserPlan,
)

if TYPE_CHECKING:
    from routing.providers.base import RouteProvider
    from routing.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def build_route_request(
    body: DirectionsRequest,
    *,
    user_id: str | None = None,
    user_plan: UserPlan = "free",
) -> RouteRequest:
    return RouteRequest(
        waypoints=body.waypoints,
        profile=body.profile,
        provider=body.provider,
        user_id=user_id,
        user_plan=user_plan,
    )


async def calculate_directions(
    registry: ProviderRegistry,
    request: RouteRequest,
) -> CanonicalRouteResponse:
    """Select a provider for the request and calculate the route with it.

    Provider and profile errors are raised by the registry before any
    backend call is made.
    """
    provider = registry.select_provider(request)
    response = await provider.calculate_route(request)
    response.provider = provider.name
    return response


async def check_availability(
    providers: list[RouteProvider],
) -> dict[str, bool]:
    """Run every provider's availability check concurrently and wait for all."""
    results = await asyncio.gather(
        *(provider.is_available() for provider in providers),
        return_exceptions=True,
    )
    availability: dict[str, bool] = {}
    for provider, result in zip(providers, results, strict=True):
        if isinstance(result, BaseException):
            logger.warning(
                "Availability check for %s raised: %s",
                provider.name,
                result,
            )
            availability[provider.name] = False
        else:
            availability[provider.name] = bool(result)
    return availability


async def list_providers(
    registry: ProviderRegistry,
    plan: UserPlan = "free",
) -> ProvidersResponse:
    providers = registry.get_available_providers(plan)
    availability = await check_availability(providers)
    return ProvidersResponse(
        providers=[
            ProviderInfo(
                name=provider.name,
                displayName=provider.display_name,
                profiles=sort_profiles(provider.profiles),
                defaultProfile=provider.default_profile,
                available=availability[provider.name],
            )
            for provider in providers
        ],
        defaultProvider=registry.default_provider_name,
    )


def get_provider_profiles(
    registry: ProviderRegistry,
    name: str,
) -> ProviderProfilesResponse:
    provider = registry.get_provider(name)
    return ProviderProfilesResponse(
        provider=provider.name,
        profiles=sort_profiles(provider.profiles),
        defaultProfile=provider.default_profile,
    )
