"""API routes for directions and provider discovery."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from core.api import api_route, run_until_disconnected
from routing.registry import ProviderRegistry
from routing.schemas import (
    CanonicalRouteResponse,
    DirectionsRequest,
    ProviderProfilesResponse,
    ProvidersResponse,
    UserPlan,
)
from routing.service import (
    build_route_request,
    calculate_directions,
    get_provider_profiles,
    list_providers,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_registry(request: Request) -> ProviderRegistry:
    """Registry built at startup and stored on the application state."""
    return request.app.state.registry


RegistryDep = Annotated[ProviderRegistry, Depends(get_registry)]


@router.post(
    "/api/routing/directions",
    response_model=CanonicalRouteResponse,
    response_model_exclude_none=True,
)
@api_route(logger)
async def get_directions(
    body: DirectionsRequest,
    request: Request,
    registry: RegistryDep,
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_plan: Annotated[UserPlan, Header()] = "free",
):
    """Calculate a route with the requested (or default) provider."""
    route_request = build_route_request(
        body,
        user_id=x_user_id,
        user_plan=x_user_plan,
    )
    return await run_until_disconnected(
        request,
        calculate_directions(registry, route_request),
    )


@router.get(
    "/api/routing/providers",
    response_model=ProvidersResponse,
    response_model_exclude_none=True,
)
@api_route(logger)
async def get_providers(
    registry: RegistryDep,
    x_user_plan: Annotated[UserPlan, Header()] = "free",
):
    """List registered providers with live availability and profiles."""
    return await list_providers(registry, x_user_plan)


@router.get(
    "/api/routing/providers/{provider}/profiles",
    response_model=ProviderProfilesResponse,
    response_model_exclude_none=True,
)
@api_route(logger)
async def get_profiles(provider: str, registry: RegistryDep):
    """Return one provider's profile catalog in display order."""
    return get_provider_profiles(registry, provider)
