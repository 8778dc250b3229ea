"""Routing backend adapters."""

from routing.providers.base import RouteProvider
from routing.providers.mapbox import MapboxProvider
from routing.providers.openrouteservice import OpenRouteServiceProvider
from routing.providers.valhalla import ValhallaProvider

PROVIDER_CLASSES: dict[str, type[RouteProvider]] = {
    MapboxProvider.name: MapboxProvider,
    OpenRouteServiceProvider.name: OpenRouteServiceProvider,
    ValhallaProvider.name: ValhallaProvider,
}

__all__ = [
    "PROVIDER_CLASSES",
    "MapboxProvider",
    "OpenRouteServiceProvider",
    "RouteProvider",
    "ValhallaProvider",
]
