"""
Mapbox Directions API v5 provider.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from config import get_mapbox_access_token, get_mapbox_base_url
from core.constants import DEFAULT_REQUEST_TIMEOUT, MAX_HEALTH_CHECK_TIMEOUT
from core.exceptions import (
    ExternalServiceError,
    InvalidInputError,
    NoRouteFoundError,
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownProviderError,
)
from core.http.request import request_json
from core.http.session import get_session
from routing.normalizer import normalize_mapbox_response
from routing.providers.base import RouteProvider
from routing.schemas import (
    CanonicalRouteResponse,
    Coordinate,
    ProfileCategory,
    ProfileMetadata,
)

logger = logging.getLogger(__name__)

MAPBOX_PROFILES: tuple[ProfileMetadata, ...] = (
    ProfileMetadata(
        id="cycling",
        title="Cycling",
        icon="directions-bike",
        category=ProfileCategory.CYCLING,
        description="Bike lanes and cycle-friendly roads.",
    ),
    ProfileMetadata(
        id="walking",
        title="Walking",
        icon="directions-walk",
        category=ProfileCategory.WALKING,
    ),
    ProfileMetadata(
        id="driving",
        title="Driving",
        icon="directions-car",
        category=ProfileCategory.DRIVING,
    ),
    ProfileMetadata(
        id="driving-traffic",
        title="Driving (Traffic)",
        icon="traffic",
        category=ProfileCategory.DRIVING,
        description="Driving with live traffic conditions.",
    ),
)

# Mapbox error codes returned in the response body
MAPBOX_INVALID_INPUT_CODES = frozenset({"InvalidInput", "ProfileNotFound", "TooBig"})
MAPBOX_NO_ROUTE_CODES = frozenset({"NoRoute", "NoSegment"})


class MapboxProvider(RouteProvider):
    name = "mapbox"
    display_name = "Mapbox"
    profiles = MAPBOX_PROFILES
    default_profile = "cycling"
    profile_mapping = {
        "cycling": "mapbox/cycling",
        "walking": "mapbox/walking",
        "driving": "mapbox/driving",
        "driving-traffic": "mapbox/driving-traffic",
    }

    def __init__(
        self,
        *,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        health_check_timeout: float = MAX_HEALTH_CHECK_TIMEOUT,
    ) -> None:
        super().__init__(timeout=timeout, health_check_timeout=health_check_timeout)
        self._access_token = (
            access_token if access_token is not None else get_mapbox_access_token()
        )
        self._base_url = (base_url or get_mapbox_base_url()).rstrip("/")
        if not self._access_token:
            logger.warning("Mapbox access token not configured")

    def directions_url(self, waypoints: Sequence[Coordinate], profile: str) -> str:
        coordinates = ";".join(f"{wp.longitude},{wp.latitude}" for wp in waypoints)
        return (
            f"{self._base_url}/directions/v5/{self.profile_mapping[profile]}/"
            f"{coordinates}"
        )

    async def _fetch_route(
        self,
        waypoints: Sequence[Coordinate],
        profile: str,
        *,
        timeout: float,
    ) -> dict[str, Any]:
        params = {
            "access_token": self._access_token,
            "geometries": "geojson",
            "overview": "full",
            "steps": "true",
        }
        session = await get_session()
        data = await request_json(
            "GET",
            self.directions_url(waypoints, profile),
            session=session,
            params=params,
            service_name="Mapbox directions",
            provider=self.name,
            timeout=timeout,
        )
        if not isinstance(data, dict):
            msg = "Mapbox directions error: unexpected response"
            raise UnknownProviderError(msg, provider=self.name)

        code = data.get("code")
        if code != "Ok":
            raise self._error_for_code(code, data.get("message"))
        return data

    def _normalize(
        self,
        native: dict[str, Any],
        waypoints: Sequence[Coordinate],
        profile: str,
    ) -> CanonicalRouteResponse:
        return normalize_mapbox_response(
            native,
            waypoints,
            self.name,
            default_mode=self.travel_mode(profile),
        )

    def _error_for_code(self, code: Any, message: Any) -> ProviderError:
        text = f"Mapbox directions error ({code}): {message or 'no message'}"
        details = {"backend_code": code}
        if code in MAPBOX_INVALID_INPUT_CODES:
            return InvalidInputError(text, provider=self.name, details=details)
        if code in MAPBOX_NO_ROUTE_CODES:
            return NoRouteFoundError(text, provider=self.name, details=details)
        return UnknownProviderError(text, provider=self.name, details=details)

    def classify_error(self, exc: ExternalServiceError) -> ProviderError:
        status = exc.status or 0
        body = exc.body if isinstance(exc.body, dict) else {}
        code = body.get("code")
        message = body.get("message") or exc.message

        if status in (401, 403):
            return UnauthorizedError(
                f"Mapbox rejected credentials: {message}",
                provider=self.name,
                details={"status": status},
            )
        if status == 429:
            return RateLimitError(
                f"Mapbox rate limit exceeded: {message}",
                provider=self.name,
                details={"status": status, "retry_after": exc.details.get("retry_after")},
            )
        if status >= 500:
            return ServiceUnavailableError(
                f"Mapbox unavailable ({status}): {message}",
                provider=self.name,
                details={"status": status},
            )
        if code in MAPBOX_INVALID_INPUT_CODES or code in MAPBOX_NO_ROUTE_CODES:
            return self._error_for_code(code, message)
        if status in (400, 404, 422):
            return InvalidInputError(
                f"Mapbox rejected request ({status}): {message}",
                provider=self.name,
                details={"status": status},
            )
        return UnknownProviderError(
            f"Mapbox directions error ({status}): {message}",
            provider=self.name,
            details={"status": status, "body": exc.body},
        )
