"""
Valhalla routing provider.

Talks to a self-hosted (or hosted) Valhalla instance's /route action. Each
catalog profile maps to a costing model plus costing options; bicycle
profiles select Valhalla's bicycle_type.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from config import (
    get_valhalla_api_key,
    get_valhalla_base_url,
    get_valhalla_health_check_points,
)
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
from routing.normalizer import normalize_valhalla_response
from routing.providers.base import RouteProvider
from routing.schemas import (
    CanonicalRouteResponse,
    Coordinate,
    ProfileCategory,
    ProfileMetadata,
)

logger = logging.getLogger(__name__)

VALHALLA_PROFILES: tuple[ProfileMetadata, ...] = (
    ProfileMetadata(
        id="cycling",
        title="Hybrid Bike",
        icon="directions-bike",
        category=ProfileCategory.CYCLING,
    ),
    ProfileMetadata(
        id="cycling-road",
        title="Road Bike",
        icon="directions-bike",
        category=ProfileCategory.CYCLING,
    ),
    ProfileMetadata(
        id="cycling-mountain",
        title="Mountain Bike",
        icon="terrain",
        category=ProfileCategory.CYCLING,
    ),
    ProfileMetadata(
        id="cycling-gravel",
        title="Gravel Bike",
        icon="directions-bike",
        category=ProfileCategory.CYCLING,
        description="Cyclocross-style bike comfortable on unpaved paths.",
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
)

# Valhalla error_code values
VALHALLA_NO_ROUTE_CODES = frozenset({170, 171, 442})


class ValhallaProvider(RouteProvider):
    name = "valhalla"
    display_name = "Valhalla"
    profiles = VALHALLA_PROFILES
    default_profile = "cycling"
    profile_mapping = {
        "cycling": ("bicycle", {"bicycle_type": "Hybrid"}),
        "cycling-road": ("bicycle", {"bicycle_type": "Road"}),
        "cycling-mountain": ("bicycle", {"bicycle_type": "Mountain"}),
        "cycling-gravel": ("bicycle", {"bicycle_type": "Cross"}),
        "walking": ("pedestrian", {}),
        "driving": ("auto", {}),
    }

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        health_check_waypoints: Sequence[Coordinate] | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        health_check_timeout: float = MAX_HEALTH_CHECK_TIMEOUT,
    ) -> None:
        super().__init__(timeout=timeout, health_check_timeout=health_check_timeout)
        self._base_url = (base_url or get_valhalla_base_url()).rstrip("/")
        self._api_key = api_key if api_key is not None else get_valhalla_api_key()
        # self-hosted instances only route inside their own tiles
        if health_check_waypoints is None:
            points = get_valhalla_health_check_points()
            if points is not None:
                health_check_waypoints = [
                    Coordinate(latitude=lat, longitude=lon) for lat, lon in points
                ]
        if health_check_waypoints is not None:
            origin, destination = health_check_waypoints
            self.health_check_waypoints = (origin, destination)

    @property
    def route_url(self) -> str:
        return f"{self._base_url}/route"

    def build_payload(
        self,
        waypoints: Sequence[Coordinate],
        profile: str,
    ) -> dict[str, Any]:
        costing, costing_options = self.profile_mapping[profile]
        payload: dict[str, Any] = {
            "locations": [
                {"lat": wp.latitude, "lon": wp.longitude} for wp in waypoints
            ],
            "costing": costing,
            "directions_options": {"units": "kilometers", "language": "en-US"},
        }
        if costing_options:
            payload["costing_options"] = {costing: dict(costing_options)}
        return payload

    async def _fetch_route(
        self,
        waypoints: Sequence[Coordinate],
        profile: str,
        *,
        timeout: float,
    ) -> dict[str, Any]:
        params = {"api_key": self._api_key} if self._api_key else None
        session = await get_session()
        data = await request_json(
            "POST",
            self.route_url,
            session=session,
            params=params,
            json=self.build_payload(waypoints, profile),
            service_name="Valhalla route",
            provider=self.name,
            timeout=timeout,
        )
        if not isinstance(data, dict) or not isinstance(data.get("trip"), dict):
            msg = "Valhalla route error: unexpected response"
            raise UnknownProviderError(msg, provider=self.name)
        return data

    def _normalize(
        self,
        native: dict[str, Any],
        waypoints: Sequence[Coordinate],
        profile: str,
    ) -> CanonicalRouteResponse:
        return normalize_valhalla_response(
            native,
            waypoints,
            self.name,
            mode=self.travel_mode(profile),
        )

    def classify_error(self, exc: ExternalServiceError) -> ProviderError:
        status = exc.status or 0
        body = exc.body if isinstance(exc.body, dict) else {}
        try:
            code = int(body["error_code"]) if "error_code" in body else None
        except (TypeError, ValueError):
            code = None
        message = body.get("error") or exc.message
        details = {"status": status, "backend_code": code}

        if status in (401, 403):
            return UnauthorizedError(
                f"Valhalla rejected credentials: {message}",
                provider=self.name,
                details=details,
            )
        if status == 429:
            return RateLimitError(
                f"Valhalla rate limit exceeded: {message}",
                provider=self.name,
                details={**details, "retry_after": exc.details.get("retry_after")},
            )
        if code in VALHALLA_NO_ROUTE_CODES:
            return NoRouteFoundError(
                f"Valhalla found no route ({code}): {message}",
                provider=self.name,
                details=details,
            )
        if code is not None and 100 <= code < 200:
            return InvalidInputError(
                f"Valhalla rejected request ({code}): {message}",
                provider=self.name,
                details=details,
            )
        if status >= 500:
            return ServiceUnavailableError(
                f"Valhalla unavailable ({status}): {message}",
                provider=self.name,
                details=details,
            )
        return UnknownProviderError(
            f"Valhalla route error ({code or status}): {message}",
            provider=self.name,
            details=details,
        )
