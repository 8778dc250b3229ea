"""
OpenRouteService Directions v2 provider.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from config import get_ors_api_key, get_ors_base_url
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
from routing.normalizer import normalize_ors_response
from routing.providers.base import RouteProvider
from routing.schemas import (
    CanonicalRouteResponse,
    Coordinate,
    ProfileCategory,
    ProfileMetadata,
)

logger = logging.getLogger(__name__)

ORS_PROFILES: tuple[ProfileMetadata, ...] = (
    ProfileMetadata(
        id="cycling-regular",
        title="Regular Bike",
        icon="directions-bike",
        category=ProfileCategory.CYCLING,
    ),
    ProfileMetadata(
        id="cycling-road",
        title="Road Bike",
        icon="directions-bike",
        category=ProfileCategory.CYCLING,
        description="Prefers paved roads and avoids unpaved surfaces.",
    ),
    ProfileMetadata(
        id="cycling-mountain",
        title="Mountain Bike",
        icon="terrain",
        category=ProfileCategory.CYCLING,
    ),
    ProfileMetadata(
        id="cycling-electric",
        title="E-Bike",
        icon="electric-bike",
        category=ProfileCategory.CYCLING,
    ),
    ProfileMetadata(
        id="foot-walking",
        title="Walking",
        icon="directions-walk",
        category=ProfileCategory.WALKING,
    ),
    ProfileMetadata(
        id="foot-hiking",
        title="Hiking",
        icon="hiking",
        category=ProfileCategory.WALKING,
    ),
    ProfileMetadata(
        id="driving-car",
        title="Car",
        icon="directions-car",
        category=ProfileCategory.DRIVING,
    ),
    ProfileMetadata(
        id="wheelchair",
        title="Wheelchair",
        icon="accessible",
        category=ProfileCategory.OTHER,
    ),
)

# ORS API error codes (error.code in the response body)
ORS_INVALID_INPUT_CODES = frozenset({2001, 2002, 2003, 2004, 2011, 2012})
ORS_NO_ROUTE_CODES = frozenset({2009, 2010})


class OpenRouteServiceProvider(RouteProvider):
    name = "openrouteservice"
    display_name = "OpenRouteService"
    profiles = ORS_PROFILES
    default_profile = "cycling-regular"
    profile_mapping = {profile.id: profile.id for profile in ORS_PROFILES}
    # ORS headquarters, Heidelberg
    health_check_waypoints = (
        Coordinate(latitude=49.41461, longitude=8.681495),
        Coordinate(latitude=49.420318, longitude=8.687872),
    )

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        health_check_timeout: float = MAX_HEALTH_CHECK_TIMEOUT,
    ) -> None:
        super().__init__(timeout=timeout, health_check_timeout=health_check_timeout)
        self._api_key = api_key if api_key is not None else get_ors_api_key()
        self._base_url = (base_url or get_ors_base_url()).rstrip("/")
        if not self._api_key:
            logger.warning("OpenRouteService API key not configured")

    def travel_mode(self, profile: str) -> str:
        if profile.startswith("foot-") or profile == "wheelchair":
            return "walking"
        if profile.startswith("driving-"):
            return "driving"
        return "cycling"

    def directions_url(self, profile: str) -> str:
        return f"{self._base_url}/v2/directions/{self.profile_mapping[profile]}/json"

    async def _fetch_route(
        self,
        waypoints: Sequence[Coordinate],
        profile: str,
        *,
        timeout: float,
    ) -> dict[str, Any]:
        payload = {
            "coordinates": [wp.as_position() for wp in waypoints],
            "preference": "fastest",
            "units": "m",
            "language": "en",
            "geometry": True,
            "instructions": True,
            "instructions_format": "text",
            "elevation": False,
        }
        headers = {"Authorization": self._api_key}
        session = await get_session()
        data = await request_json(
            "POST",
            self.directions_url(profile),
            session=session,
            json=payload,
            headers=headers,
            service_name="OpenRouteService directions",
            provider=self.name,
            timeout=timeout,
        )
        if not isinstance(data, dict) or not isinstance(data.get("routes"), list):
            msg = "OpenRouteService directions error: invalid response structure"
            raise UnknownProviderError(msg, provider=self.name)
        return data

    def _normalize(
        self,
        native: dict[str, Any],
        waypoints: Sequence[Coordinate],
        profile: str,
    ) -> CanonicalRouteResponse:
        return normalize_ors_response(
            native,
            waypoints,
            self.name,
            mode=self.travel_mode(profile),
        )

    @staticmethod
    def _error_payload(body: Any) -> tuple[int | None, str | None]:
        if not isinstance(body, dict):
            return None, body if isinstance(body, str) else None
        error = body.get("error")
        if isinstance(error, dict):
            code = error.get("code")
            try:
                code = int(code) if code is not None else None
            except (TypeError, ValueError):
                code = None
            return code, error.get("message")
        if isinstance(error, str):
            return None, error
        return None, body.get("message")

    def classify_error(self, exc: ExternalServiceError) -> ProviderError:
        status = exc.status or 0
        code, message = self._error_payload(exc.body)
        message = message or exc.message
        details = {"status": status, "backend_code": code}

        if status in (401, 403):
            return UnauthorizedError(
                f"OpenRouteService rejected credentials: {message}",
                provider=self.name,
                details=details,
            )
        if status == 429:
            return RateLimitError(
                f"OpenRouteService rate limit exceeded: {message}",
                provider=self.name,
                details={**details, "retry_after": exc.details.get("retry_after")},
            )
        if code in ORS_NO_ROUTE_CODES:
            return NoRouteFoundError(
                f"OpenRouteService found no route ({code}): {message}",
                provider=self.name,
                details=details,
            )
        if code in ORS_INVALID_INPUT_CODES or status == 400:
            return InvalidInputError(
                f"OpenRouteService rejected request ({code or status}): {message}",
                provider=self.name,
                details=details,
            )
        if status in (502, 503, 504):
            return ServiceUnavailableError(
                f"OpenRouteService unavailable ({status}): {message}",
                provider=self.name,
                details=details,
            )
        return UnknownProviderError(
            f"OpenRouteService directions error ({code or status}): {message}",
            provider=self.name,
            details=details,
        )
