"""
Base provider interface for routing backends.

An adapter declares a fixed profile catalog and a mapping from each profile
id to the backend's own profile vocabulary, fetches one native directions
payload per request, and hands it to the normalizer. Adding a backend means
adding a subclass; the registry and normalizer never change.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from core.constants import DEFAULT_REQUEST_TIMEOUT, MAX_HEALTH_CHECK_TIMEOUT
from core.exceptions import ExternalServiceError, ProviderError, UnknownProviderError
from routing.profiles import profile_ids, validate_catalog
from routing.schemas import (
    CanonicalRouteResponse,
    Coordinate,
    ProfileCategory,
    ProfileMetadata,
    RouteRequest,
)

logger = logging.getLogger(__name__)

# Downtown San Francisco; routable on every supported backend.
DEFAULT_HEALTH_CHECK_WAYPOINTS: tuple[Coordinate, Coordinate] = (
    Coordinate(latitude=37.7749, longitude=-122.4194),
    Coordinate(latitude=37.7849, longitude=-122.4084),
)


class RouteProvider(ABC):
    """Adapter between the canonical routing contract and one backend."""

    name: ClassVar[str]
    display_name: ClassVar[str]
    profiles: ClassVar[tuple[ProfileMetadata, ...]]
    default_profile: ClassVar[str]
    profile_mapping: ClassVar[Mapping[str, Any]]
    health_check_waypoints: ClassVar[tuple[Coordinate, Coordinate]] = (
        DEFAULT_HEALTH_CHECK_WAYPOINTS
    )

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        health_check_timeout: float = MAX_HEALTH_CHECK_TIMEOUT,
    ) -> None:
        validate_catalog(
            self.name,
            self.profiles,
            self.default_profile,
            self.profile_mapping,
        )
        self.timeout = timeout
        self.health_check_timeout = min(health_check_timeout, MAX_HEALTH_CHECK_TIMEOUT)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"

    @property
    def profile_ids(self) -> list[str]:
        return profile_ids(self.profiles)

    def is_valid_profile(self, profile: str) -> bool:
        return profile in self.profile_mapping and profile in self.profile_ids

    def resolve_profile(self, profile: str | None) -> str:
        return profile or self.default_profile

    def get_profile(self, profile: str) -> ProfileMetadata | None:
        return next((p for p in self.profiles if p.id == profile), None)

    def travel_mode(self, profile: str) -> str:
        """Canonical step mode for a profile, derived from its category."""
        metadata = self.get_profile(profile)
        if metadata is None or metadata.category == ProfileCategory.OTHER:
            return "cycling"
        return metadata.category.value

    async def calculate_route(self, request: RouteRequest) -> CanonicalRouteResponse:
        """Calculate a route and return it in canonical form.

        The profile is assumed to have been validated by the registry; when
        absent the adapter's default profile is used.
        """
        profile = self.resolve_profile(request.profile)
        logger.info(
            "Calculating route provider=%s profile=%s waypoints=%d user=%s",
            self.name,
            profile,
            len(request.waypoints),
            request.user_id,
        )

        try:
            native = await self._fetch_route(
                request.waypoints,
                profile,
                timeout=self.timeout,
            )
            response = self._normalize(native, request.waypoints, profile)
        except ExternalServiceError as exc:
            error = self.classify_error(exc)
            logger.warning(
                "Route calculation failed provider=%s code=%s status=%s: %s",
                self.name,
                error.code,
                exc.status,
                error.message,
            )
            raise error from exc
        except ProviderError as exc:
            if exc.provider is None:
                exc.provider = self.name
            logger.warning(
                "Route calculation failed provider=%s code=%s: %s",
                self.name,
                exc.code,
                exc.message,
            )
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            # malformed native payload the normalizer did not anticipate
            logger.exception("Malformed response from provider=%s", self.name)
            msg = f"{self.display_name} returned an unexpected response: {exc}"
            raise UnknownProviderError(msg, provider=self.name) from exc
        except Exception as exc:
            # CancelledError is a BaseException and passes through
            logger.exception("Unexpected failure from provider=%s", self.name)
            raise UnknownProviderError(
                str(exc) or type(exc).__name__,
                provider=self.name,
            ) from exc

        first = response.routes[0]
        logger.info(
            "Route calculated provider=%s routes=%d distance=%.0fm duration=%.0fs",
            self.name,
            len(response.routes),
            first.distance,
            first.duration,
        )
        return response

    async def is_available(self) -> bool:
        """Run a short synthetic route request; never raises."""
        try:
            await self._fetch_route(
                list(self.health_check_waypoints),
                self.default_profile,
                timeout=self.health_check_timeout,
            )
        except Exception as exc:
            logger.info("Availability check failed provider=%s: %s", self.name, exc)
            return False
        return True

    @abstractmethod
    async def _fetch_route(
        self,
        waypoints: Sequence[Coordinate],
        profile: str,
        *,
        timeout: float,
    ) -> dict[str, Any]:
        """Issue the backend call and return its decoded native payload."""

    @abstractmethod
    def _normalize(
        self,
        native: dict[str, Any],
        waypoints: Sequence[Coordinate],
        profile: str,
    ) -> CanonicalRouteResponse:
        """Convert the native payload into the canonical response."""

    @abstractmethod
    def classify_error(self, exc: ExternalServiceError) -> ProviderError:
        """Map a non-success backend response onto the canonical taxonomy."""
