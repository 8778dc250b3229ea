from __future__ import annotations

import asyncio
from typing import Any

from core.exceptions import ExternalServiceError, ProviderError, UnknownProviderError
from fixtures import ors_directions
from routing.normalizer import normalize_ors_response
from routing.providers.base import RouteProvider
from routing.schemas import ProfileCategory, ProfileMetadata

FAKE_PROFILES = (
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
    ),
    ProfileMetadata(
        id="walking",
        title="Walking",
        icon="directions-walk",
        category=ProfileCategory.WALKING,
    ),
)


class FakeProvider(RouteProvider):
    """In-memory adapter that answers with a captured ORS payload."""

    name = "providerA"
    display_name = "Provider A"
    profiles = FAKE_PROFILES
    default_profile = "cycling-regular"
    profile_mapping = {profile.id: profile.id for profile in FAKE_PROFILES}

    def __init__(
        self,
        *,
        available: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.available = available
        self.error = error
        self.delay = delay
        self.calls: list[tuple[int, str]] = []
        self.cancelled = False

    async def _fetch_route(self, waypoints, profile, *, timeout):
        self.calls.append((len(waypoints), profile))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return ors_directions()

    def _normalize(self, native, waypoints, profile):
        return normalize_ors_response(native, waypoints, self.name)

    def classify_error(self, exc: ExternalServiceError) -> ProviderError:
        return UnknownProviderError(exc.message, provider=self.name)

    async def is_available(self) -> bool:
        return self.available


class OtherFakeProvider(FakeProvider):
    name = "providerB"
    display_name = "Provider B"
