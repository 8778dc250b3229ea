"""Schemas for routing requests, profile catalogs and canonical responses."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Position = list[float]
UserPlan = Literal["free", "paid"]


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def as_position(self) -> Position:
        """Return the coordinate as a [lon, lat] pair."""
        return [self.longitude, self.latitude]


class RouteRequest(BaseModel):
    """Internal route request built once per inbound call."""

    waypoints: list[Coordinate] = Field(..., min_length=2)
    profile: str | None = None
    provider: str | None = None
    user_id: str | None = None
    user_plan: UserPlan = "free"


class ProfileCategory(str, Enum):
    CYCLING = "cycling"
    WALKING = "walking"
    DRIVING = "driving"
    OTHER = "other"


class ProfileMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    icon: str
    category: ProfileCategory
    description: str | None = None


class Maneuver(BaseModel):
    type: str
    instruction: str = ""
    bearing_before: float = Field(0.0, ge=0, lt=360)
    bearing_after: float = Field(0.0, ge=0, lt=360)
    location: Position
    modifier: str | None = None


class RouteStep(BaseModel):
    distance: float
    duration: float
    geometry: list[Position]
    name: str = ""
    mode: str
    maneuver: Maneuver


class RouteLeg(BaseModel):
    distance: float
    duration: float
    steps: list[RouteStep] = Field(default_factory=list)
    summary: str = ""


class Route(BaseModel):
    distance: float
    duration: float
    geometry: list[Position]
    legs: list[RouteLeg]
    weight: float
    weight_name: str


class Waypoint(BaseModel):
    name: str
    location: Position
    distance: float | None = None


class CanonicalRouteResponse(BaseModel):
    """The single response shape every provider adapter produces."""

    code: str = "Ok"
    routes: list[Route] = Field(default_factory=list)
    waypoints: list[Waypoint] = Field(default_factory=list)
    provider: str
    warnings: list[str] | None = None

    @model_validator(mode="after")
    def _code_matches_routes(self) -> CanonicalRouteResponse:
        if (self.code == "Ok") != bool(self.routes):
            msg = "code must be 'Ok' exactly when routes is non-empty"
            raise ValueError(msg)
        return self

    def add_warning(self, warning: str) -> None:
        if self.warnings is None:
            self.warnings = []
        if warning not in self.warnings:
            self.warnings.append(warning)


# ---------------------------------------------------------------------------
# HTTP request / response models
# ---------------------------------------------------------------------------


class DirectionsRequest(BaseModel):
    waypoints: list[Coordinate] = Field(
        ...,
        min_length=2,
        description="Ordered waypoints; at least origin and destination.",
    )
    profile: str | None = None
    provider: str | None = None


class ProviderInfo(BaseModel):
    name: str
    displayName: str
    profiles: list[ProfileMetadata]
    defaultProfile: str
    available: bool


class ProvidersResponse(BaseModel):
    providers: list[ProviderInfo]
    defaultProvider: str


class ProviderProfilesResponse(BaseModel):
    provider: str
    profiles: list[ProfileMetadata]
    defaultProfile: str
