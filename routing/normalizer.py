"""
Response normalizer.

Pure transformations from each backend's native directions payload into the
CanonicalRouteResponse shape. Nothing in this module performs I/O or keeps
state, so it can be exercised directly against captured fixtures.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from core.constants import (
    KILOMETERS_TO_METERS,
    POLYLINE5_PRECISION,
    POLYLINE6_PRECISION,
)
from core.exceptions import NoRouteFoundError, UnknownProviderError
from core.math_utils import bearing_after, bearing_before, normalize_bearing
from core.polyline import PolylineDecodeError, decode_polyline
from routing.schemas import (
    CanonicalRouteResponse,
    Coordinate,
    Maneuver,
    Position,
    Route,
    RouteLeg,
    RouteStep,
    Waypoint,
)

DEFAULT_MANEUVER: tuple[str, str | None] = ("turn", None)

# OpenRouteService instruction types
ORS_MANEUVERS: dict[int, tuple[str, str | None]] = {
    0: ("turn", "left"),
    1: ("turn", "right"),
    2: ("turn", "sharp left"),
    3: ("turn", "sharp right"),
    4: ("turn", "slight left"),
    5: ("turn", "slight right"),
    6: ("continue", "straight"),
    7: ("roundabout", None),
    8: ("exit roundabout", None),
    9: ("turn", "uturn"),
    10: ("arrive", None),
    11: ("depart", None),
    12: ("fork", "left"),
    13: ("fork", "right"),
}

# Valhalla maneuver types
VALHALLA_MANEUVERS: dict[int, tuple[str, str | None]] = {
    0: ("turn", None),
    1: ("depart", None),
    2: ("depart", "right"),
    3: ("depart", "left"),
    4: ("arrive", None),
    5: ("arrive", "right"),
    6: ("arrive", "left"),
    7: ("new name", "straight"),
    8: ("continue", "straight"),
    9: ("turn", "slight right"),
    10: ("turn", "right"),
    11: ("turn", "sharp right"),
    12: ("turn", "uturn"),
    13: ("turn", "uturn"),
    14: ("turn", "sharp left"),
    15: ("turn", "left"),
    16: ("turn", "slight left"),
    17: ("on ramp", "straight"),
    18: ("on ramp", "right"),
    19: ("on ramp", "left"),
    20: ("off ramp", "right"),
    21: ("off ramp", "left"),
    22: ("fork", "straight"),
    23: ("fork", "right"),
    24: ("fork", "left"),
    25: ("merge", "straight"),
    26: ("roundabout", None),
    27: ("exit roundabout", None),
    28: ("notification", None),
    29: ("notification", None),
    30: ("notification", None),
    31: ("notification", None),
    32: ("notification", None),
    33: ("notification", None),
    34: ("notification", None),
    35: ("notification", None),
    36: ("notification", None),
    37: ("merge", "right"),
    38: ("merge", "left"),
    39: ("notification", None),
    40: ("notification", None),
    41: ("notification", None),
    42: ("notification", None),
    43: ("notification", None),
}

VALHALLA_TRAVEL_MODES: dict[str, str] = {
    "bicycle": "cycling",
    "pedestrian": "walking",
    "drive": "driving",
    "transit": "transit",
}

ORS_UNNAMED = "-"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def waypoint_name(index: int, total: int) -> str:
    if index == 0:
        return "Origin"
    if index == total - 1:
        return "Destination"
    return f"Waypoint {index}"


def build_waypoints(
    waypoints: Sequence[Coordinate],
    snap_distances: Sequence[float | None] | None = None,
) -> list[Waypoint]:
    """Synthesize canonical waypoints from the request's coordinates.

    Backend waypoint lists are never trusted for order or count; a backend's
    snap distances are only carried over when it reports one per waypoint.
    """
    total = len(waypoints)
    use_distances = snap_distances is not None and len(snap_distances) == total
    return [
        Waypoint(
            name=waypoint_name(index, total),
            location=wp.as_position(),
            distance=snap_distances[index] if use_distances else None,
        )
        for index, wp in enumerate(waypoints)
    ]


def _coerce_position(point: Any) -> Position | None:
    if isinstance(point, Mapping):
        lon = point.get("lon", point.get("lng", point.get("longitude")))
        lat = point.get("lat", point.get("latitude"))
        extra = []
    else:
        if not isinstance(point, (list, tuple)) or len(point) < 2:
            return None
        lon, lat = point[0], point[1]
        extra = list(point[2:3])
    if lon is None or lat is None:
        return None
    try:
        position = [float(lon), float(lat)]
        position.extend(float(value) for value in extra)
    except (TypeError, ValueError):
        return None
    return position


def coerce_geometry(
    value: Any,
    *,
    precision: int = POLYLINE5_PRECISION,
) -> list[Position]:
    """Return [lon, lat] positions from any geometry encoding a backend emits.

    Accepts encoded polyline strings, GeoJSON LineStrings, lists of
    [lon, lat] / [lon, lat, alt] sequences and lists of {lon, lat} dicts.
    Malformed points are skipped; a malformed polyline raises
    PolylineDecodeError.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return decode_polyline(value, precision)
    if isinstance(value, Mapping):
        value = value.get("coordinates")
    if not isinstance(value, (list, tuple)):
        return []

    coords: list[Position] = []
    for point in value:
        position = _coerce_position(point)
        if position is not None:
            coords.append(position)
    return coords


def slice_geometry(coords: Sequence[Position], start: int, end: int) -> list[Position]:
    if start < 0 or end < start or start >= len(coords):
        return []
    return [list(point) for point in coords[start : end + 1]]


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def map_ors_maneuver(
    instruction_type: Any,
    exit_number: Any = None,
) -> tuple[str, str | None]:
    """Translate an ORS instruction type into a canonical (type, modifier)."""
    code = _int_or_none(instruction_type)
    maneuver_type, modifier = ORS_MANEUVERS.get(code, DEFAULT_MANEUVER)
    if code == 8 and exit_number:
        modifier = f"exit {exit_number}"
    return maneuver_type, modifier


def map_valhalla_maneuver(maneuver_type: Any) -> tuple[str, str | None]:
    """Translate a Valhalla maneuver type into a canonical (type, modifier)."""
    return VALHALLA_MANEUVERS.get(_int_or_none(maneuver_type), DEFAULT_MANEUVER)


def _leg_summary(names: Sequence[str], fallback: str) -> str:
    seen: list[str] = []
    for name in names:
        if name and name != ORS_UNNAMED and name not in seen:
            seen.append(name)
    return ", ".join(seen) or fallback


def _fallback_geometry(
    waypoints: Sequence[Coordinate],
    provider: str,
    warnings: list[str],
) -> list[Position]:
    warnings.append(
        f"{provider} returned no route geometry; using straight lines between waypoints",
    )
    return [wp.as_position() for wp in waypoints]


def _single_leg(distance: float, duration: float, provider: str, warnings: list[str]) -> RouteLeg:
    warnings.append(
        f"{provider} returned no turn-by-turn breakdown; using a single leg without steps",
    )
    return RouteLeg(distance=distance, duration=duration, steps=[], summary="Route")


def _finish(
    routes: list[Route],
    waypoints: Sequence[Coordinate],
    provider: str,
    warnings: list[str],
    snap_distances: Sequence[float | None] | None = None,
) -> CanonicalRouteResponse:
    if not routes:
        msg = f"{provider} returned no routes"
        raise NoRouteFoundError(msg, provider=provider)
    return CanonicalRouteResponse(
        code="Ok",
        routes=routes,
        waypoints=build_waypoints(waypoints, snap_distances),
        provider=provider,
        warnings=list(dict.fromkeys(warnings)) or None,
    )


def _decode_or_fail(value: Any, precision: int, provider: str) -> list[Position]:
    try:
        return coerce_geometry(value, precision=precision)
    except PolylineDecodeError as exc:
        msg = f"{provider} returned malformed geometry: {exc}"
        raise UnknownProviderError(msg, provider=provider) from exc


# ---------------------------------------------------------------------------
# Mapbox
# ---------------------------------------------------------------------------


def _normalize_mapbox_step(
    step: Mapping[str, Any],
    precision: int,
    provider: str,
    default_mode: str,
) -> RouteStep:
    geometry = _decode_or_fail(step.get("geometry"), precision, provider)
    native = step.get("maneuver") or {}
    location = _coerce_position(native.get("location")) or (
        geometry[0][:2] if geometry else [0.0, 0.0]
    )
    maneuver = Maneuver(
        type=str(native.get("type") or DEFAULT_MANEUVER[0]),
        instruction=str(native.get("instruction") or ""),
        bearing_before=normalize_bearing(_float(native.get("bearing_before"))),
        bearing_after=normalize_bearing(_float(native.get("bearing_after"))),
        location=location[:2],
        modifier=native.get("modifier") or None,
    )
    return RouteStep(
        distance=_float(step.get("distance")),
        duration=_float(step.get("duration")),
        geometry=geometry,
        name=str(step.get("name") or ""),
        mode=str(step.get("mode") or default_mode),
        maneuver=maneuver,
    )


def normalize_mapbox_response(
    native: Mapping[str, Any],
    waypoints: Sequence[Coordinate],
    provider: str = "mapbox",
    *,
    precision: int = POLYLINE5_PRECISION,
    default_mode: str = "cycling",
) -> CanonicalRouteResponse:
    """Normalize a Mapbox Directions v5 payload.

    Mapbox already speaks the canonical vocabulary; this pass coerces
    geometry into position lists, wraps bearings into [0, 360), and replaces
    the backend waypoints with ones synthesized from the request.
    """
    warnings: list[str] = []
    routes: list[Route] = []
    for native_route in native.get("routes") or []:
        geometry = _decode_or_fail(native_route.get("geometry"), precision, provider)
        if not geometry:
            geometry = _fallback_geometry(waypoints, provider, warnings)
        distance = _float(native_route.get("distance"))
        duration = _float(native_route.get("duration"))
        legs = [
            RouteLeg(
                distance=_float(leg.get("distance")),
                duration=_float(leg.get("duration")),
                steps=[
                    _normalize_mapbox_step(step, precision, provider, default_mode)
                    for step in leg.get("steps") or []
                ],
                summary=str(leg.get("summary") or ""),
            )
            for leg in native_route.get("legs") or []
        ]
        if not legs:
            legs = [_single_leg(distance, duration, provider, warnings)]
        routes.append(
            Route(
                distance=distance,
                duration=duration,
                geometry=geometry,
                legs=legs,
                weight=_float(native_route.get("weight"), duration),
                weight_name=str(native_route.get("weight_name") or "duration"),
            ),
        )

    native_waypoints = native.get("waypoints") or []
    snap_distances = [
        _float(wp.get("distance")) if wp.get("distance") is not None else None
        for wp in native_waypoints
        if isinstance(wp, Mapping)
    ]
    return _finish(routes, waypoints, provider, warnings, snap_distances)


# ---------------------------------------------------------------------------
# OpenRouteService
# ---------------------------------------------------------------------------


def _normalize_ors_step(
    step: Mapping[str, Any],
    route_coords: Sequence[Position],
    mode: str,
) -> RouteStep:
    way_points = step.get("way_points") or []
    start = _int_or_none(way_points[0]) if len(way_points) >= 2 else None
    end = _int_or_none(way_points[1]) if len(way_points) >= 2 else None

    if start is not None and end is not None:
        geometry = slice_geometry(route_coords, start, end)
    else:
        geometry = []

    if geometry:
        location = geometry[0][:2]
        before = bearing_before(route_coords, start)
        after = bearing_after(route_coords, start)
    else:
        location = list(route_coords[0][:2]) if route_coords else [0.0, 0.0]
        before = after = 0.0

    maneuver_type, modifier = map_ors_maneuver(step.get("type"), step.get("exit_number"))
    name = str(step.get("name") or "")
    return RouteStep(
        distance=_float(step.get("distance")),
        duration=_float(step.get("duration")),
        geometry=geometry,
        name="" if name == ORS_UNNAMED else name,
        mode=str(step.get("mode") or mode),
        maneuver=Maneuver(
            type=maneuver_type,
            instruction=str(step.get("instruction") or ""),
            bearing_before=before,
            bearing_after=after,
            location=location,
            modifier=modifier,
        ),
    )


def normalize_ors_response(
    native: Mapping[str, Any],
    waypoints: Sequence[Coordinate],
    provider: str = "openrouteservice",
    *,
    mode: str = "cycling",
) -> CanonicalRouteResponse:
    """Normalize an OpenRouteService Directions v2 JSON payload.

    ORS encodes geometry as a precision-5 polyline, nests steps inside
    segments (one per pair of consecutive waypoints), and references step
    geometry by way-point indices into the route geometry.
    """
    warnings: list[str] = []
    routes: list[Route] = []
    for native_route in native.get("routes") or []:
        summary = native_route.get("summary") or {}
        distance = _float(summary.get("distance"))
        duration = _float(summary.get("duration"))

        geometry = _decode_or_fail(
            native_route.get("geometry"),
            POLYLINE5_PRECISION,
            provider,
        )
        if not geometry:
            geometry = _fallback_geometry(waypoints, provider, warnings)

        legs: list[RouteLeg] = []
        for segment in native_route.get("segments") or []:
            steps = [
                _normalize_ors_step(step, geometry, mode)
                for step in segment.get("steps") or []
            ]
            legs.append(
                RouteLeg(
                    distance=_float(segment.get("distance")),
                    duration=_float(segment.get("duration")),
                    steps=steps,
                    summary=_leg_summary([s.name for s in steps], "Route segment"),
                ),
            )
        if not legs:
            legs = [_single_leg(distance, duration, provider, warnings)]

        routes.append(
            Route(
                distance=distance,
                duration=duration,
                geometry=geometry,
                legs=legs,
                weight=duration,
                weight_name="duration",
            ),
        )
    return _finish(routes, waypoints, provider, warnings)


# ---------------------------------------------------------------------------
# Valhalla
# ---------------------------------------------------------------------------


def _valhalla_trips(native: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    trips: list[Mapping[str, Any]] = []
    trip = native.get("trip")
    if isinstance(trip, Mapping):
        trips.append(trip)
    for alternate in native.get("alternates") or []:
        alt_trip = alternate.get("trip") if isinstance(alternate, Mapping) else None
        if isinstance(alt_trip, Mapping):
            trips.append(alt_trip)
    return trips


def _trip_shape_offsets(native_legs: Sequence[Mapping[str, Any]]) -> list[int]:
    """Leg start indices into a trip-level shape.

    Maneuver shape indices are leg-relative and consecutive legs share their
    joining point, so each leg starts at the previous leg's last index.
    """
    offsets: list[int] = []
    offset = 0
    for leg in native_legs:
        offsets.append(offset)
        ends = [
            _int_or_none(maneuver.get("end_shape_index"))
            for maneuver in leg.get("maneuvers") or []
        ]
        offset += max((end for end in ends if end is not None), default=0)
    return offsets


def _normalize_valhalla_maneuver(
    maneuver: Mapping[str, Any],
    route_coords: Sequence[Position],
    offset: int,
    default_mode: str,
) -> RouteStep:
    begin = _int_or_none(maneuver.get("begin_shape_index"))
    end = _int_or_none(maneuver.get("end_shape_index"))
    if begin is not None and end is not None:
        geometry = slice_geometry(route_coords, begin + offset, end + offset)
    else:
        geometry = []

    route_index = begin + offset if begin is not None else -1
    if "bearing_before" in maneuver:
        before = normalize_bearing(_float(maneuver.get("bearing_before")))
    else:
        before = bearing_before(route_coords, route_index)
    if "bearing_after" in maneuver:
        after = normalize_bearing(_float(maneuver.get("bearing_after")))
    else:
        after = bearing_after(route_coords, route_index)

    if geometry:
        location = geometry[0][:2]
    else:
        location = list(route_coords[0][:2]) if route_coords else [0.0, 0.0]

    maneuver_type, modifier = map_valhalla_maneuver(maneuver.get("type"))
    street_names = maneuver.get("street_names") or []
    travel_mode = str(maneuver.get("travel_mode") or "")
    return RouteStep(
        distance=_float(maneuver.get("length")) * KILOMETERS_TO_METERS,
        duration=_float(maneuver.get("time")),
        geometry=geometry,
        name=", ".join(str(name) for name in street_names),
        mode=VALHALLA_TRAVEL_MODES.get(travel_mode, default_mode),
        maneuver=Maneuver(
            type=maneuver_type,
            instruction=str(maneuver.get("instruction") or ""),
            bearing_before=before,
            bearing_after=after,
            location=location,
            modifier=modifier,
        ),
    )


def normalize_valhalla_response(
    native: Mapping[str, Any],
    waypoints: Sequence[Coordinate],
    provider: str = "valhalla",
    *,
    mode: str = "cycling",
) -> CanonicalRouteResponse:
    """Normalize a Valhalla /route payload requested in kilometers.

    Each leg carries its own precision-6 shape; the route geometry is the
    concatenation of leg shapes with the shared joining point kept once, and
    maneuver shape indices are offset into that combined geometry.
    """
    warnings: list[str] = []
    routes: list[Route] = []
    for trip in _valhalla_trips(native):
        summary = trip.get("summary") or {}
        distance = _float(summary.get("length")) * KILOMETERS_TO_METERS
        duration = _float(summary.get("time"))

        native_legs = trip.get("legs") or []
        geometry: list[Position] = []
        offsets: list[int] = []
        for leg in native_legs:
            leg_coords = _decode_or_fail(leg.get("shape"), POLYLINE6_PRECISION, provider)
            if geometry and leg_coords and geometry[-1] == leg_coords[0]:
                offsets.append(len(geometry) - 1)
                geometry.extend(leg_coords[1:])
            else:
                offsets.append(len(geometry))
                geometry.extend(leg_coords)
        if not geometry:
            geometry = _decode_or_fail(trip.get("shape"), POLYLINE6_PRECISION, provider)
            offsets = _trip_shape_offsets(native_legs)
        if not geometry:
            geometry = _fallback_geometry(waypoints, provider, warnings)

        legs: list[RouteLeg] = []
        for leg, offset in zip(native_legs, offsets, strict=True):
            leg_summary = leg.get("summary") or {}
            steps = [
                _normalize_valhalla_maneuver(maneuver, geometry, offset, mode)
                for maneuver in leg.get("maneuvers") or []
            ]
            legs.append(
                RouteLeg(
                    distance=_float(leg_summary.get("length")) * KILOMETERS_TO_METERS,
                    duration=_float(leg_summary.get("time")),
                    steps=steps,
                    summary=_leg_summary([s.name for s in steps], "Route segment"),
                ),
            )
        if not legs:
            legs = [_single_leg(distance, duration, provider, warnings)]

        routes.append(
            Route(
                distance=distance,
                duration=duration,
                geometry=geometry,
                legs=legs,
                weight=_float(summary.get("cost"), duration),
                weight_name="cost" if "cost" in summary else "duration",
            ),
        )
    return _finish(routes, waypoints, provider, warnings)
