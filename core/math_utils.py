"""
Mathematical utilities for compass bearings.

This module provides the forward-azimuth calculation used to derive
maneuver bearings from route geometry when a backend does not report them.
"""

from __future__ import annotations

import math
from collections.abc import Sequence


def normalize_bearing(bearing: float) -> float:
    """
    Wrap a bearing in degrees into the half-open range [0, 360).

    Example:
        >>> normalize_bearing(-90.0)
        270.0
        >>> normalize_bearing(360.0)
        0.0
    """
    wrapped = math.fmod(float(bearing), 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # fmod of tiny negatives can round back up to exactly 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def forward_azimuth(
    start: Sequence[float],
    end: Sequence[float],
) -> float:
    """
    Calculate the initial bearing from ``start`` to ``end``.

    Args:
        start: [lon, lat] of the first point.
        end: [lon, lat] of the second point.

    Returns:
        Bearing in degrees, clockwise from true north, in [0, 360).
    """
    lon1 = math.radians(start[0])
    lat1 = math.radians(start[1])
    lon2 = math.radians(end[0])
    lat2 = math.radians(end[1])

    d_lon = lon2 - lon1
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        d_lon
    )
    return normalize_bearing(math.degrees(math.atan2(y, x)))


def bearing_before(coordinates: Sequence[Sequence[float]], index: int) -> float:
    """Bearing of travel arriving at ``coordinates[index]``; 0 at the first point."""
    if index <= 0 or index >= len(coordinates):
        return 0.0
    return round_bearing(forward_azimuth(coordinates[index - 1], coordinates[index]))


def bearing_after(coordinates: Sequence[Sequence[float]], index: int) -> float:
    """Bearing of travel leaving ``coordinates[index]``; 0 at the last point."""
    if index < 0 or index >= len(coordinates) - 1:
        return 0.0
    return round_bearing(forward_azimuth(coordinates[index], coordinates[index + 1]))


def round_bearing(bearing: float, ndigits: int = 1) -> float:
    """Round a bearing without letting 359.96 escape to 360.0."""
    return normalize_bearing(round(normalize_bearing(bearing), ndigits))
