"""
Encoded polyline codec.

Implements the Google polyline algorithm at an arbitrary precision
(5 for Google/OpenRouteService, 6 for Valhalla/OSRM). The wire format stores
latitude first; this module always exposes coordinates as [lon, lat].
"""

from __future__ import annotations

from collections.abc import Sequence


class PolylineDecodeError(ValueError):
    """Raised when an encoded polyline is truncated or malformed."""


def decode_polyline(encoded: str, precision: int = 5) -> list[list[float]]:
    """Decode an encoded polyline into [lon, lat] coordinate pairs."""
    if not encoded:
        return []

    coords: list[list[float]] = []
    index = 0
    lat = 0
    lon = 0
    length = len(encoded)
    factor = float(10**precision)

    def next_value() -> int:
        nonlocal index
        result = 0
        shift = 0
        while True:
            if index >= length:
                msg = "Invalid polyline encoding"
                raise PolylineDecodeError(msg)
            b = ord(encoded[index]) - 63
            if b < 0:
                msg = f"Invalid polyline character at offset {index}"
                raise PolylineDecodeError(msg)
            index += 1
            result |= (b & 0x1F) << shift
            shift += 5
            if b < 0x20:
                break
        if result & 1:
            return ~(result >> 1)
        return result >> 1

    while index < length:
        lat += next_value()
        lon += next_value()
        coords.append([lon / factor, lat / factor])

    return coords


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks: list[str] = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(
    coordinates: Sequence[Sequence[float]],
    precision: int = 5,
) -> str:
    """Encode [lon, lat] coordinate pairs into a polyline string."""
    factor = 10**precision
    output: list[str] = []
    prev_lat = 0
    prev_lon = 0
    for point in coordinates:
        lat = round(point[1] * factor)
        lon = round(point[0] * factor)
        output.append(_encode_value(lat - prev_lat))
        output.append(_encode_value(lon - prev_lon))
        prev_lat = lat
        prev_lon = lon
    return "".join(output)
