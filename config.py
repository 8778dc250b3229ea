"""Centralized configuration for environment variables and routing backends.

This module is the single source of truth for configuration used across the
service. Import the getters from here rather than calling os.getenv directly
in multiple places. Values are read at call time so tests can patch the
environment.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from dotenv import load_dotenv

from core.constants import DEFAULT_REQUEST_TIMEOUT, MAX_HEALTH_CHECK_TIMEOUT

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)

SERVICE_NAME: Final[str] = "spinroute-routing"

DEFAULT_MAPBOX_BASE_URL: Final[str] = "https://api.mapbox.com"
DEFAULT_ORS_BASE_URL: Final[str] = "https://api.openrouteservice.org"
DEFAULT_VALHALLA_BASE_URL: Final[str] = "http://valhalla:8002"
DEFAULT_PROVIDER: Final[str] = "mapbox"
DEFAULT_ENABLED_PROVIDERS: Final[tuple[str, ...]] = (
    "mapbox",
    "openrouteservice",
    "valhalla",
)


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _milliseconds_to_seconds(name: str, default_seconds: float) -> float:
    raw = _env(name)
    if not raw:
        return default_seconds
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default_seconds
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r", name, raw)
        return default_seconds
    return value / 1000.0


# --- Mapbox Configuration ---
def get_mapbox_access_token() -> str:
    return _env("MAPBOX_ACCESS_TOKEN")


def get_mapbox_base_url() -> str:
    return _env("MAPBOX_BASE_URL", DEFAULT_MAPBOX_BASE_URL).rstrip("/")


# --- OpenRouteService Configuration ---
def get_ors_api_key() -> str:
    return _env("ORS_API_KEY")


def get_ors_base_url() -> str:
    return _env("ORS_BASE_URL", DEFAULT_ORS_BASE_URL).rstrip("/")


# --- Valhalla Configuration ---
def get_valhalla_base_url() -> str:
    return _env("VALHALLA_BASE_URL", DEFAULT_VALHALLA_BASE_URL).rstrip("/")


def get_valhalla_api_key() -> str:
    return _env("VALHALLA_API_KEY")


def get_valhalla_health_check_points() -> list[tuple[float, float]] | None:
    """(lat, lon) pair for Valhalla availability checks.

    VALHALLA_HEALTH_CHECK_POINTS is "lat,lon;lat,lon" and should sit inside
    the instance's tiles. Returns None when unset or malformed.
    """
    raw = _env("VALHALLA_HEALTH_CHECK_POINTS")
    if not raw:
        return None
    try:
        points = [
            (float(lat), float(lon))
            for lat, lon in (pair.split(",") for pair in raw.split(";"))
        ]
    except ValueError:
        logger.warning("Ignoring malformed VALHALLA_HEALTH_CHECK_POINTS=%r", raw)
        return None
    if len(points) != 2 or not all(
        -90 <= lat <= 90 and -180 <= lon <= 180 for lat, lon in points
    ):
        logger.warning("Ignoring malformed VALHALLA_HEALTH_CHECK_POINTS=%r", raw)
        return None
    return points


# --- Routing Configuration ---
def get_default_provider() -> str:
    return _env("DEFAULT_PROVIDER", DEFAULT_PROVIDER)


def get_enabled_providers() -> list[str]:
    raw = _env("ROUTING_PROVIDERS")
    if not raw:
        return list(DEFAULT_ENABLED_PROVIDERS)
    return [name.strip().lower() for name in raw.split(",") if name.strip()]


def get_request_timeout() -> float:
    """Per-request backend timeout in seconds (REQUEST_TIMEOUT is in ms)."""
    return _milliseconds_to_seconds("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)


def get_health_check_timeout() -> float:
    """Availability-check timeout in seconds, never above the 3s ceiling."""
    timeout = _milliseconds_to_seconds(
        "HEALTH_CHECK_TIMEOUT",
        MAX_HEALTH_CHECK_TIMEOUT,
    )
    return min(timeout, MAX_HEALTH_CHECK_TIMEOUT)


# --- Service Configuration ---
def get_service_version() -> str:
    return _env("SERVICE_VERSION", "0.1.0")


def get_cors_allowed_origins() -> list[str]:
    raw = _env("CORS_ALLOWED_ORIGINS")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


__all__ = [
    "DEFAULT_ENABLED_PROVIDERS",
    "SERVICE_NAME",
    "get_cors_allowed_origins",
    "get_default_provider",
    "get_enabled_providers",
    "get_health_check_timeout",
    "get_mapbox_access_token",
    "get_mapbox_base_url",
    "get_ors_api_key",
    "get_ors_base_url",
    "get_request_timeout",
    "get_service_version",
    "get_valhalla_api_key",
    "get_valhalla_base_url",
    "get_valhalla_health_check_points",
]
