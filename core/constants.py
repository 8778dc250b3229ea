"""Global constants for the core package.

This module contains shared constants used across the routing service.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 20
HTTP_TIMEOUT_CONNECT: Final[float] = 5.0
HTTP_TIMEOUT_TOTAL: Final[float] = 30.0
HTTP_USER_AGENT: Final[str] = "SpinRoute/1.0"

# Routing deadlines (seconds)
DEFAULT_REQUEST_TIMEOUT: Final[float] = 5.0
MAX_HEALTH_CHECK_TIMEOUT: Final[float] = 3.0

# Client disconnect polling interval (seconds)
DISCONNECT_POLL_INTERVAL: Final[float] = 0.25

# Polyline precisions
POLYLINE5_PRECISION: Final[int] = 5
POLYLINE6_PRECISION: Final[int] = 6

# Distance Conversion
KILOMETERS_TO_METERS: Final[float] = 1000.0
