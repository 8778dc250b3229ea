import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from network_blocker import install_network_blocker

_ROUTING_ENV = (
    "MAPBOX_ACCESS_TOKEN",
    "MAPBOX_BASE_URL",
    "ORS_API_KEY",
    "ORS_BASE_URL",
    "VALHALLA_BASE_URL",
    "VALHALLA_API_KEY",
    "VALHALLA_HEALTH_CHECK_POINTS",
    "ROUTING_PROVIDERS",
    "DEFAULT_PROVIDER",
    "REQUEST_TIMEOUT",
    "HEALTH_CHECK_TIMEOUT",
    "CORS_ALLOWED_ORIGINS",
    "SERVICE_VERSION",
)


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ROUTING_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MAPBOX_ACCESS_TOKEN", "pk.test-token-12345678901234567890")
    monkeypatch.setenv("ORS_API_KEY", "ors-test-key")
    install_network_blocker(monkeypatch)
