import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.exceptions import NoRouteFoundError, RateLimitError
from http_fakes import FakeSession
from provider_fakes import FakeProvider, OtherFakeProvider
from routing.providers import OpenRouteServiceProvider
from routing.registry import ProviderRegistry

DIRECTIONS_URL = "/api/routing/directions"
SF_BODY = [
    {"latitude": 37.7749, "longitude": -122.4194},
    {"latitude": 37.7849, "longitude": -122.4084},
]


def _client(*providers, default: str | None = None) -> TestClient:
    registry = ProviderRegistry(providers, default_provider=default)
    return TestClient(create_app(registry))


def test_directions_happy_path() -> None:
    provider = FakeProvider()
    client = _client(provider)

    response = client.post(
        DIRECTIONS_URL,
        json={"waypoints": SF_BODY, "profile": "cycling-road", "provider": "providerA"},
        headers={"X-User-Id": "user-42"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["code"] == "Ok"
    assert len(data["routes"]) >= 1
    assert data["provider"] == "providerA"
    assert [wp["name"] for wp in data["waypoints"]] == ["Origin", "Destination"]
    assert "warnings" not in data
    assert provider.calls == [(2, "cycling-road")]


def test_directions_uses_default_provider_and_profile() -> None:
    provider_b = OtherFakeProvider()
    client = _client(FakeProvider(), provider_b, default="providerB")

    response = client.post(DIRECTIONS_URL, json={"waypoints": SF_BODY})

    assert response.status_code == 200
    assert response.json()["provider"] == "providerB"
    assert provider_b.calls == [(2, "cycling-regular")]


def test_directions_unknown_provider_is_404() -> None:
    client = _client(FakeProvider())

    response = client.post(
        DIRECTIONS_URL,
        json={"waypoints": SF_BODY, "provider": "doesnotexist"},
    )

    assert response.status_code == 404
    assert response.json() == {
        "code": "ProviderNotFound",
        "message": "Provider 'doesnotexist' not found",
    }


def test_directions_invalid_profile_is_400_with_catalog() -> None:
    provider = FakeProvider()
    client = _client(provider)

    response = client.post(
        DIRECTIONS_URL,
        json={
            "waypoints": SF_BODY,
            "provider": "providerA",
            "profile": "not-a-real-profile",
        },
    )

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "InvalidProfile"
    assert data["availableProfiles"] == ["cycling-regular", "cycling-road", "walking"]
    assert provider.calls == []


def test_directions_backend_timeout_is_503_without_retry(monkeypatch) -> None:
    session = FakeSession(post_responses=[asyncio.TimeoutError()])
    monkeypatch.setattr(
        "routing.providers.openrouteservice.get_session",
        AsyncMock(return_value=session),
    )
    provider = OpenRouteServiceProvider(api_key="ors-key", timeout=0.5)
    client = _client(provider)

    response = client.post(
        DIRECTIONS_URL,
        json={"waypoints": SF_BODY, "provider": "openrouteservice"},
    )

    assert response.status_code == 503
    data = response.json()
    assert data["code"] == "ServiceUnavailable"
    assert data["provider"] == "openrouteservice"
    assert data["details"]["kind"] == "Timeout"
    assert len(session.requests) == 1


def test_directions_single_waypoint_fails_before_registry() -> None:
    provider = FakeProvider()
    registry = ProviderRegistry([provider])
    registry.select_provider = Mock(side_effect=AssertionError("registry reached"))
    client = TestClient(create_app(registry))

    response = client.post(DIRECTIONS_URL, json={"waypoints": SF_BODY[:1]})

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "InvalidRequest"
    assert data["errors"][0]["loc"] == ["body", "waypoints"]
    registry.select_provider.assert_not_called()
    assert provider.calls == []


@pytest.mark.parametrize(
    "waypoint",
    [
        {"latitude": 91.0, "longitude": 0.0},
        {"latitude": 0.0, "longitude": -180.5},
        {"latitude": "north", "longitude": 0.0},
    ],
)
def test_directions_out_of_range_coordinates_are_rejected(waypoint) -> None:
    client = _client(FakeProvider())

    response = client.post(
        DIRECTIONS_URL,
        json={"waypoints": [SF_BODY[0], waypoint]},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidRequest"


def test_directions_no_route_is_500_with_provider() -> None:
    provider = FakeProvider(error=NoRouteFoundError("no path", provider="providerA"))
    client = _client(provider)

    response = client.post(DIRECTIONS_URL, json={"waypoints": SF_BODY})

    assert response.status_code == 500
    assert response.json() == {
        "code": "Error",
        "message": "no path",
        "provider": "providerA",
        "kind": "NoRouteFound",
    }


def test_directions_rate_limit_is_500_with_kind() -> None:
    client = _client(FakeProvider(error=RateLimitError("slow down")))

    response = client.post(DIRECTIONS_URL, json={"waypoints": SF_BODY})

    assert response.status_code == 500
    assert response.json()["kind"] == "RateLimited"
    assert response.json()["provider"] == "providerA"


def test_directions_unexpected_error_names_provider() -> None:
    client = _client(FakeProvider(error=KeyError("routes")))

    response = client.post(DIRECTIONS_URL, json={"waypoints": SF_BODY})

    assert response.status_code == 500
    data = response.json()
    assert data["code"] == "Error"
    assert data["provider"] == "providerA"
    assert data["kind"] == "Unknown"


def test_directions_runtime_error_is_canonical_unknown() -> None:
    client = _client(FakeProvider(error=RuntimeError("boom")))

    response = client.post(DIRECTIONS_URL, json={"waypoints": SF_BODY})

    assert response.status_code == 500
    assert response.json() == {
        "code": "Error",
        "message": "boom",
        "provider": "providerA",
        "kind": "Unknown",
    }


def test_directions_empty_provider_name_is_not_found() -> None:
    client = _client(FakeProvider())

    response = client.post(
        DIRECTIONS_URL,
        json={"waypoints": SF_BODY, "provider": ""},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "ProviderNotFound"


def test_list_providers_reports_availability() -> None:
    client = _client(FakeProvider(), OtherFakeProvider(available=False))

    response = client.get("/api/routing/providers")

    assert response.status_code == 200
    data = response.json()
    assert data["defaultProvider"] == "providerA"
    by_name = {item["name"]: item for item in data["providers"]}
    assert by_name["providerA"]["available"] is True
    assert by_name["providerB"]["available"] is False
    assert by_name["providerA"]["displayName"] == "Provider A"
    assert by_name["providerA"]["defaultProfile"] == "cycling-regular"
    assert [p["id"] for p in by_name["providerA"]["profiles"]] == [
        "cycling-regular",
        "cycling-road",
        "walking",
    ]


def test_list_providers_waits_for_every_check() -> None:
    class SlowProvider(OtherFakeProvider):
        async def is_available(self) -> bool:
            await asyncio.sleep(0.05)
            return True

    client = _client(FakeProvider(available=False), SlowProvider())

    data = client.get("/api/routing/providers").json()

    assert {p["name"]: p["available"] for p in data["providers"]} == {
        "providerA": False,
        "providerB": True,
    }


def test_provider_profiles_sorted() -> None:
    client = _client(OpenRouteServiceProvider(api_key="ors-key"))

    response = client.get("/api/routing/providers/openrouteservice/profiles")

    assert response.status_code == 200
    data = response.json()
    assert data["provider"] == "openrouteservice"
    assert data["defaultProfile"] == "cycling-regular"
    assert [p["id"] for p in data["profiles"]] == [
        "cycling-electric",
        "cycling-mountain",
        "cycling-regular",
        "cycling-road",
        "foot-hiking",
        "foot-walking",
        "driving-car",
        "wheelchair",
    ]
    assert [p["category"] for p in data["profiles"]][-1] == "other"


def test_provider_profiles_unknown_provider() -> None:
    client = _client(FakeProvider())

    response = client.get("/api/routing/providers/nope/profiles")

    assert response.status_code == 404
    assert response.json()["code"] == "ProviderNotFound"
