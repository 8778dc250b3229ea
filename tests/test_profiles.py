import random

import pytest

from core.exceptions import ProviderConfigurationError
from routing.profiles import (
    CATEGORY_ORDER,
    group_profiles_by_category,
    sort_profiles,
    validate_catalog,
)
from routing.providers import (
    MapboxProvider,
    OpenRouteServiceProvider,
    ValhallaProvider,
)
from routing.schemas import ProfileCategory, ProfileMetadata

ALL_CATALOGS = [
    MapboxProvider.profiles,
    OpenRouteServiceProvider.profiles,
    ValhallaProvider.profiles,
]


def _profile(pid: str, title: str, category: ProfileCategory) -> ProfileMetadata:
    return ProfileMetadata(id=pid, title=title, icon="icon", category=category)


def test_sort_profiles_orders_by_category_then_title() -> None:
    profiles = [
        _profile("wheelchair", "Wheelchair", ProfileCategory.OTHER),
        _profile("car", "Car", ProfileCategory.DRIVING),
        _profile("walk", "Walking", ProfileCategory.WALKING),
        _profile("road", "Road Bike", ProfileCategory.CYCLING),
        _profile("ebike", "E-Bike", ProfileCategory.CYCLING),
        _profile("hike", "Hiking", ProfileCategory.WALKING),
    ]

    ordered = [profile.id for profile in sort_profiles(profiles)]

    assert ordered == ["ebike", "road", "hike", "walk", "car", "wheelchair"]


@pytest.mark.parametrize("catalog", ALL_CATALOGS)
def test_sorting_is_idempotent_and_order_independent(catalog) -> None:
    rng = random.Random(42)
    expected = sort_profiles(catalog)

    assert sort_profiles(expected) == expected
    for _ in range(50):
        shuffled = list(catalog)
        rng.shuffle(shuffled)
        assert sort_profiles(shuffled) == expected


def test_group_profiles_by_category_skips_empty_groups() -> None:
    grouped = group_profiles_by_category(MapboxProvider.profiles)

    assert list(grouped) == [
        ProfileCategory.CYCLING,
        ProfileCategory.WALKING,
        ProfileCategory.DRIVING,
    ]
    assert [p.id for p in grouped[ProfileCategory.DRIVING]] == [
        "driving",
        "driving-traffic",
    ]


def test_group_profiles_follows_category_order() -> None:
    grouped = group_profiles_by_category(OpenRouteServiceProvider.profiles)

    assert list(grouped) == list(CATEGORY_ORDER)


@pytest.mark.parametrize(
    "provider_cls",
    [MapboxProvider, OpenRouteServiceProvider, ValhallaProvider],
)
def test_shipped_catalogs_are_valid(provider_cls) -> None:
    validate_catalog(
        provider_cls.name,
        provider_cls.profiles,
        provider_cls.default_profile,
        provider_cls.profile_mapping,
    )
    assert provider_cls.default_profile in [p.id for p in provider_cls.profiles]


def test_validate_catalog_rejects_missing_default() -> None:
    profiles = [_profile("a", "A", ProfileCategory.CYCLING)]

    with pytest.raises(ProviderConfigurationError, match="default profile"):
        validate_catalog("x", profiles, "b", {"a": "a"})


def test_validate_catalog_rejects_duplicates() -> None:
    profiles = [
        _profile("a", "A", ProfileCategory.CYCLING),
        _profile("a", "A again", ProfileCategory.WALKING),
    ]

    with pytest.raises(ProviderConfigurationError, match="duplicate"):
        validate_catalog("x", profiles, "a", {"a": "a"})


def test_validate_catalog_rejects_unmapped_profile() -> None:
    profiles = [
        _profile("a", "A", ProfileCategory.CYCLING),
        _profile("b", "B", ProfileCategory.CYCLING),
    ]

    with pytest.raises(ProviderConfigurationError, match="no backend mapping"):
        validate_catalog("x", profiles, "a", {"a": "a"})


def test_validate_catalog_rejects_empty_catalog() -> None:
    with pytest.raises(ProviderConfigurationError):
        validate_catalog("x", [], "a", {})


def test_adapter_with_broken_catalog_fails_at_construction() -> None:
    class BrokenMapbox(MapboxProvider):
        default_profile = "teleport"

    with pytest.raises(ProviderConfigurationError):
        BrokenMapbox(access_token="pk.test")
