"""
Profile catalog helpers.

Each provider adapter owns a fixed list of ProfileMetadata. These helpers
check the catalog invariants at construction time and give the catalog its
presentation order: cycling, walking, driving, other, each group sorted by
title.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from core.exceptions import ProviderConfigurationError
from routing.schemas import ProfileCategory, ProfileMetadata

CATEGORY_ORDER: tuple[ProfileCategory, ...] = (
    ProfileCategory.CYCLING,
    ProfileCategory.WALKING,
    ProfileCategory.DRIVING,
    ProfileCategory.OTHER,
)

_CATEGORY_RANK = {category: rank for rank, category in enumerate(CATEGORY_ORDER)}


def profile_sort_key(profile: ProfileMetadata) -> tuple[int, str, str]:
    # id breaks ties so equal titles still sort deterministically
    return (_CATEGORY_RANK[profile.category], profile.title.casefold(), profile.id)


def sort_profiles(profiles: Iterable[ProfileMetadata]) -> list[ProfileMetadata]:
    """Return profiles in display order."""
    return sorted(profiles, key=profile_sort_key)


def group_profiles_by_category(
    profiles: Iterable[ProfileMetadata],
) -> dict[ProfileCategory, list[ProfileMetadata]]:
    """Group profiles by category, keeping only non-empty groups, in display order."""
    grouped: dict[ProfileCategory, list[ProfileMetadata]] = {
        category: [] for category in CATEGORY_ORDER
    }
    for profile in sort_profiles(profiles):
        grouped[profile.category].append(profile)
    return {category: items for category, items in grouped.items() if items}


def profile_ids(profiles: Iterable[ProfileMetadata]) -> list[str]:
    return [profile.id for profile in profiles]


def validate_catalog(
    provider_name: str,
    profiles: Iterable[ProfileMetadata],
    default_profile: str,
    backend_mapping: Mapping[str, object],
) -> None:
    """Raise ProviderConfigurationError when a catalog breaks its invariants.

    A valid catalog is non-empty, has unique ids, contains its default
    profile, and maps every advertised id to a backend-native profile.
    """
    ids = profile_ids(profiles)
    if not ids:
        msg = f"Provider '{provider_name}' declares no profiles"
        raise ProviderConfigurationError(msg, {"provider": provider_name})

    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        msg = f"Provider '{provider_name}' declares duplicate profiles: {', '.join(duplicates)}"
        raise ProviderConfigurationError(msg, {"provider": provider_name})

    if default_profile not in ids:
        msg = (
            f"Provider '{provider_name}' default profile '{default_profile}' "
            "is not in its catalog"
        )
        raise ProviderConfigurationError(msg, {"provider": provider_name})

    unmapped = [pid for pid in ids if pid not in backend_mapping]
    if unmapped:
        msg = (
            f"Provider '{provider_name}' has no backend mapping for profiles: "
            f"{', '.join(unmapped)}"
        )
        raise ProviderConfigurationError(msg, {"provider": provider_name})
