"""Tests for radius selection."""

from typing import Any

import pytest

from event_detection.adapters.memory_cache import InMemoryTTLCache
from event_detection.domain.radius_constants import (
    CATEGORY_RADIUS_METERS,
    CITY_RADIUS_ADJUSTMENTS,
    MAX_RADIUS_METERS,
    MIN_RADIUS_METERS,
)
from event_detection.services.radius_policy import RadiusPolicy, radius_cache_key


@pytest.mark.parametrize(
    ("categories", "city", "expected"),
    [
        (["convention_center"], None, 2000),
        (["convention_center"], "Las Vegas", 3000),
        (["convention_center"], "New York", 1400),
        (["convention_center"], "LAS VEGAS", 3000),
        (["convention_center"], "Springfield", 2000),
        (["museum", "art_gallery"], None, 600),
        (["lodging", "convention_center"], None, 2000),
        (["night_club"], None, 1000),
        (["university"], "Las Vegas", 4500),
    ],
)
def test_select_radius(categories: list[str], city: str | None, expected: int) -> None:
    """Test radius from category table and city factor."""
    assert RadiusPolicy().select_radius(categories, city) == expected


def test_small_radius_is_clamped_to_minimum() -> None:
    """Test art galleries are lifted to the 500m floor."""
    policy = RadiusPolicy()

    assert policy.select_radius(["art_gallery"]) == MIN_RADIUS_METERS
    assert policy.select_radius(["art_gallery"], "New York") == MIN_RADIUS_METERS


def test_no_categories_yields_minimum_radius() -> None:
    """Test empty category set."""
    policy = RadiusPolicy()

    assert policy.base_radius([]) == 0
    assert policy.select_radius([], "Las Vegas") == MIN_RADIUS_METERS


def test_large_radius_is_clamped_to_maximum() -> None:
    """Test sprawling venue types in sprawling cities stop at 5km."""
    policy = RadiusPolicy(category_radii={"festival_grounds": 4000})

    assert policy.select_radius(["festival_grounds"], "Las Vegas") == MAX_RADIUS_METERS


def test_city_factor_rounds_half_up() -> None:
    """Test 1003m * 1.5 = 1504.5m rounds to 1505m."""
    policy = RadiusPolicy(category_radii={"custom": 1003})

    assert policy.select_radius(["custom"], "Las Vegas") == 1505


def test_overrides_extend_default_tables() -> None:
    """Test configured overrides win over built-in values."""
    policy = RadiusPolicy(
        category_radii={"convention_center": 2500},
        city_adjustments={"Reno": 1.2},
    )

    assert policy.select_radius(["convention_center"]) == 2500
    assert policy.select_radius(["convention_center"], "reno") == 3000
    assert policy.select_radius(["stadium"]) == 1500


@pytest.mark.parametrize("category", sorted(CATEGORY_RADIUS_METERS))
@pytest.mark.parametrize("city", [None, *sorted(CITY_RADIUS_ADJUSTMENTS)])
def test_radius_always_within_bounds(category: str, city: str | None) -> None:
    """Test every category and city combination stays in [500, 5000]."""
    radius = RadiusPolicy().select_radius([category], city)

    assert MIN_RADIUS_METERS <= radius <= MAX_RADIUS_METERS


def test_cache_key_is_order_insensitive() -> None:
    """Test category order does not change the cache key."""
    assert radius_cache_key(["b", "a", "a"], "Las Vegas") == radius_cache_key(
        ["a", "b"], " las vegas "
    )
    assert radius_cache_key([], None) == "radius::"


def test_cached_radius_is_returned(mocker: Any) -> None:
    """Test cache hit short-circuits the computation."""
    cache = mocker.Mock()
    cache.get.return_value = 1234
    policy = RadiusPolicy(cache=cache)

    assert policy.select_radius(["convention_center"], "Las Vegas") == 1234
    cache.set.assert_not_called()


def test_cache_miss_stores_radius_with_ttl(mocker: Any) -> None:
    """Test computed radius is memoized in milliseconds TTL."""
    cache = mocker.Mock()
    cache.get.return_value = None
    policy = RadiusPolicy(cache=cache, cache_ttl_seconds=60)

    radius = policy.select_radius(["convention_center"], "Las Vegas")

    assert radius == 3000
    cache.set.assert_called_once_with(
        "radius:convention_center:las vegas", 3000, 60_000
    )


def test_cache_does_not_change_results() -> None:
    """Test the same inputs give the same radius with and without a cache."""
    cached_policy = RadiusPolicy(cache=InMemoryTTLCache())
    plain_policy = RadiusPolicy()

    for _ in range(2):
        assert cached_policy.select_radius(
            ["stadium"], "Orlando"
        ) == plain_policy.select_radius(["stadium"], "Orlando")
