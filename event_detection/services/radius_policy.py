"""Radius selection for deciding which venues are part of the same gathering.

Radius = max base radius over the venue categories, scaled by a per-city
density factor, clamped to [500m, 5000m].
"""

import math
from collections.abc import Iterable, Mapping

from event_detection.config.logging_config import get_logger
from event_detection.domain.protocols import CacheProtocol
from event_detection.domain.radius_constants import (
    CATEGORY_RADIUS_METERS,
    CITY_RADIUS_ADJUSTMENTS,
    DEFAULT_RADIUS_KEY,
    MAX_RADIUS_METERS,
    MIN_RADIUS_METERS,
    RADIUS_CACHE_TTL_SECONDS_DEFAULT,
)

logger = get_logger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def radius_cache_key(categories: Iterable[str], city_name: str | None) -> str:
    """Cache key for a radius lookup (order-insensitive over categories)."""
    sorted_categories = ",".join(sorted(set(categories)))
    city_key = city_name.strip().lower() if city_name else ""
    return f"radius:{sorted_categories}:{city_key}"


class RadiusPolicy:
    """Select the clustering radius for a venue."""

    def __init__(
        self,
        category_radii: Mapping[str, int] | None = None,
        city_adjustments: Mapping[str, float] | None = None,
        cache: CacheProtocol | None = None,
        cache_ttl_seconds: int = RADIUS_CACHE_TTL_SECONDS_DEFAULT,
    ) -> None:
        """Initialize radius policy.

        Args:
            category_radii: Entries overriding or extending the default
                category table (meters)
            city_adjustments: Entries overriding or extending the default city
                multipliers (keys are matched case-insensitively)
            cache: Optional cache used to memoize lookups
            cache_ttl_seconds: Lifetime of memoized lookups
        """
        self.category_radii: dict[str, int] = {
            **CATEGORY_RADIUS_METERS,
            **(category_radii or {}),
        }
        self.city_adjustments: dict[str, float] = {
            **CITY_RADIUS_ADJUSTMENTS,
            **{
                city.strip().lower(): factor
                for city, factor in (city_adjustments or {}).items()
            },
        }
        self.cache = cache
        self.cache_ttl_ms = cache_ttl_seconds * 1000

    @property
    def default_radius(self) -> int:
        return self.category_radii[DEFAULT_RADIUS_KEY]

    def base_radius(self, categories: Iterable[str]) -> int:
        """Largest base radius among the categories.

        Unknown categories use the default radius. An empty category set
        contributes nothing and yields 0, which the clamp lifts to the minimum.
        """
        max_radius = 0
        for category in categories:
            max_radius = max(
                max_radius, self.category_radii.get(category, self.default_radius)
            )
        return max_radius

    def city_adjustment(self, city_name: str | None) -> float:
        """Density multiplier for a city, 1.0 when unknown."""
        if not city_name:
            return 1.0
        return self.city_adjustments.get(city_name.strip().lower(), 1.0)

    def select_radius(
        self, categories: Iterable[str], city_name: str | None = None
    ) -> int:
        """Radius in meters treated as "the same gathering" for a venue.

        Args:
            categories: Venue category tags
            city_name: City extracted from the venue vicinity, if any

        Returns:
            Radius in meters within [500, 5000]

        Example:
            >>> RadiusPolicy().select_radius(["convention_center"], "Las Vegas")
            3000
        """
        category_list = list(categories)

        cache_key: str | None = None
        if self.cache is not None:
            cache_key = radius_cache_key(category_list, city_name)
            cached = self.cache.get(cache_key)
            if cached is not None:
                return int(cached)

        radius = self.base_radius(category_list)
        if city_name:
            radius = _round_half_up(radius * self.city_adjustment(city_name))

        radius = min(max(radius, MIN_RADIUS_METERS), MAX_RADIUS_METERS)

        if self.cache is not None and cache_key is not None:
            self.cache.set(cache_key, radius, self.cache_ttl_ms)

        logger.debug(
            "radius_selected",
            categories=category_list,
            city=city_name,
            radius_m=radius,
        )
        return radius
