"""Spatial radius rules for deciding which venues belong to the same gathering.

Different venue categories imply different physical footprints. A convention
spreads over several blocks, an art gallery does not. City density further
scales the footprint: events on the Las Vegas strip sprawl, Manhattan venues are
packed together.
"""

from typing import Final

EARTH_RADIUS_METERS: Final[float] = 6_371_000.0
"""Mean Earth radius used by the haversine formula (no ellipsoidal correction)."""

DEFAULT_RADIUS_KEY: Final[str] = "default"
"""Key of the fallback entry in CATEGORY_RADIUS_METERS."""

CATEGORY_RADIUS_METERS: Final[dict[str, int]] = {
    # Conferences and conventions
    "convention_center": 2000,
    "expo_center": 2000,
    "conference_center": 2000,
    # Entertainment
    "stadium": 1500,
    "arena": 1500,
    "concert_hall": 800,
    "opera_house": 800,
    "performing_arts_theater": 500,
    # Education and corporate
    "university": 3000,
    "business_center": 1000,
    "corporate_campus": 2000,
    # Cultural
    "museum": 600,
    "art_gallery": 400,
    "cultural_center": 1000,
    # Hospitality
    "lodging": 500,
    "resort": 2000,
    DEFAULT_RADIUS_KEY: 1000,
}
"""Base radius in meters per venue category.

Business rule: a gathering is sized by its largest-footprint venue type, so the
maximum over an event's categories is used. Unknown categories use ``default``.

Example:
    - ["museum", "art_gallery"] -> 600m
    - ["lodging", "convention_center"] -> 2000m
    - ["night_club"] -> 1000m (default)
"""

CITY_RADIUS_ADJUSTMENTS: Final[dict[str, float]] = {
    "las vegas": 1.5,
    "orlando": 1.3,
    "austin": 1.2,
    "san francisco": 0.8,
    "new york": 0.7,
    "paris": 0.8,
    "barcelona": 0.8,
    "singapore": 0.9,
}
"""Multiplier applied to the base radius for known event destinations.

Matched case-insensitively against the city extracted from the venue vicinity.
Unknown cities use 1.0.

Example:
    - convention_center in Las Vegas: 2000 * 1.5 = 3000m
    - convention_center in New York: 2000 * 0.7 = 1400m
"""

MIN_RADIUS_METERS: Final[int] = 500
"""Lower clamp for any selected radius."""

MAX_RADIUS_METERS: Final[int] = 5000
"""Upper clamp for any selected radius.

Business rule: nothing further than 5km apart is treated as one gathering, no
matter how sprawling the venue type or the city.
"""

RADIUS_CACHE_TTL_SECONDS_DEFAULT: Final[int] = 30 * 60
"""Default lifetime of memoized radius lookups when a cache is injected."""
