"""Heuristics for scoring discovered venues and ranking candidate events."""

from typing import Final

EVENT_VENUE_TYPES: Final[frozenset[str]] = frozenset(
    {"convention_center", "event_venue", "concert_hall", "university", "stadium"}
)
"""Venue types that strongly indicate an event location."""

EVENT_NAME_KEYWORDS: Final[tuple[str, ...]] = (
    "convention",
    "conference",
    "center",
    "hall",
    "arena",
    "theater",
)
"""Lowercase name fragments that indicate an event location."""

VENUE_TYPE_SCORE: Final[float] = 0.5
VENUE_KEYWORD_SCORE: Final[float] = 0.3
VENUE_OPERATIONAL_SCORE: Final[float] = 0.1
VENUE_HIGHLY_RATED_SCORE: Final[float] = 0.1
VENUE_TEXT_SEARCH_SCORE: Final[float] = 0.1

VENUE_HIGHLY_RATED_MIN: Final[float] = 4.0
"""Minimum rating (inclusive) for the highly rated indicator."""

TEXT_SEARCH_METHOD: Final[str] = "text_search"
"""Discovery method name of targeted text searches, which earn a bonus."""

VENUE_HIGH_CONFIDENCE_SCORE: Final[float] = 0.7
"""Venue score at or above which a venue is individually high confidence."""

VENUE_MEDIUM_CONFIDENCE_SCORE: Final[float] = 0.4
"""Venue score at or above which a venue is individually medium confidence."""

# Candidate event ranking
RANK_EVENT_SCORE_WEIGHT: Final[float] = 0.4
RANK_CONTACTS_WEIGHT: Final[float] = 0.3
RANK_RATING_WEIGHT: Final[float] = 0.2
RANK_CONFIDENCE_BONUS: Final[dict[str, float]] = {
    "high": 0.1,
    "medium": 0.05,
    "low": 0.0,
}

DEFAULT_MAX_RANKED_EVENTS: Final[int] = 20
"""Number of ranked candidate events returned alongside suggestions."""
