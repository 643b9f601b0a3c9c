"""Naming and prioritization rules for group suggestions.

The naming rules are heuristics over venue names. They are kept as explicit
ordered tables so that adding a venue is a data change, not a code change.
"""

from typing import Final

GROUP_TYPE_EVENT: Final[str] = "event"
"""Group type of every suggestion produced by the engine."""

KNOWN_VENUE_EVENTS: Final[tuple[tuple[str, str], ...]] = (
    ("las vegas convention center", "CES"),
    ("mandalay bay", "NAB Show / Other Tech Events"),
    ("moscone center", "Various Tech Conferences"),
    ("jacob javits center", "New York Conferences"),
    ("orange county convention center", "Orlando Events"),
)
"""Ordered (venue name substring, event label) pairs, evaluated top to bottom.

Matched case-insensitively against the primary venue name. The city extracted
from the vicinity is appended as `` in {city}`` when available.

Example:
    - "Las Vegas Convention Center", vicinity "..., Las Vegas, NV" -> "CES in Las Vegas"
    - "Moscone Center West" without vicinity -> "Various Tech Conferences"
"""

CONVENTION_KEYWORDS: Final[tuple[str, ...]] = (
    "convention",
    "conference",
    "expo",
    "summit",
    "congress",
)
"""Venue names containing one of these are already event names and used verbatim."""

TIMEFRAME_FORMAT: Final[str] = "{month} {day}, {year}"
"""Display format of the suggestion timeframe, e.g. ``Oct 18, 2026``."""

# Priority formula
PRIORITY_PER_CONTACT: Final[int] = 10
"""Priority points per contact in the cluster."""

MAX_CONTACT_PRIORITY: Final[int] = 50
"""Cap on contact-count priority (reached at 5 contacts)."""

CONFIDENCE_PRIORITY_BONUS: Final[dict[str, int]] = {
    "high": 30,
    "medium": 15,
    "low": 0,
}
"""Priority bonus per cluster confidence tier."""

HIGHLY_RATED_THRESHOLD: Final[float] = 4.0
"""Venues rated strictly above this add HIGHLY_RATED_BONUS."""

HIGHLY_RATED_BONUS: Final[int] = 10
"""Priority bonus per highly rated member venue."""

POPULAR_VENUE_THRESHOLD: Final[int] = 100
"""Venues with strictly more user ratings than this add POPULAR_VENUE_BONUS."""

POPULAR_VENUE_BONUS: Final[int] = 5
"""Priority bonus per popular member venue."""

DEFAULT_RECENT_CONTACT_DAYS: Final[int] = 3
"""Contacts submitted or created within this many days count as recent."""

RECENT_CONTACT_BONUS: Final[int] = 5
"""Priority bonus per recent contact.

Business rule: suggestions about people met in the last few days are the most
actionable, so each fresh contact pushes the group up.
"""
