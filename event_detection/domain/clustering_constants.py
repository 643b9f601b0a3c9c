"""Business rules and constants for venue clustering and confidence.

All similarity weights, merge thresholds and confidence cut-offs are
centralized here so the clusterer, the classifier and the configuration layer
agree on them.
"""

from typing import Final

# Similarity weights (sum to 1.0)
TYPE_SIMILARITY_WEIGHT: Final[float] = 0.4
"""Weight of category overlap between two venues."""

NAME_SIMILARITY_WEIGHT: Final[float] = 0.3
"""Weight of normalized Levenshtein similarity between venue names."""

RATING_SIMILARITY_WEIGHT: Final[float] = 0.2
"""Weight of rating proximity. Only applied when both venues are rated."""

STATUS_SIMILARITY_WEIGHT: Final[float] = 0.1
"""Weight of business status agreement (both absent counts as agreement)."""

MAX_RATING: Final[float] = 5.0
"""Upper bound of the venue rating scale."""

DEFAULT_MERGE_SIMILARITY: Final[float] = 0.6
"""Minimum similarity for merging a venue into a cluster.

Business rule: both conditions are required, neither is sufficient alone:
    - distance from the seed venue <= cluster radius
    - similarity(seed, candidate) >= 0.6

Example:
    - Two "Moscone Center" halls 300m apart, same types -> similarity 1.0 -> merge
    - A hotel next to a convention center, no shared types -> similarity ~0.3 -> no merge
"""

MIN_CLUSTER_CONTACTS: Final[int] = 2
"""Minimum distinct contacts for a cluster to be kept (unless confidence is high).

Business rule: a single contact near a venue is not a group. A cluster with one
contact survives only when the venue evidence alone is strong (high confidence).
"""

DEFAULT_TIME_WINDOW_DAYS: Final[int] = 7
"""Length of a cluster's time range, starting at cluster creation."""

DEFAULT_MAX_CANDIDATE_EVENTS: Final[int] = 0
"""Caller-imposed limit on clusterable events per run (O(n^2) comparisons).

0 disables the limit, so detection accepts any input size by default. Callers
that need a bound set max_candidate_events; beyond it the run is refused.
"""

# Per-event quality score
EVENT_RATING_WEIGHT: Final[float] = 0.4
"""Weight of rating/5 in the per-event quality score."""

EVENT_POPULARITY_WEIGHT: Final[float] = 0.3
"""Weight of min(user_rating_count / 100, 1) in the per-event quality score."""

EVENT_POPULARITY_SATURATION: Final[int] = 100
"""Number of user ratings at which the popularity signal saturates."""

EVENT_OPERATIONAL_WEIGHT: Final[float] = 0.3
"""Bonus when the venue is OPERATIONAL."""

OPERATIONAL_STATUS: Final[str] = "OPERATIONAL"
"""Business status value of an open venue."""

# Confidence tiers
HIGH_CONFIDENCE_MIN_SCORE: Final[float] = 0.7
"""Average quality must exceed this for a high-confidence cluster."""

HIGH_CONFIDENCE_MIN_RATIO: Final[float] = 0.5
"""Share of individually high venues must exceed this for a high-confidence cluster."""

MEDIUM_CONFIDENCE_MIN_SCORE: Final[float] = 0.5
"""Average quality must exceed this for a medium-confidence cluster."""

MEDIUM_CONFIDENCE_MIN_RATIO: Final[float] = 0.3
"""Share of individually high venues must exceed this for a medium-confidence cluster."""

# Category labels, evaluated top to bottom; first match wins
SUB_TYPE_RULES: Final[tuple[tuple[str, frozenset[str]], ...]] = (
    ("conference", frozenset({"convention_center", "expo_center"})),
    ("sports", frozenset({"stadium", "arena"})),
    ("entertainment", frozenset({"concert_hall", "performing_arts_theater"})),
    ("education", frozenset({"university", "school"})),
    ("cultural", frozenset({"museum", "art_gallery"})),
)
"""Ordered (label, venue types) pairs. Clusters matching none are ``business``."""
