"""Pairwise venue similarity.

similarity = 0.4 * type overlap
           + 0.3 * name similarity (normalized Levenshtein)
           + 0.2 * rating proximity (both rated only)
           + 0.1 * business status agreement
"""

from rapidfuzz.distance import Levenshtein

from event_detection.domain.clustering_constants import (
    DEFAULT_MERGE_SIMILARITY,
    MAX_RATING,
    NAME_SIMILARITY_WEIGHT,
    RATING_SIMILARITY_WEIGHT,
    STATUS_SIMILARITY_WEIGHT,
    TYPE_SIMILARITY_WEIGHT,
)
from event_detection.domain.models import Event


def levenshtein_distance(str1: str, str2: str) -> int:
    """Edit distance with unit insert, delete and substitute costs.

    Example:
        >>> levenshtein_distance("kitten", "sitting")
        3
    """
    return int(Levenshtein.distance(str1, str2))


def name_similarity(name1: str, name2: str) -> float:
    """Normalized name similarity: 1 - distance / longer length.

    Two empty names are identical (1.0). Comparison is case-sensitive.

    Example:
        >>> name_similarity("Moscone Center", "Moscone Center")
        1.0
    """
    longest = max(len(name1), len(name2))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(name1, name2)) / longest


def type_similarity(types1: list[str], types2: list[str]) -> float:
    """Shared categories over the larger category set.

    Returns 0.0 when neither venue has categories.
    """
    set1, set2 = set(types1), set(types2)
    largest = max(len(set1), len(set2))
    if largest == 0:
        return 0.0
    return len(set1 & set2) / largest


def rating_similarity(rating1: float | None, rating2: float | None) -> float | None:
    """Rating proximity, or None when either venue is unrated (missing or 0)."""
    if not rating1 or not rating2:
        return None
    return 1 - abs(rating1 - rating2) / MAX_RATING


class SimilarityScorer:
    """Weighted similarity between two candidate venues."""

    def __init__(self, merge_threshold: float = DEFAULT_MERGE_SIMILARITY) -> None:
        """Initialize scorer.

        Args:
            merge_threshold: Minimum similarity (inclusive) for merging
        """
        if not 0.0 <= merge_threshold <= 1.0:
            raise ValueError(
                f"merge_threshold must be within [0, 1], got {merge_threshold}"
            )
        self.merge_threshold = merge_threshold

    def similarity(self, event1: Event, event2: Event) -> float:
        """Similarity in [0, 1] between two venues.

        Missing ratings contribute nothing. Business status counts as agreeing
        when both are equal, including both absent.
        """
        score = type_similarity(event1.types, event2.types) * TYPE_SIMILARITY_WEIGHT
        score += name_similarity(event1.name, event2.name) * NAME_SIMILARITY_WEIGHT

        rating_score = rating_similarity(event1.rating, event2.rating)
        if rating_score is not None:
            score += rating_score * RATING_SIMILARITY_WEIGHT

        if event1.business_status == event2.business_status:
            score += STATUS_SIMILARITY_WEIGHT

        # Weighted float sums drift by an ulp; keep thresholds exact
        return min(1.0, max(0.0, round(score, 12)))

    def is_similar(self, event1: Event, event2: Event) -> bool:
        """True when the venues are similar enough to merge."""
        return self.similarity(event1, event2) >= self.merge_threshold
