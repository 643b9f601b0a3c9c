"""Heuristic scoring of discovered venues.

Discovery tags each venue with an event score and an individual confidence
tier. The score is additive:
- +0.5 venue type is a typical event venue
- +0.3 venue name contains an event keyword
- +0.1 venue is OPERATIONAL
- +0.1 venue is rated 4.0 or more
- +0.1 venue was found by a targeted text search
"""

from event_detection.domain.clustering_constants import OPERATIONAL_STATUS
from event_detection.domain.models import ConfidenceLevel, Event, VenueAnalysis
from event_detection.domain.venue_constants import (
    EVENT_NAME_KEYWORDS,
    EVENT_VENUE_TYPES,
    TEXT_SEARCH_METHOD,
    VENUE_HIGH_CONFIDENCE_SCORE,
    VENUE_HIGHLY_RATED_MIN,
    VENUE_HIGHLY_RATED_SCORE,
    VENUE_KEYWORD_SCORE,
    VENUE_MEDIUM_CONFIDENCE_SCORE,
    VENUE_OPERATIONAL_SCORE,
    VENUE_TEXT_SEARCH_SCORE,
    VENUE_TYPE_SCORE,
)


def confidence_for_score(score: float) -> ConfidenceLevel:
    """Individual venue confidence for an event score."""
    if score >= VENUE_HIGH_CONFIDENCE_SCORE:
        return ConfidenceLevel.HIGH
    if score >= VENUE_MEDIUM_CONFIDENCE_SCORE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def analyze_venue(event: Event, search_method: str = "nearby_search") -> VenueAnalysis:
    """Score how likely a venue is to host a gathering.

    Args:
        event: Discovered venue
        search_method: How discovery found the venue ("nearby_search" or
            "text_search")

    Returns:
        Score capped at 1.0, confidence tier and the matched indicators

    Example:
        >>> venue = Event(id="v1", name="Moscone Center", types=["convention_center"])
        >>> analyze_venue(venue).indicators
        ['event_venue_type', 'event_keyword']
    """
    score = 0.0
    indicators: list[str] = []

    if any(venue_type in EVENT_VENUE_TYPES for venue_type in event.types):
        score += VENUE_TYPE_SCORE
        indicators.append("event_venue_type")

    name = event.name.lower()
    if any(keyword in name for keyword in EVENT_NAME_KEYWORDS):
        score += VENUE_KEYWORD_SCORE
        indicators.append("event_keyword")

    if event.business_status == OPERATIONAL_STATUS:
        score += VENUE_OPERATIONAL_SCORE
        indicators.append("operational")

    if event.rating is not None and event.rating >= VENUE_HIGHLY_RATED_MIN:
        score += VENUE_HIGHLY_RATED_SCORE
        indicators.append("highly_rated")

    if search_method == TEXT_SEARCH_METHOD:
        score += VENUE_TEXT_SEARCH_SCORE
        indicators.append("text_search_result")

    # Float noise on sums such as 0.5 + 0.1 + 0.1 must not cross a tier boundary
    score = min(round(score, 10), 1.0)

    return VenueAnalysis(
        event_score=score,
        confidence=confidence_for_score(score),
        indicators=indicators,
    )
