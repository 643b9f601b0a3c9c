"""Cluster confidence and category classification."""

from collections.abc import Sequence

from event_detection.domain.clustering_constants import (
    EVENT_OPERATIONAL_WEIGHT,
    EVENT_POPULARITY_SATURATION,
    EVENT_POPULARITY_WEIGHT,
    EVENT_RATING_WEIGHT,
    HIGH_CONFIDENCE_MIN_RATIO,
    HIGH_CONFIDENCE_MIN_SCORE,
    MAX_RATING,
    MEDIUM_CONFIDENCE_MIN_RATIO,
    MEDIUM_CONFIDENCE_MIN_SCORE,
    OPERATIONAL_STATUS,
    SUB_TYPE_RULES,
)
from event_detection.domain.models import ConfidenceLevel, Event, EventSubType


class ConfidenceClassifier:
    """Score the quality of a cluster from its member venues.

    Per venue:
        rating/5 * 0.4 + min(user_rating_count/100, 1) * 0.3 + 0.3 if OPERATIONAL

    Tiers:
        high   - average > 0.7 and more than half the venues flagged high
        medium - average > 0.5 and more than 30% of the venues flagged high
        low    - otherwise
    """

    def event_score(self, event: Event) -> float:
        """Quality score of one venue in [0, 1]."""
        score = 0.0
        if event.rating:
            score += event.rating / MAX_RATING * EVENT_RATING_WEIGHT
        if event.user_rating_count:
            score += (
                min(event.user_rating_count / EVENT_POPULARITY_SATURATION, 1.0)
                * EVENT_POPULARITY_WEIGHT
            )
        if event.business_status == OPERATIONAL_STATUS:
            score += EVENT_OPERATIONAL_WEIGHT
        return score

    def classify(self, events: Sequence[Event]) -> ConfidenceLevel:
        """Confidence tier of a cluster. An empty cluster is low confidence."""
        if not events:
            return ConfidenceLevel.LOW

        avg_score = sum(self.event_score(event) for event in events) / len(events)
        high_count = sum(
            1 for event in events if event.confidence == ConfidenceLevel.HIGH
        )
        high_ratio = high_count / len(events)

        if (
            avg_score > HIGH_CONFIDENCE_MIN_SCORE
            and high_ratio > HIGH_CONFIDENCE_MIN_RATIO
        ):
            return ConfidenceLevel.HIGH
        if (
            avg_score > MEDIUM_CONFIDENCE_MIN_SCORE
            and high_ratio > MEDIUM_CONFIDENCE_MIN_RATIO
        ):
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    def categorize(self, events: Sequence[Event]) -> EventSubType:
        """Category label over the union of member venue types.

        Rules are evaluated in priority order (conference, sports,
        entertainment, education, cultural), falling back to business.
        """
        types = {venue_type for event in events for venue_type in event.types}
        for label, rule_types in SUB_TYPE_RULES:
            if types & rule_types:
                return EventSubType(label)
        return EventSubType.BUSINESS
