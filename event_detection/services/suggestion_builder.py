"""Turn venue clusters into named, prioritized group suggestions."""

from collections.abc import Iterable, Sequence
from datetime import datetime

import pytz

from event_detection.config.logging_config import get_logger
from event_detection.domain.clustering_constants import MIN_CLUSTER_CONTACTS
from event_detection.domain.models import (
    Cluster,
    Contact,
    EventData,
    GroupSuggestion,
)
from event_detection.domain.protocols import GroupRecord
from event_detection.domain.suggestion_constants import (
    CONFIDENCE_PRIORITY_BONUS,
    CONVENTION_KEYWORDS,
    DEFAULT_RECENT_CONTACT_DAYS,
    GROUP_TYPE_EVENT,
    HIGHLY_RATED_BONUS,
    HIGHLY_RATED_THRESHOLD,
    KNOWN_VENUE_EVENTS,
    MAX_CONTACT_PRIORITY,
    POPULAR_VENUE_BONUS,
    POPULAR_VENUE_THRESHOLD,
    PRIORITY_PER_CONTACT,
    RECENT_CONTACT_BONUS,
    TIMEFRAME_FORMAT,
)
from event_detection.observability.metrics import EVENT_SUGGESTIONS_TOTAL
from event_detection.services.confidence import ConfidenceClassifier
from event_detection.services.geo import city_from_vicinity

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def contact_set_key(contact_ids: Iterable[str]) -> tuple[str, ...]:
    """Order-insensitive identity of a group's membership."""
    return tuple(sorted(contact_ids))


def union_types(cluster: Cluster) -> list[str]:
    """All member venue categories, in first-seen order."""
    seen: dict[str, None] = {}
    for event in cluster.events:
        for venue_type in event.types:
            seen.setdefault(venue_type, None)
    return list(seen)


class SuggestionBuilder:
    """Name, prioritize and de-duplicate event group suggestions."""

    def __init__(
        self,
        confidence_classifier: ConfidenceClassifier | None = None,
        recent_contact_days: int = DEFAULT_RECENT_CONTACT_DAYS,
    ) -> None:
        """Initialize suggestion builder.

        Args:
            confidence_classifier: Classifier used for the category label
            recent_contact_days: Contacts newer than this many days boost priority
        """
        self.confidence_classifier = confidence_classifier or ConfidenceClassifier()
        self.recent_contact_days = recent_contact_days

    def infer_event_name(self, cluster: Cluster) -> str:
        """Best-effort human name for the gathering behind a cluster.

        Order:
        1. Known venue table (substring match) plus `` in {city}``
        2. Primary venue name verbatim when it already names an event
           (convention, conference, expo, summit, congress)
        3. ``{city} Event``
        4. ``{venue name} Event``
        """
        primary = cluster.primary_event
        city = city_from_vicinity(primary.vicinity)
        venue_name = primary.name.lower()

        for venue_fragment, event_label in KNOWN_VENUE_EVENTS:
            if venue_fragment in venue_name:
                return f"{event_label} in {city}" if city else event_label

        if any(keyword in venue_name for keyword in CONVENTION_KEYWORDS):
            return primary.name

        if city:
            return f"{city} Event"

        return f"{primary.name} Event"

    def infer_timeframe(self, now: datetime) -> str:
        """Display date of the gathering.

        Real event dates are not inferred (no calendar integration); the
        detection date is used instead.
        """
        return TIMEFRAME_FORMAT.format(
            month=now.strftime("%b"), day=now.day, year=now.year
        )

    def is_recent_contact(self, contact: Contact, now: datetime) -> bool:
        timestamp = contact.recency_timestamp
        if timestamp is None:
            return False
        age_days = (now - timestamp).total_seconds() / SECONDS_PER_DAY
        return age_days <= self.recent_contact_days

    def calculate_priority(self, cluster: Cluster, now: datetime) -> int:
        """Integer priority, higher is more important.

        Components:
        - 10 per contact, capped at 50
        - confidence bonus (high 30, medium 15)
        - 10 per venue rated above 4.0
        - 5 per venue with more than 100 ratings
        - 5 per contact submitted or created within the recency window
        """
        priority = min(
            len(cluster.contacts) * PRIORITY_PER_CONTACT, MAX_CONTACT_PRIORITY
        )
        priority += CONFIDENCE_PRIORITY_BONUS[cluster.confidence.value]

        for event in cluster.events:
            if event.rating is not None and event.rating > HIGHLY_RATED_THRESHOLD:
                priority += HIGHLY_RATED_BONUS
            if (
                event.user_rating_count is not None
                and event.user_rating_count > POPULAR_VENUE_THRESHOLD
            ):
                priority += POPULAR_VENUE_BONUS

        recent = sum(
            1 for contact in cluster.contacts if self.is_recent_contact(contact, now)
        )
        priority += recent * RECENT_CONTACT_BONUS

        return priority

    def build_suggestion(self, cluster: Cluster, now: datetime) -> GroupSuggestion:
        """Group suggestion record for one cluster."""
        primary = cluster.primary_event
        event_name = self.infer_event_name(cluster)
        timeframe = self.infer_timeframe(now)
        contact_count = len(cluster.contacts)

        return GroupSuggestion(
            id=cluster.id,
            type=GROUP_TYPE_EVENT,
            sub_type=self.confidence_classifier.categorize(cluster.events),
            name=event_name,
            description=f"{contact_count} contacts from {event_name} ({timeframe})",
            contact_ids=cluster.contact_ids,
            contacts=list(cluster.contacts),
            confidence=cluster.confidence,
            reason=f"Contacts found near {primary.name}",
            event_data=EventData(
                primary_venue=primary.name,
                location=cluster.center_point,
                venues=[event.name for event in cluster.events],
                estimated_attendees=contact_count,
                radius=cluster.radius,
                types=union_types(cluster),
            ),
            auto_generated=True,
            priority=self.calculate_priority(cluster, now),
        )

    def build(
        self,
        clusters: Sequence[Cluster],
        existing_groups: Iterable[GroupRecord] = (),
        now: datetime | None = None,
    ) -> list[GroupSuggestion]:
        """Suggestions for clusters with at least two contacts, by priority.

        A cluster is skipped when an existing event group, or a suggestion
        already built in this call, has exactly the same contact ids. Ties in
        priority keep cluster order.
        """
        built_at = now or datetime.now(pytz.UTC)
        taken: set[tuple[str, ...]] = {
            contact_set_key(group.contact_ids)
            for group in existing_groups
            if group.type == GROUP_TYPE_EVENT
        }

        suggestions: list[GroupSuggestion] = []
        for cluster in clusters:
            if len(cluster.contacts) < MIN_CLUSTER_CONTACTS:
                continue

            key = contact_set_key(cluster.contact_ids)
            if key in taken:
                EVENT_SUGGESTIONS_TOTAL.labels(outcome="duplicate").inc()
                logger.debug(
                    "suggestion_skipped_duplicate",
                    cluster_id=cluster.id,
                    contacts=len(key),
                )
                continue

            taken.add(key)
            suggestions.append(self.build_suggestion(cluster, built_at))
            EVENT_SUGGESTIONS_TOTAL.labels(outcome="emitted").inc()

        return sorted(
            suggestions, key=lambda suggestion: suggestion.priority, reverse=True
        )
