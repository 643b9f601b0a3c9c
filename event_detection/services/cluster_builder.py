"""Greedy proximity clustering of candidate venues.

Algorithm (single pass, input order):
1. Each unused venue seeds a new cluster; its radius is fixed from its
   categories and city.
2. Every remaining unused venue within the radius of the seed venue and with
   similarity(seed, venue) >= threshold joins the cluster. The centroid is
   recomputed after each merge. Earlier members are never re-validated.
3. Contacts are de-duplicated by id (first occurrence wins), confidence is
   classified from the final members.
4. The cluster is kept if it has >= 2 contacts or high confidence. Venues of a
   discarded cluster stay used.

This is a greedy approximation, not an optimal clustering, and it costs
O(n^2) venue comparisons. Callers may bound n with max_candidate_events.
"""

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from uuid import uuid4

import pytz

from event_detection.config.logging_config import get_logger
from event_detection.domain.clustering_constants import (
    DEFAULT_TIME_WINDOW_DAYS,
    MIN_CLUSTER_CONTACTS,
)
from event_detection.domain.models import (
    Cluster,
    ConfidenceLevel,
    Contact,
    Event,
    GeoPoint,
    TimeRange,
)
from event_detection.observability.metrics import EVENT_CLUSTERS_TOTAL
from event_detection.services.confidence import ConfidenceClassifier
from event_detection.services.geo import (
    city_from_vicinity,
    cluster_center,
    distance_between,
)
from event_detection.services.radius_policy import RadiusPolicy
from event_detection.services.similarity import SimilarityScorer

logger = get_logger(__name__)

ClusterIdFactory = Callable[[datetime], str]


def generate_cluster_id(now: datetime) -> str:
    """Cluster identifier: creation time in milliseconds plus a random suffix."""
    return f"cluster_{int(now.timestamp() * 1000)}_{uuid4().hex[:9]}"


def dedupe_contacts(contacts: Sequence[Contact]) -> list[Contact]:
    """Remove contacts with an already seen id, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Contact] = []
    for contact in contacts:
        if contact.id in seen:
            continue
        seen.add(contact.id)
        unique.append(contact)
    return unique


def should_retain_cluster(cluster: Cluster) -> bool:
    """Keep clusters with enough contacts, or backed by strong venue evidence."""
    return (
        len(cluster.contacts) >= MIN_CLUSTER_CONTACTS
        or cluster.confidence == ConfidenceLevel.HIGH
    )


class ClusterBuilder:
    """Group candidate venues that represent the same real-world gathering."""

    def __init__(
        self,
        radius_policy: RadiusPolicy | None = None,
        similarity_scorer: SimilarityScorer | None = None,
        confidence_classifier: ConfidenceClassifier | None = None,
        id_factory: ClusterIdFactory = generate_cluster_id,
    ) -> None:
        self.radius_policy = radius_policy or RadiusPolicy()
        self.similarity_scorer = similarity_scorer or SimilarityScorer()
        self.confidence_classifier = confidence_classifier or ConfidenceClassifier()
        self.id_factory = id_factory

    def build(
        self,
        events: Sequence[Event],
        time_window_days: int = DEFAULT_TIME_WINDOW_DAYS,
        now: datetime | None = None,
    ) -> list[Cluster]:
        """Cluster venues and return the retained clusters in seed order.

        Args:
            events: Candidate venues with their nearby contacts. Venues without
                a location are ignored.
            time_window_days: Length of each cluster's time range
            now: Cluster creation instant (defaults to the current UTC time)

        Returns:
            Retained clusters, ordered by when their seed venue was encountered
        """
        created_at = now or datetime.now(pytz.UTC)
        located = [event for event in events if event.location is not None]

        used: set[str] = set()
        clusters: list[Cluster] = []

        for seed in located:
            seed_location = seed.location
            if seed.id in used or seed_location is None:
                continue
            used.add(seed.id)

            cluster = self._grow_cluster(
                seed, seed_location, located, used, time_window_days, created_at
            )

            if should_retain_cluster(cluster):
                clusters.append(cluster)
                EVENT_CLUSTERS_TOTAL.labels(outcome="retained").inc()
                logger.debug(
                    "cluster_formed",
                    cluster_id=cluster.id,
                    primary_event=seed.name,
                    events=len(cluster.events),
                    contacts=len(cluster.contacts),
                    radius_m=cluster.radius,
                    confidence=cluster.confidence.value,
                )
            else:
                EVENT_CLUSTERS_TOTAL.labels(outcome="discarded").inc()
                logger.debug(
                    "cluster_discarded",
                    primary_event=seed.name,
                    events=len(cluster.events),
                    contacts=len(cluster.contacts),
                    confidence=cluster.confidence.value,
                )

        return clusters

    def _grow_cluster(
        self,
        seed: Event,
        seed_location: GeoPoint,
        candidates: Sequence[Event],
        used: set[str],
        time_window_days: int,
        created_at: datetime,
    ) -> Cluster:
        radius = self.radius_policy.select_radius(
            seed.types, city_from_vicinity(seed.vicinity)
        )

        members: list[Event] = [seed]
        contacts: list[Contact] = list(seed.contacts_nearby)
        center: GeoPoint = seed_location

        for other in candidates:
            if other.id in used or other.location is None:
                continue

            # Distance is always measured from the seed, not the moving centroid
            distance = distance_between(seed_location, other.location)
            if distance > radius:
                continue
            if not self.similarity_scorer.is_similar(seed, other):
                continue

            members.append(other)
            contacts.extend(other.contacts_nearby)
            used.add(other.id)
            center = cluster_center(members)

        return Cluster(
            id=self.id_factory(created_at),
            primary_event=seed,
            events=members,
            contacts=dedupe_contacts(contacts),
            center_point=center,
            radius=radius,
            confidence=self.confidence_classifier.classify(members),
            time_range=TimeRange(
                start=created_at,
                end=created_at + timedelta(days=time_window_days),
            ),
        )
