"""Annotate candidate venues with their cluster and rank them."""

from collections.abc import Sequence

from event_detection.domain.clustering_constants import MAX_RATING
from event_detection.domain.models import (
    Cluster,
    ClusterMembership,
    Event,
    RankedEvent,
)
from event_detection.domain.venue_constants import (
    DEFAULT_MAX_RANKED_EVENTS,
    RANK_CONFIDENCE_BONUS,
    RANK_CONTACTS_WEIGHT,
    RANK_EVENT_SCORE_WEIGHT,
    RANK_RATING_WEIGHT,
)
from event_detection.services.venue_analysis import analyze_venue


def unique_events(events: Sequence[Event]) -> list[Event]:
    """Drop events whose id was already seen (first occurrence wins)."""
    seen: set[str] = set()
    unique: list[Event] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        unique.append(event)
    return unique


def annotate_events(
    events: Sequence[Event], clusters: Sequence[Cluster]
) -> dict[str, ClusterMembership]:
    """Cluster membership per event id, for events in a retained cluster."""
    memberships: dict[str, ClusterMembership] = {}
    for cluster in clusters:
        for member in cluster.events:
            memberships.setdefault(
                member.id,
                ClusterMembership(
                    cluster_id=cluster.id,
                    cluster_size=len(cluster.events),
                    cluster_confidence=cluster.confidence,
                    is_primary_event=cluster.primary_event.id == member.id,
                ),
            )
    known_ids = {event.id for event in events}
    return {
        event_id: membership
        for event_id, membership in memberships.items()
        if event_id in known_ids
    }


def rank_score(event: Event) -> float:
    """Multi-factor ranking score of a candidate venue.

    event_score * 0.4 + contacts * 0.3 + rating/5 * 0.2 + confidence bonus.
    Venues not yet scored by discovery are analyzed on the fly.
    """
    event_score = event.event_score
    confidence = event.confidence
    if event_score is None or confidence is None:
        analysis = analyze_venue(event)
        if event_score is None:
            event_score = analysis.event_score
        if confidence is None:
            confidence = analysis.confidence

    return (
        event_score * RANK_EVENT_SCORE_WEIGHT
        + len(event.contacts_nearby) * RANK_CONTACTS_WEIGHT
        + (event.rating or 0.0) / MAX_RATING * RANK_RATING_WEIGHT
        + RANK_CONFIDENCE_BONUS[confidence.value]
    )


def rank_events(
    events: Sequence[Event],
    clusters: Sequence[Cluster],
    limit: int = DEFAULT_MAX_RANKED_EVENTS,
) -> list[RankedEvent]:
    """Unique candidate venues, best first, with cluster membership attached.

    Args:
        events: Candidate venues
        clusters: Retained clusters of the same run
        limit: Maximum number of ranked venues returned

    Returns:
        Ranked venues; equal scores keep input order
    """
    candidates = unique_events(events)
    memberships = annotate_events(candidates, clusters)

    ranked = [
        RankedEvent(
            event=event,
            rank_score=rank_score(event),
            cluster_info=memberships.get(event.id),
        )
        for event in candidates
    ]
    ranked.sort(key=lambda item: item.rank_score, reverse=True)
    return ranked[:limit]
