"""Detect event clusters use case.

Groups contacts met around the same real-world gathering into suggested
event groups.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from time import perf_counter
from typing import Any

import pytz

from event_detection.adapters.memory_cache import InMemoryTTLCache
from event_detection.config.logging_config import get_logger
from event_detection.config.settings import Settings
from event_detection.domain.clustering_constants import MIN_CLUSTER_CONTACTS
from event_detection.domain.exceptions import CandidateLimitExceededError
from event_detection.domain.models import (
    Contact,
    Event,
    EventDetectionResult,
    ExistingGroup,
    GroupSuggestion,
)
from event_detection.domain.protocols import CacheProtocol, GroupRecord
from event_detection.observability.metrics import DETECTION_STAGE_DURATION_SECONDS
from event_detection.observability.tracing import correlation_scope
from event_detection.services.cluster_builder import ClusterBuilder
from event_detection.services.confidence import ConfidenceClassifier
from event_detection.services.event_ranking import rank_events, unique_events
from event_detection.services.radius_policy import RadiusPolicy
from event_detection.services.similarity import SimilarityScorer
from event_detection.services.suggestion_builder import SuggestionBuilder

logger = get_logger(__name__)

EventInput = Event | Mapping[str, Any]
ContactInput = Contact | Mapping[str, Any]
GroupInput = GroupRecord | Mapping[str, Any]


@contextmanager
def _stage(name: str) -> Iterator[None]:
    stage_start = perf_counter()
    try:
        yield
    finally:
        DETECTION_STAGE_DURATION_SECONDS.labels(stage=name).observe(
            perf_counter() - stage_start
        )


def _as_event(value: EventInput) -> Event:
    return value if isinstance(value, Event) else Event.model_validate(value)


def _as_contact(value: ContactInput) -> Contact:
    return value if isinstance(value, Contact) else Contact.model_validate(value)


def _as_group(value: GroupInput) -> GroupRecord:
    if isinstance(value, Mapping):
        return ExistingGroup.model_validate(value)
    return value


def resolve_contacts(
    events: Sequence[Event], contacts: Iterable[Contact]
) -> list[Event]:
    """Reconcile nearby contact references with the contact directory.

    Directory contacts without a location are unusable and their references
    are removed from every venue. Remaining references are replaced by the
    directory record with the same id; unknown ids are kept as given.
    """
    directory: dict[str, Contact] = {}
    unusable: set[str] = set()
    for contact in contacts:
        if contact.location is None:
            unusable.add(contact.id)
        else:
            directory.setdefault(contact.id, contact)

    if not directory and not unusable:
        return list(events)

    resolved: list[Event] = []
    for event in events:
        nearby = [
            directory.get(reference.id, reference)
            for reference in event.contacts_nearby
            if reference.id not in unusable
        ]
        resolved.append(event.model_copy(update={"contacts_nearby": nearby}))
    return resolved


def prepare_candidates(
    events: Sequence[Event], contacts: Iterable[Contact]
) -> list[Event]:
    """Unique, located venues with contact references resolved."""
    located = [event for event in unique_events(events) if event.location is not None]
    return resolve_contacts(located, contacts)


def build_services(
    settings: Settings, cache: CacheProtocol | None = None
) -> tuple[ClusterBuilder, SuggestionBuilder]:
    """Wire detection services from settings."""
    classifier = ConfidenceClassifier()
    radius_policy = RadiusPolicy(
        category_radii=settings.radius_category_overrides,
        city_adjustments=settings.radius_city_adjustments,
        cache=cache,
        cache_ttl_seconds=settings.radius_cache_ttl_seconds,
    )
    cluster_builder = ClusterBuilder(
        radius_policy=radius_policy,
        similarity_scorer=SimilarityScorer(settings.merge_similarity_threshold),
        confidence_classifier=classifier,
    )
    suggestion_builder = SuggestionBuilder(
        confidence_classifier=classifier,
        recent_contact_days=settings.recent_contact_days,
    )
    return cluster_builder, suggestion_builder


def run_event_detection(
    events: Sequence[EventInput],
    contacts: Iterable[ContactInput] = (),
    existing_groups: Iterable[GroupInput] = (),
    time_window_days: int | None = None,
    *,
    settings: Settings | None = None,
    cache: CacheProtocol | None = None,
    now: datetime | None = None,
    correlation_id: str | None = None,
) -> EventDetectionResult:
    """Cluster candidate venues and build event group suggestions.

    1. Drop venues without a location and repeated venue ids
    2. Resolve nearby contacts against the contact directory
    3. Greedily cluster venues by radius and similarity
    4. Build named, prioritized suggestions, skipping groups that exist
    5. Rank the candidate venues with their cluster membership

    Args:
        events: Candidate venues (models or camelCase mappings)
        contacts: Contact directory used to resolve nearby references
        existing_groups: Groups the user already has
        time_window_days: Cluster time range length (defaults to settings)
        settings: Detection settings (in-code defaults when omitted)
        cache: Cache for radius decisions (a private cache when omitted)
        now: Reference instant (defaults to the current UTC time)
        correlation_id: Correlation id to propagate into logs

    Returns:
        EventDetectionResult with suggestions, clusters and ranked venues

    Raises:
        CandidateLimitExceededError: More clusterable venues than allowed

    Example:
        >>> result = run_event_detection(events, contacts)
        >>> [suggestion.name for suggestion in result.suggestions]
        ['CES in Las Vegas']
    """
    with correlation_scope(correlation_id) as bound_correlation_id:
        run_start = perf_counter()
        settings = settings if settings is not None else Settings.defaults()
        detected_at = now or datetime.now(pytz.UTC)
        window_days = (
            time_window_days
            if time_window_days is not None
            else settings.time_window_days
        )
        result: EventDetectionResult | None = None
        try:
            with _stage("prepare"):
                received = [_as_event(event) for event in events]
                directory = [_as_contact(contact) for contact in contacts]
                groups = [_as_group(group) for group in existing_groups]
                candidates = prepare_candidates(received, directory)

            logger.info(
                "event_detection_started",
                correlation_id=bound_correlation_id,
                events_received=len(received),
                events_clusterable=len(candidates),
                contacts=len(directory),
                existing_groups=len(groups),
                time_window_days=window_days,
            )

            limit = settings.max_candidate_events
            if limit and len(candidates) > limit:
                logger.warning(
                    "candidate_limit_exceeded",
                    correlation_id=bound_correlation_id,
                    events_clusterable=len(candidates),
                    limit=limit,
                )
                raise CandidateLimitExceededError(len(candidates), limit)

            if not candidates:
                result = EventDetectionResult(events_received=len(received))
                return result

            cluster_builder, suggestion_builder = build_services(
                settings, cache if cache is not None else InMemoryTTLCache()
            )

            with _stage("cluster"):
                clusters = cluster_builder.build(
                    candidates, time_window_days=window_days, now=detected_at
                )

            with _stage("suggest"):
                suggestions = suggestion_builder.build(
                    clusters, groups, now=detected_at
                )

            with _stage("rank"):
                ranked = rank_events(
                    candidates, clusters, limit=settings.max_ranked_events
                )

            eligible = sum(
                1
                for cluster in clusters
                if len(cluster.contacts) >= MIN_CLUSTER_CONTACTS
            )
            result = EventDetectionResult(
                suggestions=suggestions,
                clusters=clusters,
                ranked_events=ranked,
                events_received=len(received),
                events_clusterable=len(candidates),
                clusters_retained=len(clusters),
                duplicates_skipped=eligible - len(suggestions),
            )
            return result
        finally:
            duration = perf_counter() - run_start
            DETECTION_STAGE_DURATION_SECONDS.labels(stage="event_detection").observe(
                duration
            )
            if result is not None:
                result.duration_seconds = duration
                logger.info(
                    "event_detection_finished",
                    correlation_id=bound_correlation_id,
                    suggestions=len(result.suggestions),
                    clusters_retained=result.clusters_retained,
                    duplicates_skipped=result.duplicates_skipped,
                    duration_seconds=round(duration, 4),
                )


def detect_event_clusters(
    events: Sequence[EventInput],
    contacts: Iterable[ContactInput] = (),
    existing_groups: Iterable[GroupInput] = (),
    time_window_days: int | None = None,
    *,
    settings: Settings | None = None,
    cache: CacheProtocol | None = None,
    now: datetime | None = None,
    correlation_id: str | None = None,
) -> list[GroupSuggestion]:
    """Event group suggestions, highest priority first.

    See run_event_detection for the arguments.
    """
    return run_event_detection(
        events,
        contacts,
        existing_groups,
        time_window_days,
        settings=settings,
        cache=cache,
        now=now,
        correlation_id=correlation_id,
    ).suggestions
