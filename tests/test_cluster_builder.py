"""Tests for greedy venue clustering."""

from datetime import datetime, timedelta

import pytest
from prometheus_client import REGISTRY
from structlog.testing import capture_logs

from event_detection.domain.models import ConfidenceLevel, Event
from event_detection.services.cluster_builder import (
    ClusterBuilder,
    dedupe_contacts,
    generate_cluster_id,
    should_retain_cluster,
)
from tests.conftest import (
    FIXED_NOW,
    LVCC_LAT,
    LVCC_LNG,
    fixed_cluster_ids,
    make_cluster,
    make_contact,
    make_event,
    north_of,
)


def _builder() -> ClusterBuilder:
    return ClusterBuilder(id_factory=fixed_cluster_ids())


def _cluster_count(outcome: str) -> float:
    value = REGISTRY.get_sample_value("event_clusters_total", {"outcome": outcome})
    return value or 0.0


def _strong(event_id: str, **kwargs: object) -> Event:
    return make_event(
        event_id,
        rating=4.8,
        user_rating_count=900,
        business_status="OPERATIONAL",
        confidence=ConfidenceLevel.HIGH,
        **kwargs,  # type: ignore[arg-type]
    )


def test_generate_cluster_id_format() -> None:
    """Test id embeds creation time in milliseconds."""
    now = datetime(2026, 3, 10, 12, 0)
    cluster_id = generate_cluster_id(now)

    prefix, millis, suffix = cluster_id.split("_")
    assert prefix == "cluster"
    assert millis == str(int(now.timestamp() * 1000))
    assert len(suffix) == 9


def test_nearby_twin_venues_merge() -> None:
    """Test two identical convention venues 50m apart form one cluster."""
    first = make_event("a", contacts=[make_contact("c1")])
    second = make_event(
        "b", lat=north_of(LVCC_LAT, 50), contacts=[make_contact("c2")]
    )

    clusters = _builder().build([first, second], now=FIXED_NOW)

    assert len(clusters) == 1
    cluster = clusters[0]
    assert [event.id for event in cluster.events] == ["a", "b"]
    assert cluster.contact_ids == ["c1", "c2"]
    assert cluster.primary_event.id == "a"
    assert cluster.radius == 3000


def test_unlocated_venues_neither_seed_nor_join() -> None:
    """Test venues without a location are skipped as seeds and as members."""
    unlocated = make_event(
        "x", location=None, contacts=[make_contact("c0"), make_contact("c9")]
    )
    first = make_event("a", contacts=[make_contact("c1")])
    second = make_event(
        "b", lat=north_of(LVCC_LAT, 50), contacts=[make_contact("c2")]
    )

    clusters = _builder().build([unlocated, first, second], now=FIXED_NOW)

    assert [[event.id for event in cluster.events] for cluster in clusters] == [
        ["a", "b"]
    ]
    assert clusters[0].center_point.lat == pytest.approx(
        (LVCC_LAT + north_of(LVCC_LAT, 50)) / 2
    )


def test_distant_twin_venues_stay_separate() -> None:
    """Test identical venues 10km apart exceed even the Las Vegas radius."""
    first = make_event("a", contacts=[make_contact("c1"), make_contact("c2")])
    second = make_event(
        "b",
        lat=north_of(LVCC_LAT, 10_000),
        contacts=[make_contact("c3"), make_contact("c4")],
    )

    clusters = _builder().build([first, second], now=FIXED_NOW)

    assert [[event.id for event in cluster.events] for cluster in clusters] == [
        ["a"],
        ["b"],
    ]


def test_single_contact_low_confidence_cluster_is_dropped() -> None:
    """Test a lone contact at an unremarkable venue yields nothing."""
    venue = make_event("a", contacts=[make_contact("c1")])

    assert _builder().build([venue], now=FIXED_NOW) == []


def test_high_confidence_cluster_is_kept_without_contacts() -> None:
    """Test strong venue evidence retains a cluster with no contacts."""
    clusters = _builder().build([_strong("a")], now=FIXED_NOW)

    assert len(clusters) == 1
    assert clusters[0].confidence == ConfidenceLevel.HIGH
    assert clusters[0].contacts == []


def test_dissimilar_venues_at_same_spot_do_not_merge() -> None:
    """Test proximity alone is not enough to merge."""
    hall = make_event("a", contacts=[make_contact("c1"), make_contact("c2")])
    diner = make_event(
        "b",
        name="Joe's Diner",
        types=["restaurant"],
        business_status="OPERATIONAL",
        contacts=[make_contact("c3"), make_contact("c4")],
    )

    clusters = _builder().build([hall, diner], now=FIXED_NOW)

    assert [cluster.primary_event.id for cluster in clusters] == ["a", "b"]


def test_distance_is_measured_from_seed_not_centroid() -> None:
    """Test a venue beyond the seed radius is excluded after the centroid moves.

    Radius is 2000m (no city). B at 1800m merges and moves the centroid to
    900m; C at 2500m would be within 2000m of the centroid but not of the seed.
    """
    contacts = [make_contact("c1"), make_contact("c2")]
    seed = make_event("a", vicinity=None, contacts=contacts)
    near = make_event("b", lat=north_of(LVCC_LAT, 1800), vicinity=None)
    far = make_event(
        "c",
        lat=north_of(LVCC_LAT, 2500),
        vicinity=None,
        contacts=[make_contact("c3"), make_contact("c4")],
    )

    clusters = _builder().build([seed, near, far], now=FIXED_NOW)

    assert [[event.id for event in cluster.events] for cluster in clusters] == [
        ["a", "b"],
        ["c"],
    ]
    assert clusters[0].radius == 2000
    assert clusters[0].center_point.lat == pytest.approx(north_of(LVCC_LAT, 900))
    assert clusters[0].center_point.lng == pytest.approx(LVCC_LNG)


def test_contacts_are_deduplicated_across_venues() -> None:
    """Test the same contact near two merged venues counts once."""
    first = make_event("a", contacts=[make_contact("c1"), make_contact("c2")])
    second = make_event(
        "b",
        lat=north_of(LVCC_LAT, 100),
        contacts=[make_contact("c2", name="Later copy"), make_contact("c3")],
    )

    clusters = _builder().build([first, second], now=FIXED_NOW)

    assert clusters[0].contact_ids == ["c1", "c2", "c3"]
    assert clusters[0].contacts[1].name == "Contact c2"


def test_venues_without_location_are_ignored() -> None:
    """Test incomplete venues never seed or join clusters."""
    lost = Event(id="lost", name="Las Vegas Convention Center")
    venue = make_event("a", contacts=[make_contact("c1"), make_contact("c2")])

    clusters = _builder().build([lost, venue], now=FIXED_NOW)

    assert [event.id for event in clusters[0].events] == ["a"]


def test_members_of_discarded_cluster_are_not_reseeded() -> None:
    """Test venues absorbed by a discarded cluster stay used."""
    discarded_before = _cluster_count("discarded")
    first = make_event("a")
    second = make_event("b", lat=north_of(LVCC_LAT, 40), contacts=[make_contact("c1")])

    assert _builder().build([first, second], now=FIXED_NOW) == []
    assert _cluster_count("discarded") - discarded_before == 1


def test_time_range_spans_window(fixed_now: datetime) -> None:
    """Test cluster time range starts now and lasts the window."""
    venue = make_event("a", contacts=[make_contact("c1"), make_contact("c2")])

    cluster = _builder().build([venue], time_window_days=3, now=fixed_now)[0]

    assert cluster.time_range.start == fixed_now
    assert cluster.time_range.end == fixed_now + timedelta(days=3)


def test_retained_clusters_satisfy_retention_rule() -> None:
    """Test every retained cluster has two contacts or high confidence."""
    venues = [
        make_event("a", contacts=[make_contact("c1")]),
        make_event("b", lat=north_of(LVCC_LAT, 8000), contacts=[make_contact("c2")]),
        _strong("c", lat=north_of(LVCC_LAT, 16_000)),
        make_event(
            "d",
            lat=north_of(LVCC_LAT, 24_000),
            contacts=[make_contact("c3"), make_contact("c4")],
        ),
    ]

    clusters = _builder().build(venues, now=FIXED_NOW)

    assert [cluster.primary_event.id for cluster in clusters] == ["c", "d"]
    assert all(should_retain_cluster(cluster) for cluster in clusters)


def test_should_retain_cluster() -> None:
    """Test retention rule on hand-built clusters."""
    venue = make_event("a")
    one = [make_contact("c1")]
    two = [make_contact("c1"), make_contact("c2")]

    assert not should_retain_cluster(make_cluster([venue], one))
    assert should_retain_cluster(make_cluster([venue], two))
    assert should_retain_cluster(
        make_cluster([venue], [], confidence=ConfidenceLevel.HIGH)
    )
    assert not should_retain_cluster(
        make_cluster([venue], one, confidence=ConfidenceLevel.MEDIUM)
    )


def test_dedupe_contacts_keeps_first() -> None:
    """Test first occurrence of a contact id wins."""
    contacts = [make_contact("c1"), make_contact("c1", name="dup"), make_contact("c2")]

    assert [contact.name for contact in dedupe_contacts(contacts)] == [
        "Contact c1",
        "Contact c2",
    ]


def test_cluster_formed_is_logged() -> None:
    """Test retained and discarded clusters are logged."""
    venues = [
        make_event("a", contacts=[make_contact("c1"), make_contact("c2")]),
        make_event("b", lat=north_of(LVCC_LAT, 9000)),
    ]

    with capture_logs() as logs:
        _builder().build(venues, now=FIXED_NOW)

    events = [entry["event"] for entry in logs]
    assert "cluster_formed" in events
    assert "cluster_discarded" in events
    formed = next(entry for entry in logs if entry["event"] == "cluster_formed")
    assert formed["cluster_id"] == "cluster_1"
    assert formed["contacts"] == 2
