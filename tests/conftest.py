"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import pytz

from event_detection.adapters.memory_cache import InMemoryTTLCache
from event_detection.config.settings import Settings
from event_detection.domain.models import (
    Cluster,
    ConfidenceLevel,
    Contact,
    Event,
    GeoPoint,
    TimeRange,
)

FIXED_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=pytz.UTC)

LVCC_LAT = 36.1311
LVCC_LNG = -115.1517
LVCC_VICINITY = "3150 Paradise Rd, Las Vegas, NV 89109"

METERS_PER_DEGREE_LAT = 111_194.93
"""Meters per degree of latitude on the 6,371 km sphere."""


def north_of(lat: float, meters: float) -> float:
    """Latitude ``meters`` north of ``lat`` along a meridian."""
    return lat + meters / METERS_PER_DEGREE_LAT


def make_contact(
    contact_id: str,
    lat: float | None = LVCC_LAT,
    lng: float | None = LVCC_LNG,
    **kwargs: Any,
) -> Contact:
    """Helper to create a contact met around the convention center."""
    location = None if lat is None or lng is None else {"lat": lat, "lng": lng}
    defaults: dict[str, Any] = {
        "id": contact_id,
        "name": f"Contact {contact_id}",
        "location": location,
        "created_at": FIXED_NOW - timedelta(days=30),
    }
    defaults.update(kwargs)
    return Contact(**defaults)


def make_event(
    event_id: str = "venue_1",
    lat: float = LVCC_LAT,
    lng: float = LVCC_LNG,
    name: str = "Las Vegas Convention Center",
    types: list[str] | None = None,
    contacts: list[Contact] | None = None,
    vicinity: str | None = LVCC_VICINITY,
    **kwargs: Any,
) -> Event:
    """Helper to create a candidate venue."""
    defaults: dict[str, Any] = {
        "id": event_id,
        "name": name,
        "location": GeoPoint(lat=lat, lng=lng),
        "types": ["convention_center"] if types is None else types,
        "vicinity": vicinity,
        "contacts_nearby": contacts or [],
    }
    defaults.update(kwargs)
    return Event(**defaults)


def make_cluster(
    events: list[Event],
    contacts: list[Contact],
    confidence: ConfidenceLevel = ConfidenceLevel.LOW,
    cluster_id: str = "cluster_1",
    radius: int = 3000,
) -> Cluster:
    """Helper to create a cluster without running the builder."""
    primary = events[0]
    assert primary.location is not None
    return Cluster(
        id=cluster_id,
        primary_event=primary,
        events=events,
        contacts=contacts,
        center_point=primary.location,
        radius=radius,
        confidence=confidence,
        time_range=TimeRange(start=FIXED_NOW, end=FIXED_NOW + timedelta(days=7)),
    )


def fixed_cluster_ids() -> Any:
    """Deterministic cluster id factory: cluster_1, cluster_2, ..."""
    counter = {"value": 0}

    def _factory(now: datetime) -> str:
        counter["value"] += 1
        return f"cluster_{counter['value']}"

    return _factory


@pytest.fixture
def fixed_now() -> datetime:
    """Reference instant for detection runs."""
    return FIXED_NOW


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with built-in defaults only (empty config directory)."""
    return Settings(config_dir=tmp_path)


@pytest.fixture
def cache() -> InMemoryTTLCache:
    """Fresh in-memory TTL cache."""
    return InMemoryTTLCache()


@pytest.fixture
def lvcc_contacts() -> list[Contact]:
    """Five contacts met at the Las Vegas Convention Center."""
    return [make_contact(f"c{index}") for index in range(1, 6)]
