"""Domain models for contact event detection.

All models use Pydantic v2 for validation and serialization. Upstream
collaborators speak camelCase JSON (``userRatingCount``, ``contactsNearby``),
so every model accepts both the camelCase alias and the snake_case field name.
"""

from datetime import datetime
from enum import Enum
from typing import Any

import pytz
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from event_detection.domain.suggestion_constants import GROUP_TYPE_EVENT


class CamelModel(BaseModel):
    """Base model accepting camelCase aliases and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConfidenceLevel(str, Enum):
    """Coarse quality tier of a venue or a cluster."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EventSubType(str, Enum):
    """Category label of a suggested event group."""

    CONFERENCE = "conference"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    EDUCATION = "education"
    CULTURAL = "cultural"
    BUSINESS = "business"


def _complete_location_or_none(value: Any) -> Any:
    """Map a location mapping lacking a latitude or longitude to None."""
    if isinstance(value, dict):
        lat = value.get("lat", value.get("latitude"))
        lng = value.get("lng", value.get("longitude"))
        if lat is None or lng is None:
            return None
    return value


def _ensure_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=pytz.UTC)
    return value


class GeoPoint(BaseModel):
    """WGS84 coordinates in degrees."""

    lat: float = Field(
        ...,
        ge=-90.0,
        le=90.0,
        validation_alias=AliasChoices("lat", "latitude"),
        description="Latitude in degrees",
    )
    lng: float = Field(
        ...,
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("lng", "longitude"),
        description="Longitude in degrees",
    )


class Contact(CamelModel):
    """A person record encountered near a venue.

    Only ``id`` is required. Extra fields (name, company, email, ...) are kept
    untouched so suggestions can hand the full record back to the caller.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    id: str = Field(..., min_length=1, description="Contact identifier")
    name: str | None = Field(default=None, description="Display name")
    location: GeoPoint | None = Field(
        default=None, description="Where the contact was met"
    )
    submitted_at: datetime | None = Field(
        default=None, description="When the contact was submitted"
    )
    created_at: datetime | None = Field(
        default=None, description="When the contact record was created"
    )

    @field_validator("location", mode="before")
    @classmethod
    def _normalize_location(cls, value: Any) -> Any:
        return _complete_location_or_none(value)

    @field_validator("submitted_at", "created_at")
    @classmethod
    def _normalize_timestamps(cls, value: datetime | None) -> datetime | None:
        return _ensure_utc(value)

    @property
    def recency_timestamp(self) -> datetime | None:
        """Timestamp used for recency weighting (submitted, else created)."""
        return self.submitted_at or self.created_at


class Event(CamelModel):
    """A discovered real-world venue that may host a gathering."""

    id: str = Field(..., min_length=1, description="Venue identifier")
    name: str = Field(default="", description="Venue display name")
    location: GeoPoint | None = Field(
        default=None, description="Venue coordinates (None when incomplete)"
    )
    types: list[str] = Field(default_factory=list, description="Category tags")
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    user_rating_count: int | None = Field(default=None, ge=0)
    business_status: str | None = Field(default=None)
    vicinity: str | None = Field(default=None, description="Free-text address")
    contacts_nearby: list[Contact] = Field(default_factory=list)
    confidence: ConfidenceLevel | None = Field(
        default=None,
        description="Per-venue confidence flag set upstream by discovery",
    )
    event_score: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Venue analysis score"
    )

    @field_validator("location", mode="before")
    @classmethod
    def _normalize_location(cls, value: Any) -> Any:
        return _complete_location_or_none(value)


class TimeRange(CamelModel):
    """Time window a cluster is considered active."""

    start: datetime
    end: datetime


class Cluster(CamelModel):
    """Working aggregate of venues judged to be one gathering."""

    id: str
    primary_event: Event
    events: list[Event]
    contacts: list[Contact] = Field(default_factory=list)
    center_point: GeoPoint
    radius: int = Field(..., ge=0, description="Merge radius in meters")
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    time_range: TimeRange

    @property
    def contact_ids(self) -> list[str]:
        return [contact.id for contact in self.contacts]


class EventData(CamelModel):
    """Venue details attached to a suggestion."""

    primary_venue: str
    location: GeoPoint
    venues: list[str]
    estimated_attendees: int = Field(..., ge=0)
    radius: int
    types: list[str]


class GroupSuggestion(CamelModel):
    """Ranked, named group proposed to the end user."""

    id: str
    type: str = GROUP_TYPE_EVENT
    sub_type: EventSubType
    name: str
    description: str
    contact_ids: list[str]
    contacts: list[Contact]
    confidence: ConfidenceLevel
    reason: str
    event_data: EventData
    auto_generated: bool = True
    priority: int


class ExistingGroup(CamelModel):
    """Minimal view of a group the user already has."""

    id: str | None = None
    type: str
    contact_ids: list[str] = Field(default_factory=list)


class VenueAnalysis(CamelModel):
    """Heuristic assessment of a discovered venue."""

    event_score: float = Field(..., ge=0.0, le=1.0)
    confidence: ConfidenceLevel
    indicators: list[str] = Field(default_factory=list)


class ClusterMembership(CamelModel):
    """Where a candidate event ended up after clustering."""

    cluster_id: str
    cluster_size: int = Field(..., ge=1)
    cluster_confidence: ConfidenceLevel
    is_primary_event: bool


class RankedEvent(CamelModel):
    """Candidate event with its ranking score and cluster membership."""

    event: Event
    rank_score: float
    cluster_info: ClusterMembership | None = None


class EventDetectionResult(CamelModel):
    """Outcome of one detection run."""

    suggestions: list[GroupSuggestion] = Field(default_factory=list)
    clusters: list[Cluster] = Field(default_factory=list)
    ranked_events: list[RankedEvent] = Field(default_factory=list)
    events_received: int = Field(default=0, ge=0)
    events_clusterable: int = Field(default=0, ge=0)
    clusters_retained: int = Field(default=0, ge=0)
    duplicates_skipped: int = Field(default=0, ge=0)
    duration_seconds: float = Field(default=0.0, ge=0.0)
