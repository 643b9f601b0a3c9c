"""Tests for heuristic venue scoring."""

import pytest

from event_detection.domain.models import ConfidenceLevel
from event_detection.services.venue_analysis import analyze_venue, confidence_for_score
from tests.conftest import make_event


def test_convention_center_scores_high() -> None:
    """Test a rated, open convention center."""
    venue = make_event(rating=4.6, business_status="OPERATIONAL")

    analysis = analyze_venue(venue)

    assert analysis.event_score == pytest.approx(1.0)
    assert analysis.confidence == ConfidenceLevel.HIGH
    assert analysis.indicators == [
        "event_venue_type",
        "event_keyword",
        "operational",
        "highly_rated",
    ]


def test_score_is_capped_at_one() -> None:
    """Test text search bonus cannot push the score past 1.0."""
    venue = make_event(rating=4.6, business_status="OPERATIONAL")

    analysis = analyze_venue(venue, search_method="text_search")

    assert analysis.event_score == 1.0
    assert analysis.indicators[-1] == "text_search_result"


def test_keyword_and_status_is_medium() -> None:
    """Test 0.3 keyword + 0.1 operational lands exactly on the medium tier."""
    venue = make_event(
        name="Union Hall", types=["bar"], business_status="OPERATIONAL"
    )

    analysis = analyze_venue(venue)

    assert analysis.event_score == pytest.approx(0.4)
    assert analysis.confidence == ConfidenceLevel.MEDIUM


def test_plain_restaurant_is_low() -> None:
    """Test a venue with no event signals."""
    venue = make_event(name="Joe's Diner", types=["restaurant"], rating=3.9)

    analysis = analyze_venue(venue)

    assert analysis.event_score == 0.0
    assert analysis.confidence == ConfidenceLevel.LOW
    assert analysis.indicators == []


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (0.7, ConfidenceLevel.HIGH),
        (0.69, ConfidenceLevel.MEDIUM),
        (0.4, ConfidenceLevel.MEDIUM),
        (0.39, ConfidenceLevel.LOW),
    ],
)
def test_confidence_for_score(score: float, expected: ConfidenceLevel) -> None:
    """Test tier boundaries are inclusive."""
    assert confidence_for_score(score) == expected
