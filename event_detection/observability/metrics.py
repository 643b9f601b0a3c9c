"""Prometheus metrics for event detection runs.

Collectors are module-level and registered once per process in the default
registry. They only count; no detection logic depends on them.
"""

from typing import Final

from prometheus_client import Counter, Histogram

DETECTION_STAGE_DURATION_SECONDS: Final[Histogram] = Histogram(
    "event_detection_stage_duration_seconds",
    "Duration of event detection stages in seconds",
    labelnames=("stage",),
)

EVENT_CLUSTERS_TOTAL: Final[Counter] = Counter(
    "event_clusters_total",
    "Clusters built, by retention outcome",
    labelnames=("outcome",),
)

EVENT_SUGGESTIONS_TOTAL: Final[Counter] = Counter(
    "event_suggestions_total",
    "Group suggestions considered, by outcome",
    labelnames=("outcome",),
)

__all__ = [
    "DETECTION_STAGE_DURATION_SECONDS",
    "EVENT_CLUSTERS_TOTAL",
    "EVENT_SUGGESTIONS_TOTAL",
]
