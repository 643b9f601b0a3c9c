"""Custom exception hierarchy for contact event detection.

Data-completeness problems (missing coordinates, unknown categories, missing
ratings) are handled with fallbacks and never raise. Exceptions are reserved
for operational safeguards and invalid configuration.
"""


class EventDetectionError(Exception):
    """Base exception for all application errors."""

    pass


class NonRetryableError(EventDetectionError):
    """Errors that should not be retried with the same input."""

    pass


class CandidateLimitExceededError(NonRetryableError):
    """Too many candidate events for one clustering run."""

    def __init__(self, event_count: int, limit: int) -> None:
        """Initialize with the offending count and the configured limit."""
        self.event_count = event_count
        self.limit = limit
        super().__init__(
            f"Candidate event count {event_count} exceeds the limit of {limit}"
        )
