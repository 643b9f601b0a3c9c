"""Protocol definitions for dependency inversion.

The engine never reaches for ambient state: caches and caller-supplied group
records are described here and injected.
"""

from collections.abc import Sequence
from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Key/value cache with per-entry time-to-live.

    Used only to avoid recomputation. A cache miss, an expired entry or no
    cache at all must never change detection output.
    """

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        ...

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        """Store a value for ``ttl_ms`` milliseconds."""
        ...


class GroupRecord(Protocol):
    """Any group the user already has (suggested or hand-made).

    Only the group type and its member contact ids matter for de-duplication.
    """

    type: str
    contact_ids: Sequence[str]
