"""Correlation identifiers for detection runs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

from event_detection.config.logging_config import bind_context, unbind_context

CORRELATION_ID_KEY = "correlation_id"


@contextmanager
def correlation_scope(existing_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id to every log entry emitted inside the block.

    A fresh id is generated when the caller does not propagate one.
    """
    correlation_id = existing_id or uuid4().hex
    bind_context(**{CORRELATION_ID_KEY: correlation_id})
    try:
        yield correlation_id
    finally:
        unbind_context(CORRELATION_ID_KEY)


__all__ = ["CORRELATION_ID_KEY", "correlation_scope"]
