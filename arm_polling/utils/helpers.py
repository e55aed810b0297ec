"""Shared helper functions used by the pipeline, poller and clients.

References:
    RFC 9110 Section 10.2.3 (Retry-After: delta-seconds or HTTP-date)
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING

from arm_polling.core.constants import (
    HEADER_RETRY_AFTER,
    REQUEST_ID_HEADERS,
    RETRY_AFTER_MS_HEADERS,
)
from arm_polling.core.exceptions import OperationCancelledError

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


def parse_retry_after(response: httpx.Response | None, *, now: datetime | None = None) -> float:
    """Return the delay in seconds requested by *response*, or ``0.0``.

    The millisecond headers (``retry-after-ms``, ``x-ms-retry-after-ms``)
    take precedence over ``Retry-After``.  ``Retry-After`` may hold
    either delta-seconds or an HTTP-date; dates in the past yield ``0.0``.
    Unparseable values are ignored.

    Args:
        response: The response to inspect (``None`` yields ``0.0``).
        now: Reference time for HTTP-date values (defaults to current UTC).
    """
    if response is None:
        return 0.0

    for header in RETRY_AFTER_MS_HEADERS:
        raw = response.headers.get(header, "")
        if raw:
            try:
                return max(float(raw) / 1000.0, 0.0)
            except ValueError:
                logger.debug("Ignoring unparseable %s header: %r", header, raw)

    raw = response.headers.get(HEADER_RETRY_AFTER, "").strip()
    if not raw:
        return 0.0

    try:
        return max(float(int(raw)), 0.0)
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable Retry-After header: %r", raw)
        return 0.0

    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    reference = now or datetime.now(UTC)
    return max((when - reference).total_seconds(), 0.0)


def delay(seconds: float, cancel: threading.Event | None = None) -> None:
    """Block for *seconds*, aborting early if *cancel* is set.

    Raises:
        OperationCancelledError: If *cancel* fires before the delay elapses
            (or is already set).
    """
    event = cancel if cancel is not None else threading.Event()
    if event.wait(seconds):
        msg = f"polling cancelled during a {seconds:.1f}s delay"
        raise OperationCancelledError(msg)


def request_id(response: httpx.Response | None) -> str:
    """Return the service request identifier carried by *response*, or ``""``."""
    if response is None:
        return ""
    for header in REQUEST_ID_HEADERS:
        value = response.headers.get(header, "")
        if value:
            return value
    return ""


def request_of(response: httpx.Response) -> httpx.Request | None:
    """Return the request that produced *response*, or ``None`` if unset."""
    try:
        return response.request
    except RuntimeError:
        return None
