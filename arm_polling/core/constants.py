"""Shared constants for the long-running-operation protocol.

References:
    Azure REST API guidelines — long-running operations
    RFC 9110 Section 10.2.3 (Retry-After)
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------

HEADER_OPERATION_LOCATION: str = "Operation-Location"
HEADER_LOCATION: str = "Location"
HEADER_RETRY_AFTER: str = "Retry-After"

RETRY_AFTER_MS_HEADERS: tuple[str, ...] = ("retry-after-ms", "x-ms-retry-after-ms")
"""Millisecond variants emitted by ARM services, preferred over ``Retry-After``."""

REQUEST_ID_HEADERS: tuple[str, ...] = ("x-ms-request-id", "x-ms-correlation-request-id")

# ---------------------------------------------------------------------------
# Status codes and operation statuses
# ---------------------------------------------------------------------------

LRO_VALID_STATUS_CODES: frozenset[int] = frozenset({200, 201, 202, 204})
"""Status codes accepted for the initiating response, polls, and final GET."""

STATUS_IN_PROGRESS_CODE: int = 202

STATUS_SUCCEEDED: str = "succeeded"
STATUS_FAILED: str = "failed"
STATUS_CANCELLED: str = "cancelled"

TERMINAL_STATUSES: frozenset[str] = frozenset({STATUS_SUCCEEDED, STATUS_FAILED, STATUS_CANCELLED})
"""Lower-cased status values that end an Operation-Location poll loop."""

FAILED_STATUSES: frozenset[str] = frozenset({STATUS_FAILED, STATUS_CANCELLED})

# ---------------------------------------------------------------------------
# Body fields
# ---------------------------------------------------------------------------

FIELD_STATUS: str = "status"
FIELD_RESOURCE_LOCATION: str = "resourceLocation"
FIELD_ERROR: str = "error"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_ENDPOINT: str = "https://management.azure.com"
DEFAULT_POLLING_INTERVAL_S: float = 30.0
