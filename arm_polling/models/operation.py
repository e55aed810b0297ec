"""Result model for long-running operations.

Design notes:
- Frozen dataclass; the poller never mutates a result once returned.
- ``value`` is whatever the caller's ``deserialize`` callable produced,
  or ``None`` when no shape was supplied or the body was empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


@dataclass(frozen=True)
class LroResult:
    """Outcome of a completed long-running operation.

    Attributes:
        response: The final HTTP response (final GET, last poll, or the
            initiating response for synchronous completion).
        value: Deserialized payload, or ``None``.
        status: Terminal status reported by the poller
            (e.g. ``"Succeeded"``, ``"200"``).
    """

    response: httpx.Response
    value: Any = None
    status: str = ""

    @property
    def status_code(self) -> int:
        """HTTP status code of ``response``."""
        return self.response.status_code
