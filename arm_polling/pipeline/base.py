"""Pipeline abstract base class and the default error unmarshaller.

The poller and the resource clients interact exclusively with this
interface. They never know how a request is authenticated, retried at
the transport level, or logged on the wire.

Contract:
    ``send(request)`` returns the fully-read response for any HTTP status
    code and raises ``TransportError`` only when no response was received.
"""

from __future__ import annotations

import abc
import json
from typing import TYPE_CHECKING

from arm_polling.core.constants import FIELD_ERROR
from arm_polling.core.exceptions import OperationFailedError
from arm_polling.utils.helpers import request_id

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    #: Turns a non-success response into the exception raised to the caller.
    ErrorUnmarshaller = Callable[[httpx.Response], Exception]


class Pipeline(abc.ABC):
    """Abstract base class for request pipelines.

    Example usage::

        with HttpPipeline(PollingConfig.from_env()) as pipeline:
            request = pipeline.build_request("GET", "/subscriptions")
            response = pipeline.send(request)
    """

    @abc.abstractmethod
    def send(self, request: httpx.Request) -> httpx.Response:
        """Send *request* and return the response.

        Args:
            request: A prepared request with an absolute URL.

        Returns:
            The response, whatever its status code. The body must be
            read so that ``response.content`` is available.

        Raises:
            TransportError: If the request could not be sent or no
                response was received.
        """


# ---------------------------------------------------------------------------
# Error unmarshalling
# ---------------------------------------------------------------------------


def unmarshal_arm_error(response: httpx.Response) -> OperationFailedError:
    """Build an ``OperationFailedError`` from an ARM error response.

    Understands the ARM envelope ``{"error": {"code": ..., "message": ...}}``
    and the flat ``{"code": ..., "message": ...}`` shape. Bodies that are
    empty or not JSON fall back to the HTTP reason phrase.
    """
    error_code = ""
    message = ""

    try:
        body = json.loads(response.content) if response.content else None
    except (ValueError, UnicodeDecodeError):
        body = None

    if isinstance(body, dict):
        detail = body.get(FIELD_ERROR, body)
        if isinstance(detail, dict):
            error_code = str(detail.get("code") or "")
            message = str(detail.get("message") or "")

    if not message:
        reason = response.reason_phrase or "error"
        message = f"operation returned HTTP {response.status_code} ({reason})"

    return OperationFailedError(
        message,
        status_code=response.status_code,
        error_code=error_code,
        response=response,
        correlation_id=request_id(response),
    )
