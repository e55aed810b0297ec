"""Operation strategies for the long-running-operation poller.

Each strategy encapsulates one header convention a service may use to
signal that a call completes asynchronously:

- ``OperationLocationStrategy`` — poll the ``Operation-Location`` status
  monitor and read an explicit ``status`` from its JSON body.
- ``LocationStrategy``          — poll the ``Location`` URL until it stops
  answering ``202 Accepted``.
- ``NoOpStrategy``              — the call completed synchronously.

A strategy is chosen once by ``select_strategy`` and never re-selected.
A strategy's poll URL is only overwritten by a response that carries a
fresh, non-empty value for the header that strategy depends on.

References:
    Azure REST API guidelines — long-running operations
"""

from __future__ import annotations

import abc
import json
from typing import TYPE_CHECKING, Any

from arm_polling.core.constants import (
    FAILED_STATUSES,
    FIELD_ERROR,
    FIELD_RESOURCE_LOCATION,
    FIELD_STATUS,
    HEADER_LOCATION,
    HEADER_OPERATION_LOCATION,
    STATUS_IN_PROGRESS_CODE,
    STATUS_SUCCEEDED,
    TERMINAL_STATUSES,
)
from arm_polling.core.exceptions import MalformedPollBodyError, OperationFailedError
from arm_polling.utils.helpers import request_id, request_of

if TYPE_CHECKING:
    import httpx


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_terminal_status(status: str) -> bool:
    """Return ``True`` if *status* ends an Operation-Location poll loop.

    Comparison is case-insensitive: ``"Succeeded"``, ``"SUCCEEDED"`` and
    ``"succeeded"`` are all terminal.  Empty and unknown values are not.
    """
    return status.lower() in TERMINAL_STATUSES


def is_failed_status(status: str) -> bool:
    """Return ``True`` for the terminal ``failed`` / ``cancelled`` statuses."""
    return status.lower() in FAILED_STATUSES


def fresh_header(response: httpx.Response, name: str) -> str:
    """Return the non-empty value of header *name*, resolved to an absolute URL.

    Returns ``""`` when the header is absent or blank, meaning the
    current poll URL should be kept.  Relative values are resolved against
    the URL of the request that produced *response*.
    """
    value = response.headers.get(name, "").strip()
    if not value:
        return ""
    request = request_of(response)
    if request is None:
        return value
    return str(request.url.join(value))


def load_json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode *response* as a non-empty JSON object.

    Raises:
        MalformedPollBodyError: If the body is empty, not JSON, not an
            object, or an empty object.
    """
    if not response.content:
        raise MalformedPollBodyError(
            "the response does not contain a body",
            correlation_id=request_id(response),
        )
    try:
        body = json.loads(response.content)
    except (ValueError, UnicodeDecodeError) as exc:
        msg = f"the response body is not valid JSON: {exc}"
        raise MalformedPollBodyError(msg, correlation_id=request_id(response)) from exc
    if not isinstance(body, dict) or not body:
        raise MalformedPollBodyError(
            "the response body is not a JSON object",
            correlation_id=request_id(response),
        )
    return body


def extract_string_field(response: httpx.Response, field: str) -> str:
    """Return the string value of *field* in the JSON body of *response*.

    Raises:
        MalformedPollBodyError: If the body is unusable, the field is
            absent, or the field is not a string.
    """
    body = load_json_object(response)
    if field not in body:
        msg = f"the response body does not contain field {field!r}"
        raise MalformedPollBodyError(msg, correlation_id=request_id(response))
    value = body[field]
    if not isinstance(value, str):
        msg = f"the {field!r} value {value!r} was not in string format"
        raise MalformedPollBodyError(msg, correlation_id=request_id(response))
    return value


# ---------------------------------------------------------------------------
# Strategy interface
# ---------------------------------------------------------------------------


class OperationStrategy(abc.ABC):
    """Abstracts the differences between the polling conventions."""

    #: Short name used in log messages.
    name: str = ""

    @property
    @abc.abstractmethod
    def poll_url(self) -> str:
        """The URL the next poll is sent to (``""`` when nothing to poll)."""

    @property
    @abc.abstractmethod
    def done(self) -> bool:
        """Whether the operation reached a terminal state. Performs no I/O."""

    @property
    @abc.abstractmethod
    def status(self) -> str:
        """Human-readable status of the operation."""

    @abc.abstractmethod
    def update(self, response: httpx.Response) -> None:
        """Update state from a successful poll response.

        Implementations must leave their state untouched when they raise.
        """

    def final_get_url(self, response: httpx.Response | None) -> str:
        """Return the URL of the final GET, or ``""`` when none is needed."""
        return ""

    def failure(self, response: httpx.Response | None) -> OperationFailedError | None:
        """Return the error for an operation that finished unsuccessfully."""
        return None


# ---------------------------------------------------------------------------
# Concrete strategies
# ---------------------------------------------------------------------------


class OperationLocationStrategy(OperationStrategy):
    """Polls the ``Operation-Location`` status monitor.

    Args:
        method: HTTP method of the initiating request.
        request_url: URL of the initiating request (the resource address
            for PUT / PATCH).
        poll_url: Initial ``Operation-Location`` value.
        location_url: ``Location`` value of the initiating response, used
            as the final-GET fallback for POST.  Captured once.
    """

    name = "operation-location"

    def __init__(
        self,
        method: str,
        request_url: str,
        poll_url: str,
        location_url: str = "",
    ) -> None:
        self.method = method.upper()
        self.request_url = request_url
        self.location_url = location_url
        self._poll_url = poll_url
        self._status = ""

    @property
    def poll_url(self) -> str:
        return self._poll_url

    @property
    def done(self) -> bool:
        return is_terminal_status(self._status)

    @property
    def status(self) -> str:
        return self._status

    def update(self, response: httpx.Response) -> None:
        status = extract_string_field(response, FIELD_STATUS)
        self._status = status
        op_location = fresh_header(response, HEADER_OPERATION_LOCATION)
        if op_location:
            self._poll_url = op_location

    def final_get_url(self, response: httpx.Response | None) -> str:
        """Resolve the resource location.

        Precedence: ``resourceLocation`` from the last status body, the
        original URL for PUT / PATCH, the captured ``Location`` for POST.
        """
        if response is not None and response.content:
            body = load_json_object(response)
            resource_location = body.get(FIELD_RESOURCE_LOCATION)
            if isinstance(resource_location, str) and resource_location:
                request = request_of(response)
                if request is None:
                    return resource_location
                return str(request.url.join(resource_location))
        if self.method in ("PUT", "PATCH"):
            return self.request_url
        if self.method == "POST" and self.location_url:
            return self.location_url
        return ""

    def failure(self, response: httpx.Response | None) -> OperationFailedError | None:
        if not is_failed_status(self._status):
            return None

        error_code = ""
        message = f"the operation finished with status {self._status!r}"
        body: Any = None
        if response is not None and response.content:
            try:
                body = json.loads(response.content)
            except (ValueError, UnicodeDecodeError):
                body = None
        if isinstance(body, dict) and isinstance(body.get(FIELD_ERROR), dict):
            error_code = str(body[FIELD_ERROR].get("code") or "")
            message = str(body[FIELD_ERROR].get("message") or message)

        return OperationFailedError(
            message,
            status_code=response.status_code if response is not None else 0,
            error_code=error_code,
            response=response,
            stage="final_response",
            correlation_id=request_id(response),
        )


class LocationStrategy(OperationStrategy):
    """Polls the ``Location`` URL until it stops answering 202."""

    name = "location"

    def __init__(self, poll_url: str, status_code: int) -> None:
        self._poll_url = poll_url
        self.status_code = status_code

    @property
    def poll_url(self) -> str:
        return self._poll_url

    @property
    def done(self) -> bool:
        return self.status_code != STATUS_IN_PROGRESS_CODE

    @property
    def status(self) -> str:
        return str(self.status_code)

    def update(self, response: httpx.Response) -> None:
        location = fresh_header(response, HEADER_LOCATION)
        if location:
            self._poll_url = location
        self.status_code = response.status_code


class NoOpStrategy(OperationStrategy):
    """The initiating call completed synchronously."""

    name = "no-op"

    @property
    def poll_url(self) -> str:
        return ""

    @property
    def done(self) -> bool:
        return True

    @property
    def status(self) -> str:
        return STATUS_SUCCEEDED

    def update(self, response: httpx.Response) -> None:
        return None


def select_strategy(response: httpx.Response) -> OperationStrategy:
    """Select the strategy for an accepted initiating *response*.

    ``Operation-Location`` wins over ``Location`` because it carries an
    explicit status; with neither header the call was synchronous.
    """
    op_location = fresh_header(response, HEADER_OPERATION_LOCATION)
    location = fresh_header(response, HEADER_LOCATION)

    if op_location:
        request = request_of(response)
        method = request.method if request is not None else ""
        request_url = str(request.url) if request is not None else ""
        return OperationLocationStrategy(method, request_url, op_location, location)
    if location:
        return LocationStrategy(location, response.status_code)
    return NoOpStrategy()
