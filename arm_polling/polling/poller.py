"""Long-running-operation poller.

``LROPoller`` is the handle returned to a caller after an asynchronous
request has been accepted. It owns the ``OperationStrategy`` chosen from
the initiating response, tracks the last good response, and records a
terminal error at most once.

Lifecycle:
    1. ``LROPoller.from_response(response, pipeline)`` — classify the
       initiating response and select a strategy.
    2. ``poll()``             — send one status request (repeat while not ``done``).
    3. ``final_response()``   — resolve the resource and deserialize it.
    ``poll_until_done()`` drives all three, honouring ``Retry-After``.

Concurrency:
    A poller drives one operation and has no internal locking. Callers
    must serialise access to a given instance. The only blocking wait is
    the inter-poll delay in ``poll_until_done``, which races the
    caller's cancellation event.

References:
    Azure REST API guidelines — long-running operations
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from arm_polling.core.config import PollingConfig
from arm_polling.core.constants import LRO_VALID_STATUS_CODES
from arm_polling.core.exceptions import (
    ArmError,
    MalformedPollBodyError,
    NotYetCompleteError,
    OperationRejectedError,
    ResumeUnsupportedError,
    TransportError,
)
from arm_polling.models.operation import LroResult
from arm_polling.pipeline.base import unmarshal_arm_error
from arm_polling.polling.strategies import select_strategy
from arm_polling.utils.helpers import delay, parse_retry_after, request_id

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

    from arm_polling.pipeline.base import ErrorUnmarshaller, Pipeline
    from arm_polling.polling.strategies import OperationStrategy

logger = logging.getLogger(__name__)


def is_lro_status_valid(response: httpx.Response) -> bool:
    """Return ``True`` if *response* reports an accepted or successful operation."""
    return response.status_code in LRO_VALID_STATUS_CODES


class LROPoller:
    """Tracks and drives one long-running operation.

    Prefer ``LROPoller.from_response`` over calling the constructor.

    Example usage::

        response = pipeline.send(pipeline.build_request("PUT", url, json=body))
        poller = LROPoller.from_response(response, pipeline)
        result = poller.poll_until_done(deserialize=Endpoint.from_dict)
    """

    def __init__(
        self,
        strategy: OperationStrategy,
        response: httpx.Response,
        pipeline: Pipeline,
        error_unmarshaller: ErrorUnmarshaller = unmarshal_arm_error,
        *,
        config: PollingConfig | None = None,
    ) -> None:
        self._strategy = strategy
        self._response: httpx.Response | None = response
        self._pipeline = pipeline
        self._error_unmarshaller = error_unmarshaller
        self._config = config or PollingConfig()
        self._error: Exception | None = None
        self._final_fetched = False

    @classmethod
    def from_response(
        cls,
        response: httpx.Response,
        pipeline: Pipeline,
        error_unmarshaller: ErrorUnmarshaller = unmarshal_arm_error,
        *,
        config: PollingConfig | None = None,
    ) -> LROPoller:
        """Create a poller from the initiating *response*.

        Raises:
            OperationRejectedError: If the status code is not one of
                200, 201, 202 or 204.
        """
        if not is_lro_status_valid(response):
            raise OperationRejectedError(
                response.status_code,
                correlation_id=request_id(response),
            )

        strategy = select_strategy(response)
        logger.info(
            "LRO poller created | strategy=%s | status_code=%d | poll_url=%s",
            strategy.name,
            response.status_code,
            strategy.poll_url,
        )
        return cls(strategy, response, pipeline, error_unmarshaller, config=config)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def strategy(self) -> OperationStrategy:
        """Return the strategy selected at construction."""
        return self._strategy

    @property
    def status(self) -> str:
        """Return the strategy's current status string."""
        return self._strategy.status

    @property
    def response(self) -> httpx.Response | None:
        """Return the last good response (``None`` after a failure)."""
        return self._response

    @property
    def error(self) -> Exception | None:
        """Return the terminal error, if one was recorded."""
        return self._error

    @property
    def done(self) -> bool:
        """Whether the operation reached a terminal state. Performs no I/O."""
        if self._error is not None:
            return True
        return self._strategy.done

    # ------------------------------------------------------------------
    # poll
    # ------------------------------------------------------------------

    def poll(self) -> httpx.Response:
        """Send one status request and update the poller.

        Once terminal, no request is sent: the cached response is
        returned, or the recorded terminal error is raised again.

        Returns:
            The poll response (replayable; its body remains readable).

        Raises:
            TransportError: If the request could not be sent. Poller
                state is unchanged, so ``poll()`` may simply be retried.
            OperationFailedError: (or whatever the error unmarshaller
                returns) when the poll response carries a failure status.
                The error is recorded and the poller becomes terminal.
            MalformedPollBodyError: If an Operation-Location status body
                cannot be interpreted. Poller state is unchanged.
        """
        if self.done:
            if self._error is not None:
                raise self._error
            return self._response  # type: ignore[return-value]

        response = self._send_get(self._strategy.poll_url)

        if not is_lro_status_valid(response):
            self._record_failure(response, stage="poll")
            raise self._error  # type: ignore[misc]

        self._strategy.update(response)
        self._response = response

        logger.debug(
            "LRO poll | strategy=%s | status_code=%d | status=%s | done=%s",
            self._strategy.name,
            response.status_code,
            self._strategy.status,
            self._strategy.done,
        )
        return response

    # ------------------------------------------------------------------
    # final_response
    # ------------------------------------------------------------------

    def final_response(self, deserialize: Callable[[Any], Any] | None = None) -> LroResult:
        """Resolve the final resource and return it.

        Issues one final GET when the strategy resolves a resource
        location (``resourceLocation``, the PUT/PATCH URL, or the POST
        ``Location`` fallback); otherwise the last response is used.

        Args:
            deserialize: Callable applied to the decoded JSON body (e.g. a
                model's ``from_dict``). When omitted the raw response is
                returned without parsing its body.

        Raises:
            NotYetCompleteError: If the poller is not ``done``.
            OperationFailedError: If the operation finished as failed or
                cancelled, or the final GET was rejected.
            TransportError: If the final GET could not be sent.
            MalformedPollBodyError: If the body could not be decoded.
        """
        if not self.done:
            msg = "cannot return a final response from a poller in a non-terminal state"
            raise NotYetCompleteError(msg)
        if self._error is not None:
            raise self._error

        failure = self._strategy.failure(self._response)
        if failure is not None:
            self._error = failure
            self._response = None
            logger.warning(
                "LRO finished unsuccessfully | strategy=%s | status=%s | error=%s",
                self._strategy.name,
                self._strategy.status,
                failure,
            )
            raise failure

        # The final GET runs even without a deserializer so that
        # result.response is always the resource, not the status monitor.
        if not self._final_fetched:
            url = self._strategy.final_get_url(self._response)
            if url:
                final = self._send_get(url)
                if not is_lro_status_valid(final):
                    self._record_failure(final, stage="final_get")
                    raise self._error  # type: ignore[misc]
                self._response = final
            self._final_fetched = True

        response: httpx.Response = self._response  # type: ignore[assignment]
        value = None
        if deserialize is not None and response.content:
            try:
                body = json.loads(response.content)
            except (ValueError, UnicodeDecodeError) as exc:
                msg = f"the final response body is not valid JSON: {exc}"
                raise MalformedPollBodyError(
                    msg,
                    stage="final_response",
                    correlation_id=request_id(response),
                ) from exc
            value = deserialize(body)

        return LroResult(response=response, value=value, status=self._strategy.status)

    # ------------------------------------------------------------------
    # poll_until_done
    # ------------------------------------------------------------------

    def poll_until_done(
        self,
        polling_interval: float | None = None,
        deserialize: Callable[[Any], Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> LroResult:
        """Poll until terminal, then return ``final_response(deserialize)``.

        The delay between polls is the ``Retry-After`` of the most recent
        response when present, otherwise *polling_interval* (defaulting to
        ``PollingConfig.polling_interval_s``).

        Args:
            polling_interval: Fixed delay in seconds between polls.
            deserialize: Passed through to ``final_response``.
            cancel: Event that aborts the wait between polls when set.

        Raises:
            OperationCancelledError: If *cancel* fires during a delay.
            ArmError: Anything raised by ``poll`` or ``final_response``.
        """
        interval = (
            self._config.polling_interval_s if polling_interval is None else polling_interval
        )
        logger.info(
            "poll_until_done started | strategy=%s | interval=%.1fs",
            self._strategy.name,
            interval,
        )

        try:
            if not self.done:
                initial_delay = parse_retry_after(self._response)
                if initial_delay > 0:
                    logger.debug("Initial Retry-After delay | seconds=%.1f", initial_delay)
                    delay(initial_delay, cancel)

            while not self.done:
                response = self.poll()
                if self.done:
                    break
                retry_after = parse_retry_after(response)
                wait_s = retry_after if retry_after > 0 else interval
                logger.debug(
                    "LRO delay | seconds=%.1f | source=%s",
                    wait_s,
                    "retry-after" if retry_after > 0 else "interval",
                )
                delay(wait_s, cancel)

            result = self.final_response(deserialize)
        except ArmError as exc:
            logger.info(
                "poll_until_done failed | strategy=%s | status=%s | error=%s",
                self._strategy.name,
                self._strategy.status,
                exc.to_error_dict(),
            )
            raise

        logger.info(
            "poll_until_done completed | strategy=%s | status=%s | status_code=%d",
            self._strategy.name,
            result.status,
            result.status_code,
        )
        return result

    # ------------------------------------------------------------------
    # resume_token
    # ------------------------------------------------------------------

    def resume_token(self) -> str:
        """Return a token to resume this poller later.

        Not supported: always raises.

        Raises:
            ResumeUnsupportedError: For terminal pollers (nothing to
                resume) and, for now, for in-flight pollers as well.
        """
        if self.done:
            msg = "cannot create a resume token from a poller in a terminal state"
            raise ResumeUnsupportedError(msg)
        msg = "resume tokens are not supported for in-flight pollers"
        raise ResumeUnsupportedError(msg)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _send_get(self, url: str) -> httpx.Response:
        """Send a GET to *url*. Raises ``TransportError``; never mutates state."""
        request = httpx.Request("GET", url)
        try:
            return self._pipeline.send(request)
        except httpx.HTTPError as exc:
            msg = f"GET {url} failed: {exc}"
            raise TransportError(msg, stage="poll") from exc

    def _record_failure(self, response: httpx.Response, *, stage: str) -> None:
        """Unmarshal *response* into the sticky terminal error."""
        error = self._error_unmarshaller(response)
        if isinstance(error, ArmError):
            error.stage = stage
        self._error = error
        self._response = None
        logger.warning(
            "LRO failed | strategy=%s | stage=%s | status_code=%d | error=%s",
            self._strategy.name,
            stage,
            response.status_code,
            error,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(strategy={self._strategy.name!r}, "
            f"status={self._strategy.status!r}, done={self.done})"
        )
