"""httpx-backed request pipeline.

Wraps a single ``httpx.Client``. Transport failures are converted into
``TransportError`` so callers only ever see the package exception
taxonomy. The client is injectable so tests can route traffic through
``httpx.MockTransport``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from arm_polling.core.config import PollingConfig
from arm_polling.core.exceptions import TransportError
from arm_polling.pipeline.base import Pipeline

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)


class HttpPipeline(Pipeline):
    """Pipeline that sends requests with ``httpx``.

    Args:
        config: Endpoint, timeout and user agent settings.
        client: Optional pre-built client. When given, the pipeline does
            not own it and ``close()`` leaves it open.
        headers: Extra headers added to every request (e.g. an
            ``Authorization`` header obtained by the caller).
    """

    def __init__(
        self,
        config: PollingConfig | None = None,
        *,
        client: httpx.Client | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._config = config or PollingConfig()
        self._headers = {"User-Agent": self._config.user_agent, **(headers or {})}
        self._owns_client = client is None
        if client is None:
            timeout = self._config.request_timeout_s or None
            client = httpx.Client(timeout=timeout, follow_redirects=False)
        self._client = client

    @property
    def config(self) -> PollingConfig:
        """Return the pipeline configuration (read-only)."""
        return self._config

    def build_request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Request:
        """Build a request, resolving relative *url* against the endpoint."""
        absolute = httpx.URL(self._config.endpoint).join(url)
        return httpx.Request(method, absolute, params=params, json=json)

    def send(self, request: httpx.Request) -> httpx.Response:
        """Send *request*, returning the fully-read response.

        Raises:
            TransportError: On connection, timeout or protocol failure.
        """
        for name, value in self._headers.items():
            request.headers.setdefault(name, value)

        logger.debug("Sending request | method=%s | url=%s", request.method, request.url)
        try:
            response = self._client.send(request)
            response.read()
        except httpx.HTTPError as exc:
            msg = f"{request.method} {request.url} failed: {exc}"
            raise TransportError(msg, stage="send") from exc

        logger.debug(
            "Received response | method=%s | url=%s | status=%d",
            request.method,
            request.url,
            response.status_code,
        )
        return response

    def close(self) -> None:
        """Close the underlying client if this pipeline created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpPipeline:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
