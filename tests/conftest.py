"""Shared pytest fixtures for the arm_polling test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from arm_polling.core.exceptions import TransportError
from arm_polling.pipeline.base import Pipeline

BASE_URL = "https://management.azure.com"

# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def make_response(
    status_code: int,
    *,
    headers: dict[str, str] | None = None,
    json: Any = None,
    content: bytes | None = None,
    method: str = "GET",
    url: str = f"{BASE_URL}/resource",
) -> httpx.Response:
    """Build a fully-read response bound to a request."""
    request = httpx.Request(method, url)
    if json is not None:
        return httpx.Response(status_code, headers=headers, json=json, request=request)
    return httpx.Response(status_code, headers=headers, content=content or b"", request=request)


class ScriptedPipeline(Pipeline):
    """Pipeline that replays queued responses and records every request.

    Queue entries are ``httpx.Response`` objects (re-bound to the actual
    request so relative URLs resolve) or exceptions to raise.
    """

    def __init__(self, *items: httpx.Response | Exception) -> None:
        self.queue: list[httpx.Response | Exception] = list(items)
        self.requests: list[httpx.Request] = []

    def push(self, *items: httpx.Response | Exception) -> None:
        self.queue.extend(items)

    def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.queue:
            msg = f"unexpected request: {request.method} {request.url}"
            raise AssertionError(msg)
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        item.request = request
        return item

    @property
    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def pipeline() -> ScriptedPipeline:
    """An empty scripted pipeline; push responses before polling."""
    return ScriptedPipeline()


@pytest.fixture()
def response_factory() -> Callable[..., httpx.Response]:
    """Return the ``make_response`` helper."""
    return make_response


@pytest.fixture()
def transport_error() -> TransportError:
    """A transport failure as raised by a pipeline."""
    return TransportError("connection reset by peer", stage="send")
