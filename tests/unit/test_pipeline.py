"""Tests for the httpx pipeline and the default error unmarshaller.

Traffic is routed through ``httpx.MockTransport``; no real network calls.
"""

from __future__ import annotations

import json
import unittest

import httpx
import pytest

from arm_polling.core.config import PollingConfig
from arm_polling.core.exceptions import OperationFailedError, TransportError
from arm_polling.pipeline import HttpPipeline, unmarshal_arm_error
from tests.conftest import make_response


def _pipeline(handler, **kwargs) -> HttpPipeline:  # noqa: ANN001
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpPipeline(PollingConfig(user_agent="tests/1.0"), client=client, **kwargs)


class TestHttpPipeline(unittest.TestCase):
    """HttpPipeline request building and sending."""

    def test_build_request_resolves_relative_path(self) -> None:
        """Relative paths resolve against the configured endpoint."""
        pipeline = HttpPipeline(PollingConfig(endpoint="https://arm.example"))
        request = pipeline.build_request(
            "PUT", "/subscriptions/s1", params={"api-version": "2020-01-01"}, json={"a": 1}
        )
        assert str(request.url) == "https://arm.example/subscriptions/s1?api-version=2020-01-01"
        assert request.method == "PUT"
        assert json.loads(request.content) == {"a": 1}
        pipeline.close()

    def test_send_adds_user_agent_and_extra_headers(self) -> None:
        """Every request carries the user agent and extra headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        pipeline = _pipeline(handler, headers={"Authorization": "Bearer t"})
        response = pipeline.send(pipeline.build_request("GET", "/x"))

        assert response.json() == {"ok": True}
        assert seen[0].headers["User-Agent"] == "tests/1.0"
        assert seen[0].headers["Authorization"] == "Bearer t"

    def test_non_success_status_is_returned(self) -> None:
        """Error statuses are returned, not raised."""
        pipeline = _pipeline(lambda request: httpx.Response(503))
        response = pipeline.send(pipeline.build_request("GET", "/x"))
        assert response.status_code == 503

    def test_transport_failure_is_wrapped(self) -> None:
        """httpx errors surface as retryable TransportError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        pipeline = _pipeline(handler)
        with self.assertRaises(TransportError) as ctx:
            pipeline.send(pipeline.build_request("GET", "/x"))
        assert ctx.exception.retryable is True
        assert ctx.exception.stage == "send"

    def test_injected_client_not_closed(self) -> None:
        """An injected client outlives the pipeline."""
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with HttpPipeline(client=client):
            pass
        assert client.is_closed is False
        client.close()

    def test_owned_client_closed(self) -> None:
        """close() closes a client the pipeline created."""
        pipeline = HttpPipeline()
        pipeline.close()
        assert pipeline._client.is_closed is True


class TestUnmarshalArmError:
    """Default error unmarshaller."""

    def test_arm_envelope(self) -> None:
        """The ARM error envelope fills code, message and request id."""
        response = make_response(
            404,
            headers={"x-ms-request-id": "req-7"},
            json={"error": {"code": "ResourceNotFound", "message": "not here"}},
        )
        err = unmarshal_arm_error(response)
        assert isinstance(err, OperationFailedError)
        assert err.status_code == 404
        assert err.error_code == "ResourceNotFound"
        assert err.message == "not here"
        assert err.correlation_id == "req-7"
        assert err.response is response

    def test_flat_shape(self) -> None:
        """A flat code/message body is understood."""
        err = unmarshal_arm_error(make_response(400, json={"code": "Bad", "message": "nope"}))
        assert err.error_code == "Bad"
        assert err.message == "nope"

    @pytest.mark.parametrize("content", [b"", b"<html>oops</html>", b"[]"])
    def test_falls_back_to_reason(self, content: bytes) -> None:
        """Non-JSON or empty bodies fall back to the reason phrase."""
        err = unmarshal_arm_error(make_response(500, content=content))
        assert err.error_code == ""
        assert err.message == "operation returned HTTP 500 (Internal Server Error)"
