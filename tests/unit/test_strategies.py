"""Tests for the operation strategies and their helper predicates."""

from __future__ import annotations

import pytest

from arm_polling.core.exceptions import MalformedPollBodyError
from arm_polling.polling.strategies import (
    LocationStrategy,
    NoOpStrategy,
    OperationLocationStrategy,
    extract_string_field,
    fresh_header,
    is_failed_status,
    is_terminal_status,
    select_strategy,
)
from tests.conftest import BASE_URL, make_response

# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class TestIsTerminalStatus:
    @pytest.mark.parametrize(
        "status",
        ["succeeded", "Succeeded", "SUCCEEDED", "failed", "FAILED", "cancelled", "Cancelled"],
    )
    def test_terminal(self, status: str) -> None:
        """Succeeded, Failed and Cancelled are terminal in any case."""
        assert is_terminal_status(status) is True

    @pytest.mark.parametrize("status", ["", "Running", "InProgress", "Accepted", "canceled "])
    def test_not_terminal(self, status: str) -> None:
        """In-progress and unknown statuses are not terminal."""
        assert is_terminal_status(status) is False

    def test_failed_statuses(self) -> None:
        """Only Failed and Cancelled count as failures."""
        assert is_failed_status("Failed") is True
        assert is_failed_status("CANCELLED") is True
        assert is_failed_status("Succeeded") is False


class TestFreshHeader:
    def test_absent_header(self) -> None:
        """A missing header yields an empty string."""
        assert fresh_header(make_response(200), "Location") == ""

    def test_relative_value_resolved_against_request(self) -> None:
        """A relative header value resolves against the request URL."""
        response = make_response(
            202, headers={"Location": "/op/5"}, url=f"{BASE_URL}/a/b?api-version=1"
        )
        assert fresh_header(response, "Location") == f"{BASE_URL}/op/5"

    def test_absolute_value_kept(self) -> None:
        """An absolute header value is returned unchanged."""
        response = make_response(202, headers={"Location": "https://other.example/op"})
        assert fresh_header(response, "location") == "https://other.example/op"


class TestExtractStringField:
    def test_returns_value(self) -> None:
        """A string field is returned as-is."""
        response = make_response(200, json={"status": "Running"})
        assert extract_string_field(response, "status") == "Running"

    def test_empty_string_value_is_allowed(self) -> None:
        """An empty string is a valid field value."""
        response = make_response(200, json={"status": ""})
        assert extract_string_field(response, "status") == ""

    @pytest.mark.parametrize(
        ("content", "fragment"),
        [
            (b"", "does not contain a body"),
            (b"{not json", "not valid JSON"),
            (b"{}", "not a JSON object"),
            (b'"Running"', "not a JSON object"),
            (b'{"other": 1}', "does not contain field"),
            (b'{"status": null}', "not in string format"),
            (b'{"status": ["a"]}', "not in string format"),
        ],
    )
    def test_malformed(self, content: bytes, fragment: str) -> None:
        """Each malformed body shape raises a contract error."""
        with pytest.raises(MalformedPollBodyError, match=fragment) as exc_info:
            extract_string_field(make_response(200, content=content), "status")
        assert exc_info.value.category == "contract"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class TestOperationLocationStrategy:
    def _strategy(self, method: str = "PUT", location: str = "") -> OperationLocationStrategy:
        return OperationLocationStrategy(
            method, f"{BASE_URL}/things/t1", f"{BASE_URL}/op/1", location
        )

    def test_initial_state(self) -> None:
        """A new strategy upper-cases the method and has no status."""
        strategy = self._strategy("put")
        assert strategy.method == "PUT"
        assert strategy.status == ""
        assert strategy.done is False

    def test_update_keeps_url_without_header(self) -> None:
        """The poll URL is kept when no new header arrives."""
        strategy = self._strategy()
        strategy.update(make_response(200, json={"status": "Running"}))
        assert strategy.poll_url == f"{BASE_URL}/op/1"

    def test_malformed_update_keeps_status(self) -> None:
        """A malformed update changes neither status nor URL."""
        strategy = self._strategy()
        strategy.update(make_response(200, json={"status": "Running"}))
        with pytest.raises(MalformedPollBodyError):
            strategy.update(
                make_response(200, headers={"Operation-Location": "/op/2"}, json={"x": 1})
            )
        assert strategy.status == "Running"
        assert strategy.poll_url == f"{BASE_URL}/op/1"

    def test_final_url_ignores_non_string_resource_location(self) -> None:
        """A non-string resourceLocation is ignored."""
        strategy = self._strategy()
        last = make_response(200, json={"status": "Succeeded", "resourceLocation": 42})
        strategy.update(last)
        assert strategy.final_get_url(last) == f"{BASE_URL}/things/t1"

    def test_final_url_for_delete_is_empty(self) -> None:
        """DELETE never issues a final GET."""
        strategy = self._strategy("DELETE", location=f"{BASE_URL}/loc")
        last = make_response(200, json={"status": "Succeeded"})
        strategy.update(last)
        assert strategy.final_get_url(last) == ""

    def test_failure_without_error_object(self) -> None:
        """A Cancelled status without an error body still fails."""
        strategy = self._strategy()
        last = make_response(200, json={"status": "Cancelled"})
        strategy.update(last)
        failure = strategy.failure(last)
        assert failure is not None
        assert "Cancelled" in failure.message
        assert failure.error_code == ""

    def test_no_failure_on_success(self) -> None:
        """Succeeded yields no failure."""
        strategy = self._strategy()
        last = make_response(200, json={"status": "Succeeded"})
        strategy.update(last)
        assert strategy.failure(last) is None


class TestLocationStrategy:
    def test_done_tracks_202(self) -> None:
        """Done once the latest status code is not 202."""
        strategy = LocationStrategy(f"{BASE_URL}/op/2", 202)
        assert strategy.done is False
        strategy.update(make_response(202))
        assert strategy.done is False
        strategy.update(make_response(201))
        assert strategy.done is True
        assert strategy.status == "201"

    def test_never_issues_final_get(self) -> None:
        """The Location strategy has no final GET and no failure."""
        strategy = LocationStrategy(f"{BASE_URL}/op/2", 200)
        assert strategy.final_get_url(make_response(200, json={"a": 1})) == ""
        assert strategy.failure(make_response(200)) is None


class TestNoOpStrategy:
    def test_always_done(self) -> None:
        """NoOp is done from the start and has no URLs."""
        strategy = NoOpStrategy()
        strategy.update(make_response(202))
        assert strategy.done is True
        assert strategy.poll_url == ""
        assert strategy.final_get_url(None) == ""


class TestSelectStrategy:
    def test_priority(self) -> None:
        """Operation-Location beats Location beats no header."""
        both = make_response(202, headers={"Operation-Location": "/op", "Location": "/loc"})
        only_location = make_response(202, headers={"Location": "/loc"})
        neither = make_response(201)
        assert isinstance(select_strategy(both), OperationLocationStrategy)
        assert isinstance(select_strategy(only_location), LocationStrategy)
        assert isinstance(select_strategy(neither), NoOpStrategy)
