"""
Unit tests for the response decision engine.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from statichttpd.config import ServerConfig
from statichttpd.handlers.resolver import MISSING, ResourceMetadata
from statichttpd.handlers.static import StaticFileHandler
from statichttpd.http.request import HTTPRequest, Method
from statichttpd.http.response import bad_request, not_implemented
from statichttpd.http.status_codes import HTTPStatus


UTC = timezone.utc
NOW = datetime(2024, 1, 2, 15, 4, 5, tzinfo=UTC)
MTIME = datetime(2023, 6, 15, 12, 0, 0, tzinfo=UTC)
FILE = ResourceMetadata(exists=True, size_bytes=42, last_modified=MTIME)


def make_handler(metadata=FILE) -> StaticFileHandler:
    return StaticFileHandler(
        ServerConfig(server_name="TestServer"),
        clock=lambda: NOW,
        resolver=lambda path: metadata,
    )


def make_request(method=Method.GET, since=None) -> HTTPRequest:
    return HTTPRequest(method=method, raw_path="/a.txt", path="/srv/a.txt", if_modified_since=since)


class TestDecisions:
    """Tests for StaticFileHandler.handle."""

    def test_get_existing_file(self):
        outcome = make_handler().handle(make_request())

        assert outcome.status is HTTPStatus.OK
        assert outcome.body_file == "/srv/a.txt"
        assert outcome.headers == (
            ("Date", "Tue Jan 2 15:04:05 UTC 2024"),
            ("Server", "TestServer"),
            ("Last-Modified", "Thu Jun 15 12:00:00 UTC 2023"),
            ("Content-Length", "42"),
        )

    def test_head_existing_file(self):
        """Test that HEAD gets the same headers but no body file."""
        get = make_handler().handle(make_request(Method.GET))
        head = make_handler().handle(make_request(Method.HEAD))

        assert head.status is HTTPStatus.OK
        assert head.headers == get.headers
        assert not head.has_file_body

    @pytest.mark.parametrize("method", [Method.GET, Method.HEAD])
    def test_missing_is_404(self, method):
        outcome = make_handler(MISSING).handle(make_request(method))

        assert outcome.status is HTTPStatus.NOT_FOUND
        assert outcome.get_header("Server") == "TestServer"
        assert outcome.get_header("Content-Length") == "69"

    def test_missing_wins_over_conditional(self):
        outcome = make_handler(MISSING).handle(make_request(since=NOW))
        assert outcome.status is HTTPStatus.NOT_FOUND

    @pytest.mark.parametrize("method", [Method.GET, Method.HEAD])
    def test_since_after_mtime_is_304(self, method):
        outcome = make_handler().handle(make_request(method, since=NOW))

        assert outcome.status is HTTPStatus.NOT_MODIFIED
        assert outcome.headers == (
            ("Date", "Tue Jan 2 15:04:05 UTC 2024"),
            ("Content-Length", "72"),
        )

    def test_since_equal_to_mtime_is_200(self):
        """Test that the comparison is strictly after."""
        outcome = make_handler().handle(make_request(since=MTIME))
        assert outcome.status is HTTPStatus.OK

    def test_since_one_second_after_is_304(self):
        since = datetime(2023, 6, 15, 12, 0, 1, tzinfo=UTC)
        assert make_handler().handle(make_request(since=since)).status is HTTPStatus.NOT_MODIFIED

    def test_since_before_mtime_is_200(self):
        since = datetime(2023, 6, 14, 12, 0, 0, tzinfo=UTC)
        assert make_handler().handle(make_request(since=since)).status is HTTPStatus.OK

    def test_since_compared_across_zones(self):
        """Test that client dates keep their own zone when compared."""
        # 12:00:00 UTC expressed as 14:00:00 +02:00 -> not after
        since = datetime(2023, 6, 15, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert make_handler().handle(make_request(since=since)).status is HTTPStatus.OK

    @pytest.mark.parametrize("outcome", [bad_request(), not_implemented()])
    def test_parse_outcomes_pass_through(self, outcome):
        assert make_handler().handle(outcome) is outcome

    def test_decide_with_explicit_now(self):
        later = datetime(2025, 1, 1, 0, 0, 0, tzinfo=UTC)
        outcome = make_handler().decide(make_request(), FILE, now=later)
        assert outcome.get_header("Date") == "Wed Jan 1 00:00:00 UTC 2025"


class TestLogging:
    """Tests for the per-request log lines."""

    def test_logs_method_for_200(self, caplog):
        caplog.set_level(logging.INFO, logger="statichttpd.handlers.static")
        make_handler().handle(make_request(Method.HEAD))
        assert "Servicing 200 HEAD" in caplog.text

    def test_logs_status_for_errors(self, caplog):
        caplog.set_level(logging.INFO, logger="statichttpd.handlers.static")
        make_handler().handle(not_implemented())
        assert "Servicing 501" in caplog.text
