"""Tests for the best-effort error reporter."""

import json
from unittest import TestCase

import httpx

from po_sync.error_reporter import ErrorReporter

TRACKER_URL = "http://tracker.test/api/events"


class TestErrorReporter(TestCase):
    def setUp(self):
        self.requests: list[httpx.Request] = []

    def _reporter(self, status_code: int = 200) -> ErrorReporter:
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(status_code)

        return ErrorReporter(TRACKER_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_posts_title_and_message(self):
        self._reporter().report("PO001", RuntimeError("boom"))

        self.assertEqual(len(self.requests), 1)
        body = json.loads(self.requests[0].content)
        self.assertEqual(body["title"], "Purchase Order Sync Failed")
        self.assertEqual(body["message"], "Failed to sync PO: PO001, Error: boom")

    def test_non_2xx_is_absorbed(self):
        reporter = self._reporter(status_code=503)
        with self.assertLogs("po_sync.error_reporter", level="WARNING"):
            self.assertIsNone(reporter.report("PO001", "boom"))
        self.assertEqual(len(self.requests), 1)

    def test_transport_error_is_absorbed_and_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("unreachable", request=request)

        reporter = ErrorReporter(TRACKER_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))
        reporter.report("PO001", "boom")
        self.assertEqual(len(calls), 1)

    def test_unconfigured_reporter_only_logs(self):
        reporter = ErrorReporter(None, client=httpx.Client(transport=httpx.MockTransport(self.fail)))
        with self.assertLogs("po_sync.error_reporter", level="INFO") as logs:
            reporter.report("PO001", "boom")
        self.assertIn("PO001", logs.output[0])

    def test_malformed_url_is_absorbed(self):
        reporter = ErrorReporter("not-a-url")
        try:
            reporter.report("PO001", "boom")
        finally:
            reporter.close()
