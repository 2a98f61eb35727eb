"""Tests for the enqueue CLI."""

import json
from unittest import TestCase
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from po_sync.cli.enqueue import main
from po_sync.errors import PublishError
from po_sync.order_model_dto import PurchaseOrder

ORDER = {"id": "PO001", "vendor_id": "V001", "amount": 100.5, "currency": "USD"}


class TestEnqueueCLI(TestCase):
    """Tests for the enqueue CLI command."""

    def setUp(self):
        self.runner = CliRunner()

    def test_enqueue_requires_order(self):
        result = self.runner.invoke(main, ["--queue-name", "q1"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Missing option", result.output)

    @patch("po_sync.cli.enqueue.build_channel")
    def test_enqueue_invalid_json(self, mock_build):
        result = self.runner.invoke(main, ["--order", "not json", "--dsn", "postgres:///db"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Invalid order", result.output)
        mock_build.assert_not_called()

    @patch("po_sync.cli.enqueue.build_channel")
    def test_enqueue_declares_and_publishes(self, mock_build):
        mock_channel = MagicMock()
        mock_channel.publish.return_value = 42
        mock_build.return_value = mock_channel

        result = self.runner.invoke(main, ["--order", json.dumps(ORDER), "--dsn", "postgres:///db"])

        self.assertEqual(result.exit_code, 0)
        mock_channel.declare.assert_called_once_with("purchase_orders")
        queue_name, payload = mock_channel.publish.call_args.args
        self.assertEqual(queue_name, "purchase_orders")
        self.assertEqual(PurchaseOrder.from_payload(payload), PurchaseOrder(**ORDER))
        self.assertIn("42", result.output)
        mock_channel.close.assert_called_once()

    @patch("po_sync.cli.enqueue.build_channel")
    def test_enqueue_publish_error_raises_click_exception(self, mock_build):
        mock_channel = MagicMock()
        mock_channel.publish.side_effect = PublishError("broker down")
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--order", json.dumps(ORDER), "--queue-name", "q1", "--dsn", "postgres:///db"],
        )
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("broker down", result.output)
        mock_channel.close.assert_called_once()
