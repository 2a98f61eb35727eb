"""Tests for the queue CLI."""

from unittest import TestCase
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from po_sync.cli.queue import main
from po_sync.errors import ChannelError


class TestQueueCLI(TestCase):
    """Tests for the queue CLI command."""

    def setUp(self):
        self.runner = CliRunner()

    def test_requires_action(self):
        result = self.runner.invoke(main, ["--queue-name", "q1", "--dsn", "postgres:///db"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Missing option", result.output)

    @patch("po_sync.cli.queue.build_channel")
    def test_defaults_to_configured_queue_name(self, mock_build):
        mock_channel = MagicMock()
        mock_build.return_value = mock_channel

        result = self.runner.invoke(main, ["--action", "create", "--dsn", "postgres:///db"])

        self.assertEqual(result.exit_code, 0)
        mock_channel.declare.assert_called_once_with("purchase_orders")
        self.assertEqual(mock_build.call_args.args[1], "postgres:///db")

    @patch("po_sync.cli.queue.build_channel")
    def test_connection_failure(self, mock_build):
        mock_build.side_effect = ChannelError("Cannot connect to queue broker: refused")
        result = self.runner.invoke(main, ["--action", "status", "--dsn", "postgres:///db"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Cannot connect", result.output)

    @patch("po_sync.cli.queue.build_channel")
    def test_action_create_success(self, mock_build):
        mock_channel = MagicMock()
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--queue-name", "my_queue", "--dsn", "postgres:///db", "--action", "create"],
        )
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Queue my_queue created", result.output)
        mock_channel.declare.assert_called_once_with("my_queue")
        mock_channel.close.assert_called_once()

    @patch("po_sync.cli.queue.build_channel")
    def test_action_status_prints_metrics(self, mock_build):
        mock_channel = MagicMock()
        mock_channel.list_queues.return_value = ["my_queue"]
        mock_channel.metrics.return_value = {"queue_name": "my_queue", "queue_length": 5}
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--queue-name", "my_queue", "--dsn", "postgres:///db", "--action", "status"],
        )
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Queue my_queue status", result.output)
        mock_channel.metrics.assert_called_once_with("my_queue")
        mock_channel.close.assert_called_once()

    @patch("po_sync.cli.queue.build_channel")
    def test_action_status_missing_queue(self, mock_build):
        mock_channel = MagicMock()
        mock_channel.list_queues.return_value = ["other"]
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--queue-name", "missing", "--dsn", "postgres:///db", "--action", "status"],
        )
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("does not exist", result.output)
        mock_channel.close.assert_called_once()

    @patch("po_sync.cli.queue.build_channel")
    def test_action_purge_success(self, mock_build):
        mock_channel = MagicMock()
        mock_channel.purge.return_value = 42
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--queue-name", "my_queue", "--dsn", "postgres:///db", "--action", "purge"],
        )
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Queue my_queue purged (42 messages)", result.output)
        mock_channel.purge.assert_called_once_with("my_queue")

    @patch("po_sync.cli.queue.build_channel")
    def test_action_destroy_success(self, mock_build):
        mock_channel = MagicMock()
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--queue-name", "my_queue", "--dsn", "postgres:///db", "--action", "destroy"],
        )
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Queue my_queue destroyed", result.output)
        mock_channel.destroy.assert_called_once_with("my_queue")

    @patch("po_sync.cli.queue.build_channel")
    def test_invalid_action_raises_click_exception(self, mock_build):
        mock_channel = MagicMock()
        mock_build.return_value = mock_channel

        result = self.runner.invoke(
            main,
            ["--queue-name", "my_queue", "--dsn", "postgres:///db", "--action", "invalid"],
        )
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Invalid action", result.output)
        self.assertIn("create, status, purge, destroy", result.output)
        mock_channel.close.assert_called_once()

    @patch("po_sync.cli.queue.build_channel")
    def test_uses_pgmq_dsn_env_when_dsn_not_provided(self, mock_build):
        mock_build.return_value = MagicMock()

        result = self.runner.invoke(
            main,
            ["--action", "create"],
            env={"PGMQ_DSN": "postgres://localhost/db"},
        )
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(mock_build.call_args.args[1], "postgres://localhost/db")
