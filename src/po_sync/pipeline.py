"""Builds the pipeline from settings and runs producer and consumer together.

The consumer runs on a background thread, the producer on the caller's
thread. The consumer subscription is opened before the thread starts so a
SetupError reaches the caller instead of dying inside the thread. If the
consumer thread dies later, the producer is stopped and run() raises
ConsumerStoppedError.
"""

import logging
import threading
from collections.abc import Iterator

from config import Settings
from po_sync.channel_base import ChannelBase
from po_sync.channel_pgmq import PGMQChannel
from po_sync.consumer import ConsumerLoop, ConsumeSummary
from po_sync.error_reporter import ErrorReporter
from po_sync.errors import ConsumerStoppedError
from po_sync.handlers.order_sync import OrderSyncHandler
from po_sync.order_model_dto import QueueMessage
from po_sync.order_source import OrderSource, PostgresOrderSource
from po_sync.producer import ProducerLoop
from po_sync.sync_client import SyncClient

logger = logging.getLogger(__name__)


def build_channel(settings: Settings, dsn: str | None = None) -> PGMQChannel:
    """Connect to the broker, preferring an explicit DSN over the settings."""
    return PGMQChannel(
        dsn=dsn or settings.queue_dsn,
        poll_interval_seconds=settings.queue.poll_interval_seconds,
    )


def build_reporter(settings: Settings) -> ErrorReporter:
    """Create the error reporter from the error_reporter section."""
    return ErrorReporter(
        settings.error_reporter.api_url,
        title=settings.error_reporter.title,
        timeout_seconds=settings.error_reporter.timeout_seconds,
    )


def build_producer(
    settings: Settings,
    channel: ChannelBase,
    reporter: ErrorReporter,
    source: OrderSource | None = None,
) -> ProducerLoop:
    """Create the producer loop, reading from the database unless a source is given."""
    return ProducerLoop(
        source or PostgresOrderSource(settings.database.dsn),
        channel,
        reporter,
        queue_name=settings.queue.name,
        interval_seconds=settings.producer.interval_seconds,
    )


def build_consumer(settings: Settings, channel: ChannelBase, reporter: ErrorReporter) -> ConsumerLoop:
    """Create the consumer loop with an ERP sync handler."""
    sync_client = SyncClient(settings.erp.api_url, timeout_seconds=settings.erp.timeout_seconds)
    return ConsumerLoop(channel, OrderSyncHandler(sync_client), reporter, queue_name=settings.queue.name)


class SyncPipeline:
    """Producer and consumer sharing one channel."""

    def __init__(self, producer: ProducerLoop, consumer: ConsumerLoop, channel: ChannelBase) -> None:
        self.producer = producer
        self.consumer = consumer
        self.channel = channel
        self.consumer_summary: ConsumeSummary | None = None
        self.consumer_error: Exception | None = None
        self._consumer_thread: threading.Thread | None = None

    @classmethod
    def from_settings(cls, settings: Settings, channel: ChannelBase | None = None) -> "SyncPipeline":
        """Build every component from settings, sharing one reporter."""
        channel = channel or build_channel(settings)
        reporter = build_reporter(settings)
        return cls(
            build_producer(settings, channel, reporter),
            build_consumer(settings, channel, reporter),
            channel,
        )

    def start_consumer(self) -> threading.Thread:
        """Open the subscription here, then drain it on a daemon thread.

        Raises:
            SetupError: The consumer queue could not be set up.
        """
        messages = self.consumer.open_subscription()
        self._consumer_thread = threading.Thread(
            target=self._consume,
            args=(messages,),
            name="po-sync-consumer",
            daemon=True,
        )
        self._consumer_thread.start()
        return self._consumer_thread

    def _consume(self, messages: Iterator[QueueMessage]) -> None:
        try:
            self.consumer_summary = self.consumer.consume(messages)
        except Exception as e:
            logger.exception("Consumer stopped unexpectedly, stopping producer")
            self.consumer_error = e
            self.producer.stop()

    def run(self, max_cycles: int | None = None) -> None:
        """Start the consumer and run the producer until stopped.

        Raises:
            SetupError: The consumer queue could not be set up.
            ConsumerStoppedError: The consumer thread died; the producer was stopped with it.
        """
        try:
            self.start_consumer()
            self.producer.run(max_cycles=max_cycles)
        finally:
            self.stop()
        if self.consumer_error is not None:
            raise ConsumerStoppedError(f"Consumer stopped: {self.consumer_error}") from self.consumer_error

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the producer, close the channel, wait for the consumer and close the HTTP clients."""
        self.producer.stop()
        self.channel.close()
        if self._consumer_thread is not None:
            self._consumer_thread.join(timeout)
        self.consumer.handler.close()
        for reporter in {self.producer.reporter, self.consumer.reporter}:
            reporter.close()
