"""Producer loop: poll the order source and publish each order to the queue.

Each cycle fetches the eligible orders once and publishes them one by one.
A failed publish is reported and skipped; a failed fetch skips the whole
cycle. The loop then waits for the interval before the next cycle, so cycles
never overlap.
"""

import enum
import logging
import threading
from dataclasses import dataclass

from po_sync.channel_base import DEFAULT_QUEUE_NAME, ChannelBase
from po_sync.error_reporter import ErrorReporter
from po_sync.errors import ChannelError, SourceFetchError
from po_sync.order_source import OrderSource

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0


class ProducerState(enum.Enum):
    IDLE = "idle"
    POLLING = "polling"


@dataclass
class PublishSummary:
    """Outcome of one producer cycle."""

    fetched: int = 0
    published: int = 0
    failed: int = 0
    fetch_error: str | None = None


class ProducerLoop:
    """Timer-driven fetch and publish of pending purchase orders."""

    def __init__(
        self,
        source: OrderSource,
        channel: ChannelBase,
        reporter: ErrorReporter,
        queue_name: str = DEFAULT_QUEUE_NAME,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.source = source
        self.channel = channel
        self.reporter = reporter
        self.queue_name = queue_name
        self.interval_seconds = interval_seconds
        self.state = ProducerState.IDLE
        self._stop_event = threading.Event()

    def run_once(self) -> PublishSummary:
        """Run one fetch and publish cycle."""
        self.state = ProducerState.POLLING
        try:
            return self._cycle()
        finally:
            self.state = ProducerState.IDLE

    def _cycle(self) -> PublishSummary:
        summary = PublishSummary()
        logger.info("Fetching purchase orders for sync...")
        try:
            orders = self.source.fetch_pending_orders()
        except SourceFetchError as e:
            logger.error("Error fetching orders: %s", e)
            summary.fetch_error = str(e)
            return summary

        summary.fetched = len(orders)
        for order in orders:
            try:
                self.channel.declare(self.queue_name)
                self.channel.publish(self.queue_name, order.to_payload())
            except ChannelError as e:
                logger.error("Failed to publish order %s to queue: %s", order.id, e)
                self.reporter.report(order.id, e)
                summary.failed += 1
                continue
            summary.published += 1

        logger.info(
            "Cycle done: fetched=%d published=%d failed=%d",
            summary.fetched,
            summary.published,
            summary.failed,
        )
        return summary

    def run(self, max_cycles: int | None = None) -> None:
        """Cycle until stop() is called, waiting interval_seconds between cycles."""
        cycles = 0
        while not self._stop_event.is_set():
            self.run_once()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                return
            self._stop_event.wait(self.interval_seconds)

    def stop(self) -> None:
        self._stop_event.set()
