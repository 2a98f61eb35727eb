"""Consumer loop: drain the queue and sync each order to the ERP.

Messages are handled one at a time in delivery order. A message that cannot
be decoded is dropped without a report; a failed sync is reported and the
loop moves on. Messages are acknowledged on receipt, so neither case is
redelivered.
"""

import enum
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from po_sync.channel_base import DEFAULT_QUEUE_NAME, ChannelBase
from po_sync.error_reporter import ErrorReporter
from po_sync.errors import ChannelError, DecodeError, SetupError, SyncError
from po_sync.handlers.base import BaseHandler
from po_sync.order_model_dto import QueueMessage

logger = logging.getLogger(__name__)


class ConsumeOutcome(enum.Enum):
    SYNCED = "synced"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass
class ConsumeSummary:
    """Counts of message outcomes over one subscription."""

    synced: int = 0
    dropped: int = 0
    failed: int = 0

    def add(self, outcome: ConsumeOutcome) -> None:
        setattr(self, outcome.value, getattr(self, outcome.value) + 1)


class ConsumerLoop:
    """Single long-lived subscription feeding a message handler."""

    def __init__(
        self,
        channel: ChannelBase,
        handler: BaseHandler,
        reporter: ErrorReporter,
        queue_name: str = DEFAULT_QUEUE_NAME,
    ) -> None:
        self.channel = channel
        self.handler = handler
        self.reporter = reporter
        self.queue_name = queue_name

    def open_subscription(self) -> Iterator[QueueMessage]:
        """Declare the queue and subscribe to it.

        Raises:
            SetupError: The queue could not be declared or subscribed to. The
                consumer cannot run without it; the caller decides how to exit.
        """
        try:
            self.channel.declare(self.queue_name)
            return self.channel.subscribe(self.queue_name)
        except ChannelError as e:
            raise SetupError(f"Cannot consume from {self.queue_name}: {e}") from e

    def process(self, message: QueueMessage) -> ConsumeOutcome:
        """Decode and sync a single message."""
        try:
            order = self.handler.validate(message)
        except DecodeError as e:
            logger.warning("Failed to parse message %s: %s", message.msg_id, e)
            return ConsumeOutcome.DROPPED

        try:
            self.handler.handle(order)
        except SyncError as e:
            logger.error("Sync failed for order %s: %s", order.id, e)
            self.reporter.report(order.id, e)
            return ConsumeOutcome.FAILED

        logger.info("Order %s synced", order.id)
        return ConsumeOutcome.SYNCED

    def consume(self, messages: Iterable[QueueMessage]) -> ConsumeSummary:
        """Process messages until the iterator ends."""
        summary = ConsumeSummary()
        for message in messages:
            summary.add(self.process(message))
        logger.info(
            "Subscription to %s ended: synced=%d dropped=%d failed=%d",
            self.queue_name,
            summary.synced,
            summary.dropped,
            summary.failed,
        )
        return summary

    def run(self) -> ConsumeSummary:
        """Open the subscription and consume it until the channel closes."""
        return self.consume(self.open_subscription())
