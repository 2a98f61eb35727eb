"""Abstract base for queue channels.

Defines the three primitives the pipeline relies on (declare, publish,
subscribe) plus the admin operations used by the queue CLI. Implementations
(PGMQChannel, InMemoryChannel) provide the concrete broker.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from po_sync.order_model_dto import JSON_CONTENT_TYPE, QueueMessage

DEFAULT_QUEUE_NAME = "purchase_orders"


class ChannelBase(ABC):
    """Abstract base class for a message broker channel.

    Every operation is safe to call from the producer and the consumer
    threads without extra locking. declare is idempotent.
    """

    @abstractmethod
    def declare(self, queue_name: str) -> str:
        """Ensure a durable, non-exclusive, non-auto-deleting queue exists. Returns its name."""
        pass

    @abstractmethod
    def publish(self, queue_name: str, payload: bytes, content_type: str = JSON_CONTENT_TYPE) -> int | None:
        """Send the payload to the queue without delivery confirmation. Returns the message ID if any."""
        pass

    @abstractmethod
    def subscribe(self, queue_name: str) -> Iterator[QueueMessage]:
        """Return an unbounded iterator of messages, each acknowledged on receipt.

        Set-up failures raise ChannelError before any message is read. The
        iterator ends only when the channel is closed.
        """
        pass

    @abstractmethod
    def list_queues(self) -> list[str]:
        """Return the names of all existing queues."""
        pass

    @abstractmethod
    def metrics(self, queue_name: str) -> dict:
        """Return metrics for the queue (e.g. queue length)."""
        pass

    @abstractmethod
    def purge(self, queue_name: str) -> int:
        """Remove all messages from the queue. Returns the number purged."""
        pass

    @abstractmethod
    def destroy(self, queue_name: str) -> None:
        """Delete the queue and its messages."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection; active subscriptions end."""
        pass
