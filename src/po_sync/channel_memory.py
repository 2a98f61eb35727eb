"""In-process queue channel.

No broker required. Used by the tests and for local dry runs; messages live
only as long as the process.
"""

import logging
import queue
import threading
from collections.abc import Iterator

from po_sync.channel_base import ChannelBase
from po_sync.errors import ChannelError, PublishError
from po_sync.order_model_dto import JSON_CONTENT_TYPE, QueueMessage

logger = logging.getLogger(__name__)


class InMemoryChannel(ChannelBase):
    """Queue channel backed by one queue.Queue per declared name.

    Thread-safe. Closing the channel ends every active subscription once it
    has drained the messages already handed to it.
    """

    def __init__(self, poll_interval_seconds: float = 0.05) -> None:
        self.poll_interval_seconds = poll_interval_seconds
        self._queues: dict[str, queue.Queue[QueueMessage]] = {}
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._next_id = 0

    def declare(self, queue_name: str) -> str:
        """Create the queue if it does not exist."""
        if self._closed.is_set():
            raise ChannelError("Channel is closed")
        with self._lock:
            self._queues.setdefault(queue_name, queue.Queue())
        return queue_name

    def publish(self, queue_name: str, payload: bytes, content_type: str = JSON_CONTENT_TYPE) -> int | None:
        """Put the payload on the queue. Returns the new message ID."""
        if self._closed.is_set():
            raise PublishError("Channel is closed")
        with self._lock:
            q = self._queues.get(queue_name)
            if q is None:
                raise PublishError(f"Queue {queue_name} does not exist")
            self._next_id += 1
            msg_id = self._next_id
        q.put(QueueMessage(body=payload, content_type=content_type, msg_id=msg_id))
        return msg_id

    def subscribe(self, queue_name: str) -> Iterator[QueueMessage]:
        """Return a stream that removes each message as it is yielded."""
        if self._closed.is_set():
            raise ChannelError("Channel is closed")
        with self._lock:
            q = self._queues.get(queue_name)
        if q is None:
            raise ChannelError(f"Queue {queue_name} does not exist")
        return self._stream(q)

    def _stream(self, q: "queue.Queue[QueueMessage]") -> Iterator[QueueMessage]:
        while True:
            try:
                # get() removes the message: it is acknowledged on receipt
                yield q.get(timeout=self.poll_interval_seconds)
            except queue.Empty:
                if self._closed.is_set():
                    return

    def list_queues(self) -> list[str]:
        """List all existing queues."""
        with self._lock:
            return list(self._queues)

    def metrics(self, queue_name: str) -> dict:
        """Get the current length of the specified queue."""
        with self._lock:
            q = self._queues.get(queue_name)
        if q is None:
            raise ChannelError(f"Queue {queue_name} does not exist")
        return {"queue_name": queue_name, "queue_length": q.qsize()}

    def purge(self, queue_name: str) -> int:
        """Remove all messages from the specified queue."""
        with self._lock:
            q = self._queues.get(queue_name)
        purged = 0
        while q is not None:
            try:
                q.get_nowait()
            except queue.Empty:
                break
            purged += 1
        return purged

    def destroy(self, queue_name: str) -> None:
        """Forget the queue and its messages."""
        with self._lock:
            self._queues.pop(queue_name, None)

    def close(self) -> None:
        """End all subscriptions once they drain."""
        self._closed.set()
