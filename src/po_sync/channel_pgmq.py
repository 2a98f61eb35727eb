"""PostgreSQL-backed queue channel using PGMQ.

Uses the pgmq library to store queues and messages in PostgreSQL. Queues are
regular (logged) tables, so they survive restarts. Subscriptions poll the
queue with pgmq.pop, which reads and deletes a message in one statement
(auto-ack).
"""

import json
import logging
import os
import threading
from collections.abc import Iterator
from urllib.parse import unquote, urlparse

import psycopg
from pgmq import Message, PGMQueue
from psycopg_pool import ConnectionPool
from pydantic import PostgresDsn, ValidationError

from po_sync.channel_base import ChannelBase
from po_sync.errors import ChannelError, PublishError
from po_sync.order_model_dto import JSON_CONTENT_TYPE, MessageEnvelope, MetaDTO, QueueMessage

logger = logging.getLogger(__name__)


class PGMQChannel(ChannelBase):
    """Queue channel implementation using PGMQ (PostgreSQL Message Queue).

    Connects via a Postgres DSN and delegates to PGMQueue. The connection
    pool is shared by the producer and the consumer threads.
    """

    def __init__(
        self,
        dsn: PostgresDsn | str | None = None,
        poll_interval_seconds: float = 1.0,
    ) -> None:
        """Connect to PostgreSQL using the given DSN or the PGMQ_DSN environment variable."""
        raw = dsn or os.getenv("PGMQ_DSN", None)
        if not raw:
            raise ChannelError("No DSN provided and PGMQ_DSN environment variable is not set")
        parts = urlparse(str(raw))

        # libpq reads the DSN itself: percent-encoded credentials and sslmode included
        self.pool = ConnectionPool(str(raw), min_size=1, max_size=10, open=True)
        try:
            # noinspection PyTypeChecker
            self.queue = PGMQueue(
                host=parts.hostname or "localhost",
                port=str(parts.port or 5432),
                database=unquote(parts.path.lstrip("/")),
                username=unquote(parts.username or ""),
                password=unquote(parts.password or ""),
                pool=self.pool,
            )
        except psycopg.Error as e:
            self.pool.close()
            raise ChannelError(f"Cannot connect to queue broker: {e}") from e
        self.poll_interval_seconds = poll_interval_seconds
        self._closed = threading.Event()

    def declare(self, queue_name: str) -> str:
        """Create the queue if it does not exist; pgmq.create is idempotent."""
        try:
            self.queue.create_queue(queue_name)
        except psycopg.Error as e:
            raise ChannelError(f"Cannot declare queue {queue_name}: {e}") from e
        return queue_name

    def publish(self, queue_name: str, payload: bytes, content_type: str = JSON_CONTENT_TYPE) -> int | None:
        """Wrap the payload in an envelope and send it. Returns the PGMQ message ID."""
        if self._closed.is_set():
            raise PublishError("Channel is closed")
        envelope = MessageEnvelope(
            body=payload.decode("utf-8"),
            meta=MetaDTO(queue_name=queue_name, content_type=content_type),
        )
        try:
            return self.queue.send(queue=queue_name, message=envelope.model_dump())
        except psycopg.Error as e:
            raise PublishError(f"Cannot publish to {queue_name}: {e}") from e

    def subscribe(self, queue_name: str) -> Iterator[QueueMessage]:
        """Check the queue exists, then return the polling message stream."""
        if self._closed.is_set():
            raise ChannelError("Channel is closed")
        if queue_name not in self.list_queues():
            raise ChannelError(f"Queue {queue_name} does not exist")
        return self._stream(queue_name)

    def _stream(self, queue_name: str) -> Iterator[QueueMessage]:
        while not self._closed.is_set():
            try:
                # auto-ack: the message leaves the broker before it is processed
                message = self.queue.pop(queue=queue_name)
            except psycopg.Error as e:
                if self._closed.is_set():
                    return
                logger.warning("Reading from %s failed, retrying: %s", queue_name, e)
                self._closed.wait(self.poll_interval_seconds)
                continue
            if message is None:
                self._closed.wait(self.poll_interval_seconds)
                continue
            yield self._to_queue_message(message)

    @staticmethod
    def _to_queue_message(message: Message) -> QueueMessage:
        try:
            envelope = MessageEnvelope.model_validate(message.message)
        except ValidationError:
            # not one of ours; hand over the raw document and let the consumer decide
            logger.warning("Message %s has no envelope, passing raw document", message.msg_id)
            return QueueMessage(body=_raw_body(message.message), msg_id=message.msg_id)
        return QueueMessage(
            body=envelope.body.encode("utf-8"),
            content_type=envelope.meta.content_type,
            msg_id=message.msg_id,
        )

    def list_queues(self) -> list[str]:
        """List all existing queues."""
        try:
            queues = self.queue.list_queues()
        except psycopg.Error as e:
            raise ChannelError(f"Cannot list queues: {e}") from e
        # older pgmq releases return names, newer ones QueueRecord objects
        return [getattr(q, "queue_name", q) for q in queues]

    def metrics(self, queue_name: str) -> dict:
        """Get metrics for the specified queue."""
        return vars(self.queue.metrics(queue_name))

    def purge(self, queue_name: str) -> int:
        """Remove all messages from the specified queue."""
        return self.queue.purge(queue_name)

    def destroy(self, queue_name: str) -> None:
        """Drop the queue and its data."""
        self.queue.drop_queue(queue_name)

    def close(self) -> None:
        """Stop subscriptions and close the connection pool."""
        self._closed.set()
        self.pool.close()


def _raw_body(document: object) -> bytes:
    return json.dumps(document).encode("utf-8")
