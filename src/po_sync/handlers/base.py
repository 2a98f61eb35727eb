"""Base handler interface for queue messages.

The consumer loop calls validate to decode each message and then handle on
the decoded order.
"""

from abc import ABC, abstractmethod

from po_sync.order_model_dto import PurchaseOrder, QueueMessage


class BaseHandler(ABC):
    """Abstract base for message handlers.

    validate turns the raw message into an order and raises DecodeError when
    it cannot. handle does the actual work and raises SyncError on failure.
    """

    @abstractmethod
    def validate(self, message: QueueMessage) -> PurchaseOrder:
        """Decode the message; raise DecodeError if it is not a valid order."""
        pass

    @abstractmethod
    def handle(self, order: PurchaseOrder) -> None:
        """Process the order. Raise SyncError on failure to trigger a report."""
        pass

    def close(self) -> None:
        """Release any client the handler holds."""
        pass
