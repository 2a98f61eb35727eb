"""Handler for the purchase_orders queue: decode the order and push it to the ERP."""

from po_sync.errors import DecodeError
from po_sync.handlers.base import BaseHandler
from po_sync.order_model_dto import JSON_CONTENT_TYPE, PurchaseOrder, QueueMessage
from po_sync.sync_client import SyncClient


class OrderSyncHandler(BaseHandler):
    """Decodes JSON order messages and syncs them with a SyncClient."""

    def __init__(self, sync_client: SyncClient) -> None:
        self.sync_client = sync_client

    def validate(self, message: QueueMessage) -> PurchaseOrder:
        """Reject non-JSON content types, then decode the body."""
        if message.content_type != JSON_CONTENT_TYPE:
            raise DecodeError(f"Unsupported content type: {message.content_type}")
        return PurchaseOrder.from_payload(message.body)

    def handle(self, order: PurchaseOrder) -> None:
        self.sync_client.sync(order)

    def close(self) -> None:
        """Close the ERP HTTP client."""
        self.sync_client.close()
