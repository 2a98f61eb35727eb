"""Purchase order and queue message data transfer objects.

Defines the order that travels through the queue, the raw message handed to
subscribers, and the envelope (body plus metadata) stored by the broker.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from po_sync.errors import DecodeError

JSON_CONTENT_TYPE = "application/json"


class PurchaseOrder(BaseModel):
    """An approved purchase order waiting to be synced to the ERP."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Order identifier, unique within the source system")
    vendor_id: str = Field(..., description="Vendor identifier")
    amount: float = Field(..., description="Total amount, non-negative in the source")
    currency: str = Field(..., description="ISO-4217 currency code, not validated")

    def to_payload(self) -> bytes:
        """Serialize to the JSON message body."""
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_payload(cls, body: bytes | str) -> "PurchaseOrder":
        """Decode a JSON message body; raises DecodeError on bad payloads."""
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(f"Invalid purchase order payload: {e}") from e

    def to_erp_payload(self) -> dict:
        """Map the order onto the ERP purchase order fields."""
        return {
            "PurchaseOrderNumber": self.id,
            "VendorAccountNumber": self.vendor_id,
            "TotalAmount": self.amount,
            "Currency": self.currency,
        }


class QueueMessage(BaseModel):
    """A message as handed to a subscriber: opaque body plus content type."""

    body: bytes = Field(..., description="Raw message body")
    content_type: str = Field(JSON_CONTENT_TYPE, description="MIME type of the body")
    msg_id: int | None = Field(None, description="Broker message identifier, if any")


class MetaDTO(BaseModel):
    """Metadata stored alongside a message body in the broker."""

    queue_name: str = Field(..., description="Name of the queue")
    content_type: str = Field(JSON_CONTENT_TYPE, description="MIME type of the body")


class MessageEnvelope(BaseModel):
    """A broker document: body plus metadata.

    PGMQ stores JSONB, so the body is kept as text and decoded by the consumer.
    """

    body: str = Field(..., description="Message body as text")
    meta: MetaDTO = Field(..., description="Message metadata")
