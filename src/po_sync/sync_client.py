"""Outbound purchase order sync to the ERP."""

import logging

import httpx

from po_sync.errors import SyncError
from po_sync.order_model_dto import PurchaseOrder

logger = logging.getLogger(__name__)


class SyncClient:
    """Posts one purchase order at a time to the ERP endpoint.

    Any 2xx answer is a success and its body is ignored. Everything else,
    including transport failures, raises SyncError. Retries are left to the
    caller.
    """

    def __init__(self, api_url: str, timeout_seconds: float = 30.0, client: httpx.Client | None = None) -> None:
        self.api_url = api_url
        self.client = client or httpx.Client(timeout=timeout_seconds)

    def sync(self, order: PurchaseOrder) -> None:
        """Send the order to the ERP; raise SyncError when it is not accepted."""
        try:
            response = self.client.post(
                self.api_url,
                json=order.to_erp_payload(),
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SyncError(f"ERP request failed: {e}") from e

        if not response.is_success:
            raise SyncError(f"ERP API error: {response.status_code} {response.reason_phrase}")
        logger.debug("Order %s accepted by ERP with status %s", order.id, response.status_code)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()
