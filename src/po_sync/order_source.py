"""Where eligible purchase orders come from.

The producer asks the source once per cycle for every order that is approved
but not yet synced.
"""

import logging
from abc import ABC, abstractmethod

import psycopg
from pydantic import ValidationError

from po_sync.errors import SourceFetchError
from po_sync.order_model_dto import PurchaseOrder

logger = logging.getLogger(__name__)

PENDING_ORDERS_QUERY = (
    "SELECT id, vendor_id, amount, currency FROM purchase_orders "
    "WHERE status = 'APPROVED' AND synced = FALSE"
)


class OrderSource(ABC):
    """Abstract source of purchase orders eligible for sync."""

    @abstractmethod
    def fetch_pending_orders(self) -> list[PurchaseOrder]:
        """Return a snapshot of the eligible orders. Raise SourceFetchError on failure."""
        pass


class PostgresOrderSource(OrderSource):
    """Reads pending orders from the purchase_orders table, one connection per fetch."""

    def __init__(self, dsn: str, query: str = PENDING_ORDERS_QUERY) -> None:
        self.dsn = dsn
        self.query = query

    def fetch_pending_orders(self) -> list[PurchaseOrder]:
        try:
            with psycopg.connect(self.dsn) as conn, conn.cursor() as cur:
                cur.execute(self.query)
                rows = cur.fetchall()
        except psycopg.Error as e:
            raise SourceFetchError(f"Cannot fetch pending orders: {e}") from e

        try:
            orders = [
                PurchaseOrder(id=str(row[0]), vendor_id=str(row[1]), amount=float(row[2]), currency=row[3])
                for row in rows
            ]
        except (TypeError, ValueError, ValidationError) as e:
            raise SourceFetchError(f"Unexpected row in purchase_orders: {e}") from e
        logger.debug("Fetched %d pending orders", len(orders))
        return orders
