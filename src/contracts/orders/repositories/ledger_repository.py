"""Ledger implementation of the Order repository.

Orders live in a private data collection.  Error handling follows the
Null Object pattern: ``get_by_id`` returns ``None`` instead of raising,
the Service Layer decides how to translate a missing order.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import structlog

from contracts.core.exceptions import RecordNotFound
from contracts.core.repositories.interfaces import IRecordStore, StoredRecord
from contracts.orders.constants import ORDER_ASSET_TYPE
from contracts.orders.models import Order
from contracts.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderLedgerRepository(IOrderRepository):
    """Concrete Order repository backed by a restricted record store."""

    def __init__(self, store: IRecordStore) -> None:
        self._store = store

    def exists(self, id: str) -> bool:
        return self._store.exists(id)

    def get_by_id(self, id: str) -> Optional[Order]:
        try:
            return Order.from_record(self._store.get(id))
        except RecordNotFound:
            return None

    def save(self, id: str, entity: Order) -> Order:
        self._store.put(id, entity.to_record())
        logger.info("order.saved", order_id=id)
        return entity

    def delete(self, id: str) -> None:
        self._store.delete(id)
        logger.info("order.deleted", order_id=id)

    def list(self) -> List[Tuple[str, Order]]:
        return _to_orders(self._store.rich_query({"assetType": ORDER_ASSET_TYPE}))

    def list_by_range(self, start_key: str, end_key: str) -> List[Tuple[str, Order]]:
        return _to_orders(self._store.range_query(start_key, end_key))


def _to_orders(records: List[StoredRecord]) -> List[Tuple[str, Order]]:
    return [(entry.key, Order.from_record(entry.record)) for entry in records]
