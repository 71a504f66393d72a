"""Ledger implementation of the Product repository.

Products live in the shared world state.  ``get_by_id`` returns ``None``
for a missing key; the Service Layer decides how to report it.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

import structlog

from contracts.core.exceptions import RecordNotFound
from contracts.core.repositories.interfaces import IRecordStore
from contracts.products.constants import PRODUCT_ASSET_TYPE
from contracts.products.models import Product
from contracts.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

SELECTOR = {"assetType": PRODUCT_ASSET_TYPE}


class ProductLedgerRepository(IProductRepository):
    """Concrete Product repository backed by the shared record store."""

    def __init__(self, store: IRecordStore) -> None:
        self._store = store

    def exists(self, id: str) -> bool:
        return self._store.exists(id)

    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return Product.from_record(self._store.get(id))
        except RecordNotFound:
            return None

    def save(self, id: str, entity: Product) -> Product:
        self._store.put(id, entity.to_record())
        logger.info("product.saved", product_id=id, status=entity.status)
        return entity

    def delete(self, id: str) -> None:
        self._store.delete(id)
        logger.info("product.deleted", product_id=id)

    def list(self) -> List[Tuple[str, Product]]:
        return [
            (entry.key, Product.from_record(entry.record))
            for entry in self._store.rich_query(SELECTOR)
        ]

    def history(
        self, id: str
    ) -> List[Tuple[str, datetime, bool, Optional[Product]]]:
        return [
            (
                entry.tx_id,
                entry.timestamp,
                entry.is_delete,
                Product.from_record(entry.record) if entry.record else None,
            )
            for entry in self._store.history_query(id)
        ]

    def page(
        self, page_size: int, bookmark: str = ""
    ) -> Tuple[List[Tuple[str, Product]], int, str]:
        result = self._store.paged_query(SELECTOR, page_size, bookmark)
        products = [
            (entry.key, Product.from_record(entry.record)) for entry in result.records
        ]
        return products, result.fetched_count, result.bookmark
