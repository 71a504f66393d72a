"""Product repository interface.

Extends ``IRepository[Product]`` with the history and pagination look-ups
the shared partition offers.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional, Tuple

from contracts.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from datetime import datetime

    from contracts.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for Product records."""

    @abstractmethod
    def history(
        self, id: str
    ) -> List[Tuple[str, datetime, bool, Optional[Product]]]:
        """``(tx_id, timestamp, is_delete, product)`` per mutation, newest first."""

    @abstractmethod
    def page(
        self, page_size: int, bookmark: str = ""
    ) -> Tuple[List[Tuple[str, Product]], int, str]:
        """One page of products plus fetched count and next bookmark."""
