"""Order repository interface.

Extends ``IRepository[Order]`` with the range look-up the restricted
partition offers.  The Service Layer depends exclusively on this
contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Tuple

from contracts.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from contracts.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for Order records."""

    @abstractmethod
    def list_by_range(self, start_key: str, end_key: str) -> List[Tuple[str, Order]]:
        """Orders keyed in ``[start_key, end_key)``, in key order."""
