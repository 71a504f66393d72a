"""Product domain constants.

Defines the closed set of custody statuses and the transition table of
the product state machine.  Statuses are persisted as human-readable
labels; ``ProductStatus.from_label`` maps a stored label back to its
variant.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

PRODUCT_ASSET_TYPE = "product"


class ProductStatus(str, Enum):
    HARVESTED = "Harvested"
    TRANSFERRED_TO_WHOLESALER = "Transferred to Wholesaler"
    ASSIGNED_TO_ORDER = "Assigned to Order"
    ASSIGNED_TO_MARKET = "Assigned to {owner} for the market {market}"
    FINALIZED_FOR_MARKET_SALE = "Finalized for Market Sale"

    def label(self, owner: str = "", market: str = "") -> str:
        if self is ProductStatus.ASSIGNED_TO_MARKET:
            return self.value.format(owner=owner, market=market)
        return self.value

    @classmethod
    def from_label(cls, label: str) -> Optional[ProductStatus]:
        """Return the variant a stored label belongs to, ``None`` if unknown."""
        for status in cls:
            if status is not cls.ASSIGNED_TO_MARKET and status.value == label:
                return status
        if MARKET_LABEL.fullmatch(label):
            return cls.ASSIGNED_TO_MARKET
        return None


MARKET_LABEL = re.compile(r"Assigned to (?P<owner>.*) for the market (?P<market>.*)", re.S)


class ProductTransition(str, Enum):
    TRANSFER_TO_WHOLESALER = "transferToWholesaler"
    ASSIGN_TO_MARKET = "assignProductToMarket"
    MATCH_ORDER = "matchOrder"
    COMPLETE_SALE = "completeProductSaleAtMarket"


# transition -> (allowed source statuses, target status); ``None`` = any source.
VALID_TRANSITIONS: Dict[
    ProductTransition, Tuple[Optional[FrozenSet[ProductStatus]], ProductStatus]
] = {
    ProductTransition.TRANSFER_TO_WHOLESALER: (
        None,
        ProductStatus.TRANSFERRED_TO_WHOLESALER,
    ),
    ProductTransition.ASSIGN_TO_MARKET: (None, ProductStatus.ASSIGNED_TO_MARKET),
    ProductTransition.MATCH_ORDER: (
        frozenset({ProductStatus.TRANSFERRED_TO_WHOLESALER}),
        ProductStatus.ASSIGNED_TO_ORDER,
    ),
    ProductTransition.COMPLETE_SALE: (
        frozenset({ProductStatus.ASSIGNED_TO_ORDER, ProductStatus.ASSIGNED_TO_MARKET}),
        ProductStatus.FINALIZED_FOR_MARKET_SALE,
    ),
}
