"""Product record stored in the shared partition.

Products are immutable values; every custody step produces a new
Product through ``apply``, which consults ``VALID_TRANSITIONS`` and
always sets ``status`` and ``ownedBy`` together.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from contracts.products.constants import (
    VALID_TRANSITIONS,
    ProductStatus,
    ProductTransition,
)
from contracts.products.exceptions import InvalidProductStatus


class Product(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    quantity: int
    harvest_date: str = Field(alias="harvestDate")
    origin: str
    status: str
    owned_by: str = Field(alias="ownedBy")
    asset_type: Literal["product"] = Field(default="product", alias="assetType")
    sale_price: Optional[float] = Field(default=None, alias="salePrice")

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def status_kind(self) -> Optional[ProductStatus]:
        """The closed status variant, ``None`` for an unrecognised label."""
        return ProductStatus.from_label(self.status)

    def can_apply(self, transition: ProductTransition) -> bool:
        """Whether the current status is an allowed source for *transition*.

        Only labels this contract writes are recognised.  A stored status
        that merely starts with "Assigned to" (e.g. "Assigned to X" with no
        market part) has no variant and is not a valid sale source.
        """
        sources, _ = VALID_TRANSITIONS[transition]
        return sources is None or self.status_kind in sources

    def apply(
        self,
        transition: ProductTransition,
        *,
        owner: Optional[str] = None,
        market: str = "",
        sale_price: Optional[float] = None,
        enforce_source: bool = True,
    ) -> Product:
        """Return the product after *transition*.

        ``owner`` defaults to the current owner.  With ``enforce_source``
        off the source-status check of the table is skipped.

        Raises:
            InvalidProductStatus: the current status is not an allowed source.
        """
        if enforce_source and not self.can_apply(transition):
            raise InvalidProductStatus(
                f"Cannot apply {transition.value} to a product in status "
                f"'{self.status}'."
            )

        _, target = VALID_TRANSITIONS[transition]
        new_owner = self.owned_by if owner is None else owner
        update: Dict[str, Any] = {
            "status": target.label(owner=new_owner, market=market),
            "owned_by": new_owner,
        }
        if sale_price is not None:
            update["sale_price"] = sale_price
        return self.model_copy(update=update)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Product:
        return cls.model_validate(record)
