"""Product DTOs for the Service Layer.

Pydantic v2 data transfer objects.  DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``PageRequestDTO``: input for paginated listing.
- ``ProductEntryDTO``: output for query results (key + record).
- ``ProductHistoryEntryDTO``: output for one history entry.
- ``ProductPageDTO``: output for one page with its continuation bookmark.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contracts.core.parsing import parse_int
from contracts.products.constants import ProductStatus
from contracts.products.models import Product

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``product_id``, ``type`` and ``producer_name`` are non-empty.
    - ``quantity`` is a base-10 integer, zero or more.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str
    type: str
    quantity: int = Field(ge=0)
    harvest_date: str
    origin: str
    producer_name: str

    @field_validator("product_id", "type", "producer_name")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Value must not be blank.")
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def parse_quantity(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_int(v)
        return v

    def to_product(self) -> Product:
        return Product(
            type=self.type,
            quantity=self.quantity,
            harvest_date=self.harvest_date,
            origin=self.origin,
            status=ProductStatus.HARVESTED.value,
            owned_by=self.producer_name,
        )


class PageRequestDTO(BaseModel):
    """Immutable DTO for paginated product listing."""

    model_config = ConfigDict(frozen=True)

    page_size: int = Field(gt=0)
    bookmark: str = ""

    @field_validator("page_size", mode="before")
    @classmethod
    def parse_page_size(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_int(v)
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ProductEntryDTO(BaseModel):
    """Immutable DTO for product query results."""

    model_config = ConfigDict(frozen=True)

    key: str
    record: Product

    def to_dict(self) -> Dict[str, Any]:
        return {"Key": self.key, "Record": self.record.to_record()}


class ProductHistoryEntryDTO(BaseModel):
    """Immutable DTO for one mutation of a product key."""

    model_config = ConfigDict(frozen=True)

    tx_id: str
    timestamp: datetime
    is_delete: bool
    record: Optional[Product]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "TxId": self.tx_id,
            "Timestamp": self.timestamp.isoformat(),
            "IsDelete": self.is_delete,
            "Record": self.record.to_record() if self.record else None,
        }


class ProductPageDTO(BaseModel):
    """Immutable DTO for one page of products."""

    model_config = ConfigDict(frozen=True)

    records: List[ProductEntryDTO]
    record_count: int
    bookmark: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Result": [entry.to_dict() for entry in self.records],
            "ResponseMetaData": {
                "RecordCount": self.record_count,
                "Bookmark": self.bookmark,
            },
        }
