"""Order DTOs for the Service Layer.

Pydantic v2 data transfer objects.  DTOs are immutable (``frozen=True``).

- ``OrderTransientDTO``: order fields supplied through the transient map.
- ``OrderEntryDTO``: output for query results (key + record).
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contracts.core.parsing import parse_int
from contracts.orders.constants import REQUIRED_TRANSIENT_FIELDS
from contracts.orders.exceptions import MissingTransientData
from contracts.orders.models import Order


def _text(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return bytes(v).decode("utf-8")
    return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderTransientDTO(BaseModel):
    """Immutable DTO for the transient order fields.

    Transient values arrive as bytes.  Validates:
    - ``type`` and ``distributerName`` are non-empty text.
    - ``quantity`` is a base-10 integer greater than zero.
    - ``price`` is a finite float, zero or more.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0, allow_inf_nan=False)
    distributer_name: str = Field(alias="distributerName")

    @field_validator("type", "distributer_name", mode="before")
    @classmethod
    def decode_text(cls, v: Any) -> Any:
        return _text(v)

    @field_validator("type", "distributer_name")
    @classmethod
    def text_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value must not be blank.")
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def parse_quantity(cls, v: Any) -> Any:
        v = _text(v)
        if isinstance(v, str):
            return parse_int(v)
        return v

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> Any:
        v = _text(v)
        if isinstance(v, str):
            return float(v.strip())
        return v

    @classmethod
    def from_transient(cls, transient: Mapping[str, bytes]) -> OrderTransientDTO:
        """Build the DTO, failing fast when a required key is absent."""
        missing = [name for name in REQUIRED_TRANSIENT_FIELDS if name not in transient]
        if missing:
            raise MissingTransientData(
                f"Required fields are missing in transient data: {', '.join(missing)}"
            )
        return cls.model_validate(
            {name: transient[name] for name in REQUIRED_TRANSIENT_FIELDS}
        )

    def to_order(self) -> Order:
        return Order(
            type=self.type,
            quantity=self.quantity,
            price=self.price,
            distributer_name=self.distributer_name,
        )


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderEntryDTO(BaseModel):
    """Immutable DTO for order query results."""

    model_config = ConfigDict(frozen=True)

    key: str
    record: Order

    def to_dict(self) -> Dict[str, Any]:
        return {"Key": self.key, "Record": self.record.to_record()}
