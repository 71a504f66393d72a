"""Order record stored in the restricted partition.

Orders are immutable: there is no update-in-place.  An order lives until
a distributer deletes it or a successful match consumes it.
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field


class Order(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0, allow_inf_nan=False)
    distributer_name: str = Field(alias="distributerName")
    asset_type: Literal["order"] = Field(default="order", alias="assetType")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Order:
        return cls.model_validate(record)
