"""Domain events for the Products bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ProductCreated(DomainEvent):
    """Raised when a manufacturer registers a harvested product."""

    ledger_name: ClassVar[str] = "addProductEvent"

    product_type: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {"Type": "Product creation", "ProductType": self.product_type}
