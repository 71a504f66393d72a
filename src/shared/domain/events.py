"""Domain events primitives shared by the contracts."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    ``ledger_name`` is the name the event is emitted under on the ledger
    event channel; subclasses override it.
    """

    ledger_name: ClassVar[str] = ""

    aggregate_id: str
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    def to_payload(self) -> Dict[str, Any]:
        """Body sent to external subscribers."""
        return {"aggregateId": self.aggregate_id}

    def encode(self) -> bytes:
        return json.dumps(self.to_payload()).encode("utf-8")


@dataclass(frozen=True)
class ChaincodeEvent:
    """An event as delivered by the ledger after commit."""

    tx_id: str
    event_name: str
    payload: bytes

    def decode(self) -> Dict[str, Any]:
        return json.loads(self.payload.decode("utf-8")) if self.payload else {}
