"""Informational outcomes.

These are returned, never raised.  An informational outcome leaves the
ledger untouched (``Denied``, ``NoMatch``) or reports a completed write
(``Matched``); either way the enclosing transaction commits normally,
so callers may surface the message to end users or retry safely.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Outcome:
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"outcome": self.__class__.__name__, **asdict(self)}

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Denied(Outcome):
    """The invoker's affiliation is not allowed to run the operation."""

    mspid: str
    required: str
    operation: str


@dataclass(frozen=True)
class NoMatch(Outcome):
    """The order and product are incompatible; nothing was written."""

    product_id: str
    order_id: str


@dataclass(frozen=True)
class Matched(Outcome):
    """The product was assigned to the order's distributer."""

    product_id: str
    order_id: str
    owner: str


def present(result: Any) -> Any:
    """Ledger-facing shape of a service result.

    Records are returned as their stored JSON document; outcomes and
    plain values pass through.
    """
    to_record = getattr(result, "to_record", None)
    return to_record() if callable(to_record) else result
