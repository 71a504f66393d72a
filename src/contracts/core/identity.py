"""Identity guard.

Maps the invoker's MSP id to an organizational affiliation and checks it
against the single affiliation each mutating operation allows.  The MSP
id is always passed in explicitly so the guard can be exercised without
a ledger.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional

import structlog

from config import settings
from contracts.core.outcomes import Denied

logger = structlog.get_logger(__name__)


class Affiliation(str, Enum):
    MANUFACTURER = "manufacturer"
    DISTRIBUTER = "distributer"
    WHOLESALER = "wholesaler"
    MARKET = "market"


class IdentityGuard:
    """Authorization policy: one required affiliation per operation."""

    def __init__(self, msp_ids: Optional[Mapping[str, str]] = None) -> None:
        msp_ids = msp_ids if msp_ids is not None else settings.MSP_IDS
        self._by_mspid = {
            mspid: Affiliation(name) for name, mspid in msp_ids.items()
        }

    def affiliation_of(self, mspid: str) -> Optional[Affiliation]:
        """Return the affiliation of *mspid*, ``None`` for unknown MSPs."""
        return self._by_mspid.get(mspid)

    def authorize(
        self, mspid: str, required: Affiliation, operation: str
    ) -> Optional[Denied]:
        """Return ``None`` when allowed, a ``Denied`` outcome otherwise."""
        if self.affiliation_of(mspid) is required:
            return None

        logger.warning(
            "identity.denied",
            mspid=mspid,
            required=required.value,
            operation=operation,
        )
        return Denied(
            message=f"Organization with MSP ID {mspid} cannot perform {operation}",
            mspid=mspid,
            required=required.value,
            operation=operation,
        )
