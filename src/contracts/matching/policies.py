"""Match policy.

Two policies circulate for ``matchOrder``.  ``STRICT`` restricts it to
wholesalers and requires the product to be in "Transferred to
Wholesaler"; ``OPEN`` applies neither check.  The active one comes from
the ``MATCH_POLICY`` setting.
"""

from __future__ import annotations

from enum import Enum

from config import settings


class MatchPolicy(str, Enum):
    STRICT = "strict"
    OPEN = "open"

    @property
    def requires_authorization(self) -> bool:
        return self is MatchPolicy.STRICT

    @property
    def enforces_status(self) -> bool:
        return self is MatchPolicy.STRICT

    @classmethod
    def from_settings(cls) -> MatchPolicy:
        return cls(settings.MATCH_POLICY)
