"""Order domain exceptions.

Raised by the Service Layer when a lifecycle rule is violated.  All of
them abort the enclosing ledger transaction.
"""

from __future__ import annotations

from contracts.core.exceptions import ContractError


class OrderNotFound(ContractError):
    """No order is stored under the requested id."""


class OrderAlreadyExists(ContractError):
    """An order already occupies the requested id."""


class MissingTransientData(ContractError):
    """One or more required transient fields were not supplied."""


class InvalidOrderData(ContractError):
    """A transient field could not be parsed or is out of range."""
