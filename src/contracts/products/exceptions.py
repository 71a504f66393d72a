"""Product domain exceptions.

Raised by the Service Layer when a lifecycle rule is violated.  All of
them abort the enclosing ledger transaction.
"""

from __future__ import annotations

from contracts.core.exceptions import ContractError


class ProductAlreadyExists(ContractError):
    """A product already occupies the requested id."""


class ProductNotFound(ContractError):
    """No product is stored under the requested id."""


class InvalidProductStatus(ContractError):
    """The transition is not allowed from the product's current status."""


class InvalidProductData(ContractError):
    """Product creation arguments failed to parse/validate."""


class InvalidPageSize(ContractError):
    """The requested page size is not a positive integer."""
