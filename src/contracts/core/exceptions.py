"""Fatal contract errors.

Raising one of these aborts the enclosing ledger transaction.  Domain
exceptions of each context derive from ``ContractError`` so the
dispatcher can tell a contract failure from a platform failure.
"""

from __future__ import annotations

from pydantic import ValidationError


class ContractError(Exception):
    """Base class for errors that abort a contract invocation."""


class RecordNotFound(ContractError):
    """No record is stored under the requested key."""


class UnsupportedPartitionOperation(ContractError):
    """The requested query is not available on this partition."""


class UnknownOperation(ContractError):
    """The invoked function name is not exposed by any contract."""


def describe_invalid_fields(exc: ValidationError) -> str:
    """Field names and error kinds of *exc*, without the offending values.

    ``str(ValidationError)`` echoes every input, which for orders is
    private collection content.
    """
    return ", ".join(
        f"{'.'.join(str(part) for part in error['loc'])} ({error['type']})"
        for error in exc.errors(include_url=False, include_input=False)
    )
