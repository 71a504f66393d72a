"""Invocation surface for the chaincode contracts.

``ContractDispatcher`` resolves a ledger-facing function name
(``createOrder``, ``ProductContract:matchOrder``, ...) to the contract
method that implements it and runs it inside one ledger transaction.

Every invocation binds ``tx_id`` and ``operation`` into the structlog
context so all log lines emitted by the services carry them.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

import structlog

from contracts.core.context import TransactionContext
from contracts.core.exceptions import ContractError, UnknownOperation
from contracts.core.outcomes import Outcome
from shared.domain.ledger import IChaincodeStub, ILedger
from shared.infrastructure.ledger import StaticClientIdentity

logger = structlog.get_logger(__name__)


def default_contracts() -> Tuple[Any, ...]:
    from contracts.orders.contract import OrderContract
    from contracts.products.contract import ProductContract

    return (OrderContract(), ProductContract())


class ContractDispatcher:
    """Routes invocations to contract methods, one transaction each.

    ``submit`` commits on a normal return, informational outcomes
    included, and aborts when the operation raises.  ``evaluate`` never
    commits.
    """

    def __init__(
        self, ledger: ILedger, contracts: Optional[Iterable[Any]] = None
    ) -> None:
        self._ledger = ledger
        self._routes: Dict[str, Callable[..., Any]] = {}
        for contract in contracts if contracts is not None else default_contracts():
            self.register(contract)

        bus = getattr(ledger, "bus", None)
        if bus is not None:
            from contracts.products.handlers import register_handlers

            register_handlers(bus)

    def register(self, contract: Any) -> None:
        for function, attribute in contract.OPERATIONS.items():
            method = getattr(contract, attribute)
            self._routes.setdefault(function, method)
            self._routes[f"{contract.name}:{function}"] = method

    @property
    def operations(self) -> Tuple[str, ...]:
        return tuple(sorted(self._routes))

    def resolve(self, function: str) -> Callable[..., Any]:
        try:
            return self._routes[function]
        except KeyError:
            raise UnknownOperation(f"Unknown operation {function!r}.") from None

    def submit(
        self,
        function: str,
        *args: Any,
        mspid: str,
        transient: Optional[Mapping[str, bytes]] = None,
    ) -> Any:
        """Run *function* and commit its writes.

        Raises:
            UnknownOperation: *function* is not exposed by any contract.
            ContractError: the operation failed; nothing was written.
        """
        method = self.resolve(function)
        with self._ledger.transaction(transient=transient) as stub:
            return self._invoke(method, function, stub, mspid, args)

    def evaluate(self, function: str, *args: Any, mspid: str) -> Any:
        """Run *function* against committed state and discard any writes."""
        method = self.resolve(function)
        stub = self._ledger.begin()
        try:
            return self._invoke(method, function, stub, mspid, args)
        finally:
            self._ledger.abort(stub)

    def _invoke(
        self,
        method: Callable[..., Any],
        function: str,
        stub: IChaincodeStub,
        mspid: str,
        args: Tuple[Any, ...],
    ) -> Any:
        ctx = TransactionContext(stub=stub, client_identity=StaticClientIdentity(mspid))
        with structlog.contextvars.bound_contextvars(
            tx_id=stub.tx_id, operation=function
        ):
            try:
                result = method(ctx, *args)
            except ContractError as exc:
                logger.error(
                    "contract.failed",
                    mspid=mspid,
                    error=exc.__class__.__name__,
                    detail=str(exc),
                )
                raise
            except Exception:
                logger.exception("contract.crashed", mspid=mspid)
                raise

            if isinstance(result, Outcome):
                logger.info(
                    "contract.outcome",
                    mspid=mspid,
                    outcome=result.__class__.__name__,
                    detail=result.message,
                )
            else:
                logger.debug("contract.completed", mspid=mspid)
            return result
