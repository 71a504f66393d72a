"""Order service layer (Use Cases).

Orchestrates the Order lifecycle in the restricted partition.  Orders
are created and deleted by distributers only; there is no update.

Rules enforced:
- Mutations require the distributer affiliation.  A denial is returned,
  not raised, and happens before any ledger read.
- Create refuses to overwrite an existing order.
- All four transient fields are required and parsed strictly; nothing is
  written unless every one of them validates.
- Read/delete fail when the order is absent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from contracts.core.exceptions import describe_invalid_fields
from contracts.core.identity import Affiliation, IdentityGuard
from contracts.core.outcomes import Denied
from contracts.orders.dtos import OrderEntryDTO, OrderTransientDTO
from contracts.orders.exceptions import InvalidOrderData, OrderAlreadyExists, OrderNotFound

if TYPE_CHECKING:
    from contracts.orders.models import Order
    from contracts.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives the repository and identity guard via constructor injection.
    Also satisfies ``contracts.matching.services.IOrderBook`` so the
    Matching Engine can consume matched orders.
    """

    def __init__(
        self,
        repository: IOrderRepository,
        guard: Optional[IdentityGuard] = None,
    ) -> None:
        self._repo = repository
        self._guard = guard or IdentityGuard()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self, mspid: str, order_id: str, transient: Mapping[str, bytes]
    ) -> Union[Order, Denied]:
        """Create an order from the transient fields.

        Raises:
            OrderAlreadyExists: an order already occupies *order_id*.
            MissingTransientData: a required transient field is absent.
            InvalidOrderData: a transient field failed to parse/validate.
        """
        denied = self._guard.authorize(mspid, Affiliation.DISTRIBUTER, "createOrder")
        if denied is not None:
            return denied

        log = logger.bind(order_id=order_id)

        if self._repo.exists(order_id):
            log.warning("order.duplicate_id")
            raise OrderAlreadyExists(f"The order {order_id} already exists")

        try:
            dto = OrderTransientDTO.from_transient(transient)
        except ValidationError as exc:
            log.warning("order.invalid_transient", errors=exc.error_count())
            raise InvalidOrderData(
                f"Invalid order data for {order_id}: {describe_invalid_fields(exc)}"
            ) from exc

        order = self._repo.save(order_id, dto.to_order())
        log.info("order.created", order_type=order.type, quantity=order.quantity)
        return order

    def delete_order(self, mspid: str, order_id: str) -> Optional[Denied]:
        """Delete an order on behalf of a distributer.

        Raises:
            OrderNotFound: no order is stored under *order_id*.
        """
        denied = self._guard.authorize(mspid, Affiliation.DISTRIBUTER, "deleteOrder")
        if denied is not None:
            return denied

        self._require(order_id)
        self._repo.delete(order_id)
        logger.info("order.removed", order_id=order_id)
        return None

    def consume_order(self, order_id: str) -> None:
        """Remove an order that a match has just fulfilled.

        No affiliation check: the match operation was authorized already.

        Raises:
            OrderNotFound: no order is stored under *order_id*.
        """
        self._require(order_id)
        self._repo.delete(order_id)
        logger.info("order.consumed", order_id=order_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def order_exists(self, order_id: str) -> bool:
        return self._repo.exists(order_id)

    def read_order(self, order_id: str) -> Order:
        """Retrieve a single order.

        Raises:
            OrderNotFound: the order does not exist or is not readable.
        """
        self._require(order_id)
        order = self._repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"The order {order_id} does not exist")
        return order

    def query_all_orders(self) -> List[OrderEntryDTO]:
        return [OrderEntryDTO(key=key, record=order) for key, order in self._repo.list()]

    def get_orders_by_range(self, start_key: str, end_key: str) -> List[OrderEntryDTO]:
        return [
            OrderEntryDTO(key=key, record=order)
            for key, order in self._repo.list_by_range(start_key, end_key)
        ]

    def _require(self, order_id: str) -> None:
        if not self._repo.exists(order_id):
            logger.warning("order.not_found", order_id=order_id)
            raise OrderNotFound(f"The order {order_id} does not exist")
