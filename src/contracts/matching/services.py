"""Matching Engine.

Pairs an Order with a Product and performs the coupled mutation: the
product is reassigned to the order's distributer, then the order is
consumed.  Both writes are staged in the same ledger transaction and
commit or abort together; there is no compensating rollback here.

Business mismatch is an informational ``NoMatch`` result.  Missing
records and status violations are fatal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Union

import structlog

from contracts.core.identity import Affiliation, IdentityGuard
from contracts.core.outcomes import Denied, Matched, NoMatch
from contracts.matching.policies import MatchPolicy
from contracts.orders.exceptions import OrderNotFound
from contracts.products.constants import ProductTransition
from contracts.products.exceptions import InvalidProductStatus, ProductNotFound

if TYPE_CHECKING:
    from contracts.orders.models import Order
    from contracts.products.models import Product
    from contracts.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

NO_MATCH_MESSAGE = "Order does not match the product specifications"


class IOrderBook(Protocol):
    """Order capability the engine needs; provided by the Order Lifecycle."""

    def order_exists(self, order_id: str) -> bool: ...

    def read_order(self, order_id: str) -> Order: ...

    def consume_order(self, order_id: str) -> None: ...


def is_compatible(order: Order, product: Product) -> bool:
    """Same type, and the product holds at least the ordered quantity."""
    return order.type == product.type and order.quantity <= product.quantity


class MatchingEngine:
    def __init__(
        self,
        products: IProductRepository,
        orders: IOrderBook,
        guard: Optional[IdentityGuard] = None,
        policy: Optional[MatchPolicy] = None,
    ) -> None:
        self._products = products
        self._orders = orders
        self._guard = guard or IdentityGuard()
        self.policy = policy or MatchPolicy.from_settings()

    def match(
        self, mspid: str, product_id: str, order_id: str
    ) -> Union[Matched, NoMatch, Denied]:
        """Match *order_id* against *product_id*.

        Raises:
            ProductNotFound: the product does not exist.
            OrderNotFound: the order does not exist.
            InvalidProductStatus: the policy requires "Transferred to
                Wholesaler" and the product is elsewhere in its chain.
        """
        if self.policy.requires_authorization:
            denied = self._guard.authorize(mspid, Affiliation.WHOLESALER, "matchOrder")
            if denied is not None:
                return denied

        log = logger.bind(
            product_id=product_id, order_id=order_id, policy=self.policy.value
        )

        if not self._products.exists(product_id):
            raise ProductNotFound(f"The product {product_id} does not exist")
        if not self._orders.order_exists(order_id):
            raise OrderNotFound(f"The order {order_id} does not exist")

        product = self._products.get_by_id(product_id)
        if product is None:
            raise ProductNotFound(f"The product {product_id} does not exist")

        if self.policy.enforces_status and not product.can_apply(
            ProductTransition.MATCH_ORDER
        ):
            log.warning("match.invalid_status", status=product.status)
            raise InvalidProductStatus(
                f"The product {product_id} must be 'Transferred to Wholesaler' "
                f"to be matched, found '{product.status}'."
            )

        order = self._orders.read_order(order_id)
        if not is_compatible(order, product):
            log.info(
                "match.rejected",
                order_type=order.type,
                product_type=product.type,
                order_quantity=order.quantity,
                product_quantity=product.quantity,
            )
            return NoMatch(
                message=NO_MATCH_MESSAGE, product_id=product_id, order_id=order_id
            )

        assigned = product.apply(
            ProductTransition.MATCH_ORDER,
            owner=order.distributer_name,
            enforce_source=self.policy.enforces_status,
        )
        self._products.save(product_id, assigned)
        self._orders.consume_order(order_id)

        log.info("match.completed")
        return Matched(
            message=f"Product {product_id} is assigned to {order.distributer_name}",
            product_id=product_id,
            order_id=order_id,
            owner=order.distributer_name,
        )
