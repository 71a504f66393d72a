"""Order contract: binds the Order service to a ledger context.

Each method receives the ``TransactionContext`` of the current
invocation, builds the service over that context's stub and translates
the result into its ledger-facing shape.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from config import settings
from contracts.core.context import TransactionContext
from contracts.core.identity import IdentityGuard
from contracts.core.outcomes import Denied
from contracts.core.repositories.ledger_store import PrivateCollectionStore
from contracts.orders.repositories import OrderLedgerRepository
from contracts.orders.services import OrderService


def build_order_service(
    ctx: TransactionContext, guard: Optional[IdentityGuard] = None
) -> OrderService:
    store = PrivateCollectionStore(ctx.stub, settings.ORDER_COLLECTION_NAME)
    return OrderService(OrderLedgerRepository(store), guard=guard)


class OrderContract:
    name = "OrderContract"

    OPERATIONS = {
        "orderExists": "order_exists",
        "createOrder": "create_order",
        "readOrder": "read_order",
        "deleteOrder": "delete_order",
        "queryAllOrders": "query_all_orders",
        "getOrdersByRange": "get_orders_by_range",
    }

    def __init__(self, guard: Optional[IdentityGuard] = None) -> None:
        self._guard = guard or IdentityGuard()

    def service(self, ctx: TransactionContext) -> OrderService:
        return build_order_service(ctx, self._guard)

    def order_exists(self, ctx: TransactionContext, order_id: str) -> bool:
        return self.service(ctx).order_exists(order_id)

    def create_order(self, ctx: TransactionContext, order_id: str) -> Optional[Denied]:
        """Create an order; the private record is never echoed back."""
        result = self.service(ctx).create_order(
            ctx.mspid, order_id, ctx.stub.get_transient()
        )
        return result if isinstance(result, Denied) else None

    def read_order(self, ctx: TransactionContext, order_id: str) -> Dict[str, Any]:
        return self.service(ctx).read_order(order_id).to_record()

    def delete_order(self, ctx: TransactionContext, order_id: str) -> Any:
        return self.service(ctx).delete_order(ctx.mspid, order_id)

    def query_all_orders(self, ctx: TransactionContext) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.service(ctx).query_all_orders()]

    def get_orders_by_range(
        self, ctx: TransactionContext, start_key: str, end_key: str
    ) -> List[Dict[str, Any]]:
        entries = self.service(ctx).get_orders_by_range(start_key, end_key)
        return [entry.to_dict() for entry in entries]
