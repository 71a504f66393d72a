"""Product contract: binds the Product service to a ledger context.

``matchOrder`` hands the Order service of the same context to the
Matching Engine, so both writes land in one transaction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from contracts.core.context import TransactionContext
from contracts.core.identity import IdentityGuard
from contracts.core.outcomes import present
from contracts.core.repositories.ledger_store import SharedStateStore
from contracts.matching.policies import MatchPolicy
from contracts.orders.contract import build_order_service
from contracts.products.repositories import ProductLedgerRepository
from contracts.products.services import ProductService
from shared.infrastructure.bus import LedgerEventEmitter


class ProductContract:
    name = "ProductContract"

    OPERATIONS = {
        "productExists": "product_exists",
        "createProduct": "create_product",
        "readProduct": "read_product",
        "deleteProduct": "delete_product",
        "transferToWholesaler": "transfer_to_wholesaler",
        "assignProductToMarket": "assign_product_to_market",
        "completeProductSaleAtMarket": "complete_product_sale_at_market",
        "matchOrder": "match_order",
        "queryAllProducts": "query_all_products",
        "getProductHistory": "get_product_history",
        "getProductsWithPagination": "get_products_with_pagination",
    }

    def __init__(
        self,
        guard: Optional[IdentityGuard] = None,
        match_policy: Optional[MatchPolicy] = None,
    ) -> None:
        self._guard = guard or IdentityGuard()
        self._match_policy = match_policy

    def service(self, ctx: TransactionContext) -> ProductService:
        return ProductService(
            repository=ProductLedgerRepository(SharedStateStore(ctx.stub)),
            orders=build_order_service(ctx, self._guard),
            emitter=LedgerEventEmitter(ctx.stub),
            guard=self._guard,
            match_policy=self._match_policy,
        )

    def product_exists(self, ctx: TransactionContext, product_id: str) -> bool:
        return self.service(ctx).product_exists(product_id)

    def create_product(
        self,
        ctx: TransactionContext,
        product_id: str,
        type: str,
        quantity: Union[int, str],
        harvest_date: str,
        origin: str,
        producer_name: str,
    ) -> Any:
        result = self.service(ctx).create_product(
            ctx.mspid, product_id, type, quantity, harvest_date, origin, producer_name
        )
        return present(result)

    def read_product(self, ctx: TransactionContext, product_id: str) -> Dict[str, Any]:
        return self.service(ctx).read_product(product_id).to_record()

    def delete_product(self, ctx: TransactionContext, product_id: str) -> Any:
        return self.service(ctx).delete_product(ctx.mspid, product_id)

    def transfer_to_wholesaler(
        self, ctx: TransactionContext, product_id: str, wholesaler_name: str
    ) -> Any:
        result = self.service(ctx).transfer_to_wholesaler(
            ctx.mspid, product_id, wholesaler_name
        )
        return present(result)

    def assign_product_to_market(
        self,
        ctx: TransactionContext,
        product_id: str,
        owner_name: str,
        market_name: str,
    ) -> Any:
        result = self.service(ctx).assign_product_to_market(
            ctx.mspid, product_id, owner_name, market_name
        )
        return present(result)

    def complete_product_sale_at_market(
        self, ctx: TransactionContext, product_id: str, sale_price: Union[float, str]
    ) -> Any:
        result = self.service(ctx).complete_product_sale_at_market(
            ctx.mspid, product_id, sale_price
        )
        return present(result)

    def match_order(self, ctx: TransactionContext, product_id: str, order_id: str) -> Any:
        return self.service(ctx).match_order(ctx.mspid, product_id, order_id)

    def query_all_products(self, ctx: TransactionContext) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self.service(ctx).query_all_products()]

    def get_product_history(
        self, ctx: TransactionContext, product_id: str
    ) -> List[Dict[str, Any]]:
        return [
            entry.to_dict() for entry in self.service(ctx).get_product_history(product_id)
        ]

    def get_products_with_pagination(
        self, ctx: TransactionContext, page_size: Union[int, str], bookmark: str = ""
    ) -> Dict[str, Any]:
        page = self.service(ctx).get_products_with_pagination(page_size, bookmark)
        return page.to_dict()
