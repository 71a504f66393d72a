"""Product service layer (Use Cases).

Orchestrates the Product custody chain in the shared partition:

    Harvested -> Transferred to Wholesaler
              -> Assigned to Order | Assigned to <owner> for the market <market>
              -> Finalized for Market Sale

Rules enforced:
- Each mutation requires exactly one affiliation; a denial is returned
  before any ledger read.
- Create refuses to overwrite an existing product.
- Transitions go through ``Product.apply`` and ``VALID_TRANSITIONS``;
  status and owner always change together.
- The creation notification is best-effort: the state write stands even
  if emitting the event fails.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Optional, Union

import structlog
from pydantic import ValidationError

from contracts.core.exceptions import describe_invalid_fields
from contracts.core.identity import Affiliation, IdentityGuard
from contracts.core.outcomes import Denied, Matched, NoMatch
from contracts.matching.policies import MatchPolicy
from contracts.matching.services import MatchingEngine
from contracts.products.constants import ProductTransition
from contracts.products.dtos import (
    CreateProductDTO,
    PageRequestDTO,
    ProductEntryDTO,
    ProductHistoryEntryDTO,
    ProductPageDTO,
)
from contracts.products.events import ProductCreated
from contracts.products.exceptions import (
    InvalidPageSize,
    InvalidProductData,
    ProductAlreadyExists,
    ProductNotFound,
)

if TYPE_CHECKING:
    from contracts.matching.services import IOrderBook
    from contracts.products.models import Product
    from contracts.products.repositories.interfaces import IProductRepository
    from shared.domain.bus import IEventEmitter

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives the repository, the order capability used for matching and
    the event emitter via constructor injection.
    """

    def __init__(
        self,
        repository: IProductRepository,
        orders: IOrderBook,
        emitter: IEventEmitter,
        guard: Optional[IdentityGuard] = None,
        match_policy: Optional[MatchPolicy] = None,
    ) -> None:
        self._repo = repository
        self._emitter = emitter
        self._guard = guard or IdentityGuard()
        self._matching = MatchingEngine(
            products=repository,
            orders=orders,
            guard=self._guard,
            policy=match_policy,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(
        self,
        mspid: str,
        product_id: str,
        type: str,
        quantity: Union[int, str],
        harvest_date: str,
        origin: str,
        producer_name: str,
    ) -> Union[Product, Denied]:
        """Register a harvested product owned by its producer.

        Raises:
            ProductAlreadyExists: a product already occupies *product_id*.
            InvalidProductData: the arguments failed to validate.
        """
        denied = self._guard.authorize(
            mspid, Affiliation.MANUFACTURER, "createProduct"
        )
        if denied is not None:
            return denied

        log = logger.bind(product_id=product_id)

        if self._repo.exists(product_id):
            log.warning("product.duplicate_id")
            raise ProductAlreadyExists(f"The product {product_id} already exists")

        try:
            dto = CreateProductDTO(
                product_id=product_id,
                type=type,
                quantity=quantity,
                harvest_date=harvest_date,
                origin=origin,
                producer_name=producer_name,
            )
        except ValidationError as exc:
            log.warning("product.invalid_data", errors=exc.error_count())
            raise InvalidProductData(
                f"Invalid product data for {product_id}: {describe_invalid_fields(exc)}"
            ) from exc

        product = self._repo.save(product_id, dto.to_product())
        log.info("product.created", product_type=product.type, owner=product.owned_by)
        self._on_product_created(product_id, product)
        return product

    def delete_product(self, mspid: str, product_id: str) -> Optional[Denied]:
        """Delete a product regardless of where it is in its chain.

        Raises:
            ProductNotFound: the product does not exist.
        """
        denied = self._guard.authorize(
            mspid, Affiliation.MANUFACTURER, "deleteProduct"
        )
        if denied is not None:
            return denied

        self._require(product_id)
        self._repo.delete(product_id)
        logger.info("product.removed", product_id=product_id)
        return None

    def transfer_to_wholesaler(
        self, mspid: str, product_id: str, wholesaler_name: str
    ) -> Union[Product, Denied]:
        """Hand the product over to a wholesaler, from any prior status.

        Raises:
            ProductNotFound: the product does not exist.
        """
        denied = self._guard.authorize(
            mspid, Affiliation.MANUFACTURER, "transferToWholesaler"
        )
        if denied is not None:
            return denied

        product = self._load(product_id)
        updated = product.apply(
            ProductTransition.TRANSFER_TO_WHOLESALER, owner=wholesaler_name
        )
        self._repo.save(product_id, updated)
        logger.info(
            "product.transferred",
            product_id=product_id,
            old_status=product.status,
            owner=wholesaler_name,
        )
        return updated

    def assign_product_to_market(
        self, mspid: str, product_id: str, owner_name: str, market_name: str
    ) -> Union[Product, Denied]:
        """Assign the product to an owner for a named market.

        Raises:
            ProductNotFound: the product does not exist.
        """
        denied = self._guard.authorize(
            mspid, Affiliation.DISTRIBUTER, "assignProductToMarket"
        )
        if denied is not None:
            return denied

        product = self._load(product_id)
        updated = product.apply(
            ProductTransition.ASSIGN_TO_MARKET, owner=owner_name, market=market_name
        )
        self._repo.save(product_id, updated)
        logger.info(
            "product.assigned_to_market",
            product_id=product_id,
            owner=owner_name,
            market=market_name,
        )
        return updated

    def complete_product_sale_at_market(
        self, mspid: str, product_id: str, sale_price: Union[float, str]
    ) -> Union[Product, Denied]:
        """Finalize an assigned product for market sale.

        Raises:
            ProductNotFound: the product does not exist.
            InvalidProductStatus: the product is not "Assigned to Order" or
                "Assigned to <owner> for the market <market>".  Any other
                label starting with "Assigned to" is rejected as well.
            InvalidProductData: *sale_price* is not a finite non-negative number.
        """
        denied = self._guard.authorize(
            mspid, Affiliation.MARKET, "completeProductSaleAtMarket"
        )
        if denied is not None:
            return denied

        product = self._load(product_id)
        price = _parse_sale_price(product_id, sale_price)
        updated = product.apply(ProductTransition.COMPLETE_SALE, sale_price=price)
        self._repo.save(product_id, updated)
        logger.info("product.sale_completed", product_id=product_id, sale_price=price)
        return updated

    def match_order(
        self, mspid: str, product_id: str, order_id: str
    ) -> Union[Matched, NoMatch, Denied]:
        """Assign the product to an order's distributer; see ``MatchingEngine``."""
        return self._matching.match(mspid, product_id, order_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def product_exists(self, product_id: str) -> bool:
        return self._repo.exists(product_id)

    def read_product(self, product_id: str) -> Product:
        """Retrieve a single product.

        Raises:
            ProductNotFound: the product does not exist.
        """
        return self._load(product_id)

    def query_all_products(self) -> List[ProductEntryDTO]:
        return [
            ProductEntryDTO(key=key, record=product)
            for key, product in self._repo.list()
        ]

    def get_product_history(self, product_id: str) -> List[ProductHistoryEntryDTO]:
        return [
            ProductHistoryEntryDTO(
                tx_id=tx_id, timestamp=timestamp, is_delete=is_delete, record=record
            )
            for tx_id, timestamp, is_delete, record in self._repo.history(product_id)
        ]

    def get_products_with_pagination(
        self, page_size: Union[int, str], bookmark: str = ""
    ) -> ProductPageDTO:
        """Return one page of products and the bookmark for the next one.

        Raises:
            InvalidPageSize: *page_size* is not a positive integer.
        """
        try:
            request = PageRequestDTO(page_size=page_size, bookmark=bookmark or "")
        except ValidationError as exc:
            raise InvalidPageSize(f"Invalid page size {page_size!r}.") from exc

        products, count, next_bookmark = self._repo.page(
            request.page_size, request.bookmark
        )
        return ProductPageDTO(
            records=[ProductEntryDTO(key=key, record=p) for key, p in products],
            record_count=count,
            bookmark=next_bookmark,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, product_id: str) -> None:
        if not self._repo.exists(product_id):
            logger.warning("product.not_found", product_id=product_id)
            raise ProductNotFound(f"The product {product_id} does not exist")

    def _load(self, product_id: str) -> Product:
        self._require(product_id)
        product = self._repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFound(f"The product {product_id} does not exist")
        return product

    def _on_product_created(self, product_id: str, product: Product) -> None:
        """Hook: notify subscribers once the product is written."""
        try:
            self._emitter.emit(
                ProductCreated(aggregate_id=product_id, product_type=product.type)
            )
        except Exception:
            logger.exception("product.event.emit_failed", product_id=product_id)


def _parse_sale_price(product_id: str, value: Union[float, str]) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidProductData(
            f"Invalid sale price {value!r} for {product_id}."
        ) from exc
    if not math.isfinite(price) or price < 0:
        raise InvalidProductData(f"Invalid sale price {value!r} for {product_id}.")
    return price
