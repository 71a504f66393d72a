"""Event handlers for committed Products ledger events."""

from __future__ import annotations

import structlog

from contracts.products.events import ProductCreated
from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import ChaincodeEvent

logger = structlog.get_logger(__name__)


class ProductCreatedHandler(IEventHandler):
    def handle(self, event: ChaincodeEvent) -> None:
        payload = event.decode()
        logger.info(
            "product.event.created",
            tx_id=event.tx_id,
            product_type=payload.get("ProductType"),
        )


product_created_handler = ProductCreatedHandler()


def register_handlers(bus: IEventBus) -> None:
    bus.subscribe(ProductCreated.ledger_name, product_created_handler)
