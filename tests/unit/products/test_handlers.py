"""Unit tests for Products event handlers and the creation event."""

from __future__ import annotations

import json
import logging

import pytest

from contracts.products.events import ProductCreated
from contracts.products.handlers import (
    ProductCreatedHandler,
    product_created_handler,
    register_handlers,
)
from shared.domain.events import ChaincodeEvent
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


def _delivered(product_type="tomato") -> ChaincodeEvent:
    payload = ProductCreated(aggregate_id="P1", product_type=product_type).encode()
    return ChaincodeEvent(tx_id="tx-1", event_name="addProductEvent", payload=payload)


def test_product_created_payload():
    event = ProductCreated(aggregate_id="P1", product_type="corn")

    assert event.ledger_name == "addProductEvent"
    assert event.event_name == "ProductCreated"
    assert json.loads(event.encode()) == {"Type": "Product creation", "ProductType": "corn"}


def test_product_created_handler_logs(caplog):
    with caplog.at_level(logging.INFO):
        ProductCreatedHandler().handle(_delivered())

    assert any("product.event.created" in r.getMessage() for r in caplog.records)


def test_register_handlers_subscribes_singleton(caplog):
    bus = InMemoryEventBus()
    register_handlers(bus)
    register_handlers(bus)

    with caplog.at_level(logging.INFO):
        bus.publish(_delivered("corn"))

    messages = [r.getMessage() for r in caplog.records if "product.event.created" in r.getMessage()]
    assert len(messages) == 1
    assert "corn" in messages[0]
    assert isinstance(product_created_handler, ProductCreatedHandler)
