"""Unit tests for Order DTOs and the Order record.

Covers:
- OrderTransientDTO: byte decoding, strict numeric parsing, required keys.
- OrderEntryDTO: ledger-facing shape.
- Order: frozen immutability, record round trip through aliases.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from contracts.orders.dtos import OrderEntryDTO, OrderTransientDTO
from contracts.orders.exceptions import MissingTransientData
from contracts.orders.models import Order

pytestmark = pytest.mark.unit


# ===========================================================================
# OrderTransientDTO
# ===========================================================================


class TestOrderTransientDTOValid:
    def test_bytes_are_decoded_and_parsed(self, order_transient):
        dto = OrderTransientDTO.from_transient(order_transient())

        assert dto.type == "tomato"
        assert dto.quantity == 10
        assert dto.price == 2.5
        assert dto.distributer_name == "D1"

    def test_to_order(self, order_transient):
        order = OrderTransientDTO.from_transient(order_transient(price="0")).to_order()

        assert order.to_record() == {
            "type": "tomato",
            "quantity": 10,
            "price": 0.0,
            "distributerName": "D1",
            "assetType": "order",
        }

    def test_surrounding_whitespace_in_numbers_accepted(self, order_transient):
        dto = OrderTransientDTO.from_transient(order_transient(quantity=" 7 "))
        assert dto.quantity == 7

    def test_extra_transient_keys_ignored(self, order_transient):
        transient = order_transient()
        transient["note"] = b"fragile"

        assert OrderTransientDTO.from_transient(transient).quantity == 10


class TestOrderTransientDTOInvalid:
    @pytest.mark.parametrize("quantity", ["0", "-1", "1.5", "ten", "", "1_000", "+5", "\u0663"])
    def test_bad_quantity(self, order_transient, quantity):
        with pytest.raises(ValidationError):
            OrderTransientDTO.from_transient(order_transient(quantity=quantity))

    @pytest.mark.parametrize("price", ["-0.01", "abc", "nan", "inf", ""])
    def test_bad_price(self, order_transient, price):
        with pytest.raises(ValidationError):
            OrderTransientDTO.from_transient(order_transient(price=price))

    @pytest.mark.parametrize("field", ["type", "distributerName"])
    def test_blank_text(self, order_transient, field):
        with pytest.raises(ValidationError):
            OrderTransientDTO.from_transient(order_transient(**{field: "  "}))

    def test_missing_keys_listed(self, order_transient):
        transient = order_transient()
        del transient["price"]
        del transient["type"]

        with pytest.raises(MissingTransientData, match="type, price"):
            OrderTransientDTO.from_transient(transient)

    def test_frozen(self, order_transient):
        dto = OrderTransientDTO.from_transient(order_transient())
        with pytest.raises(ValidationError):
            dto.quantity = 99


# ===========================================================================
# Output
# ===========================================================================


class TestOrderEntryDTO:
    def test_to_dict(self):
        order = Order(type="corn", quantity=1, price=1.0, distributer_name="D2")

        assert OrderEntryDTO(key="O1", record=order).to_dict() == {
            "Key": "O1",
            "Record": order.to_record(),
        }


class TestOrderModel:
    def test_from_record_uses_aliases(self):
        record = {
            "type": "corn",
            "quantity": 4,
            "price": 1.25,
            "distributerName": "D2",
            "assetType": "order",
        }

        order = Order.from_record(record)

        assert order.distributer_name == "D2"
        assert order.to_record() == record

    def test_wrong_asset_type_rejected(self):
        with pytest.raises(ValidationError):
            Order.from_record(
                {"type": "corn", "quantity": 1, "price": 1, "distributerName": "D", "assetType": "product"}
            )
