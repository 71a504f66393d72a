"""Unit tests for the Product record and its state machine.

Covers:
- Status labels, including the parameterised market label.
- The transition table: allowed and rejected sources.
- ``apply`` always sets status and owner together.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from contracts.products.constants import (
    VALID_TRANSITIONS,
    ProductStatus,
    ProductTransition,
)
from contracts.products.exceptions import InvalidProductStatus
from contracts.products.models import Product

pytestmark = pytest.mark.unit


def _make_product(**overrides) -> Product:
    defaults = {
        "type": "tomato",
        "quantity": 100,
        "harvest_date": "2024-03-01",
        "origin": "Bahia",
        "status": ProductStatus.HARVESTED.value,
        "owned_by": "Farm A",
    }
    defaults.update(overrides)
    return Product(**defaults)


# ===========================================================================
# Status labels
# ===========================================================================


class TestProductStatus:
    def test_market_label_is_parameterised(self):
        label = ProductStatus.ASSIGNED_TO_MARKET.label(owner="Shop", market="Central")
        assert label == "Assigned to Shop for the market Central"

    def test_fixed_labels_ignore_arguments(self):
        assert ProductStatus.HARVESTED.label(owner="x", market="y") == "Harvested"

    @pytest.mark.parametrize(
        "label, status",
        [
            ("Harvested", ProductStatus.HARVESTED),
            ("Transferred to Wholesaler", ProductStatus.TRANSFERRED_TO_WHOLESALER),
            ("Assigned to Order", ProductStatus.ASSIGNED_TO_ORDER),
            ("Assigned to Shop for the market Central", ProductStatus.ASSIGNED_TO_MARKET),
            ("Finalized for Market Sale", ProductStatus.FINALIZED_FOR_MARKET_SALE),
        ],
    )
    def test_from_label(self, label, status):
        assert ProductStatus.from_label(label) is status

    def test_unknown_label(self):
        assert ProductStatus.from_label("Lost at sea") is None

    def test_bare_assigned_prefix_is_not_a_status(self):
        assert ProductStatus.from_label("Assigned to X") is None


class TestTransitionTable:
    def test_every_transition_has_an_entry(self):
        assert set(VALID_TRANSITIONS) == set(ProductTransition)

    def test_match_requires_transferred(self):
        sources, target = VALID_TRANSITIONS[ProductTransition.MATCH_ORDER]
        assert sources == {ProductStatus.TRANSFERRED_TO_WHOLESALER}
        assert target is ProductStatus.ASSIGNED_TO_ORDER

    def test_complete_sale_requires_an_assignment(self):
        sources, _ = VALID_TRANSITIONS[ProductTransition.COMPLETE_SALE]
        assert sources == {ProductStatus.ASSIGNED_TO_ORDER, ProductStatus.ASSIGNED_TO_MARKET}


# ===========================================================================
# apply
# ===========================================================================


class TestApply:
    def test_transfer_from_any_status(self):
        finalized = _make_product(status=ProductStatus.FINALIZED_FOR_MARKET_SALE.value)

        moved = finalized.apply(ProductTransition.TRANSFER_TO_WHOLESALER, owner="W1")

        assert moved.status == "Transferred to Wholesaler"
        assert moved.owned_by == "W1"

    def test_original_is_unchanged(self):
        product = _make_product()
        product.apply(ProductTransition.TRANSFER_TO_WHOLESALER, owner="W1")

        assert product.status == "Harvested"
        assert product.owned_by == "Farm A"

    def test_assign_to_market_builds_label(self):
        assigned = _make_product().apply(
            ProductTransition.ASSIGN_TO_MARKET, owner="Shop", market="Central"
        )

        assert assigned.status == "Assigned to Shop for the market Central"
        assert assigned.owned_by == "Shop"
        assert assigned.status_kind is ProductStatus.ASSIGNED_TO_MARKET

    def test_match_from_harvested_rejected(self):
        with pytest.raises(InvalidProductStatus):
            _make_product().apply(ProductTransition.MATCH_ORDER, owner="D1")

    def test_match_without_source_check(self):
        matched = _make_product().apply(
            ProductTransition.MATCH_ORDER, owner="D1", enforce_source=False
        )

        assert matched.status == "Assigned to Order"
        assert matched.owned_by == "D1"

    def test_complete_sale_keeps_owner_and_records_price(self):
        assigned = _make_product(status="Assigned to Order", owned_by="D1")

        sold = assigned.apply(ProductTransition.COMPLETE_SALE, sale_price=4.2)

        assert sold.status == "Finalized for Market Sale"
        assert sold.owned_by == "D1"
        assert sold.sale_price == 4.2

    @pytest.mark.parametrize(
        "status", ["Harvested", "Transferred to Wholesaler", "Finalized for Market Sale", "Assigned to X"]
    )
    def test_complete_sale_rejected_outside_assignment(self, status):
        with pytest.raises(InvalidProductStatus):
            _make_product(status=status).apply(ProductTransition.COMPLETE_SALE)


# ===========================================================================
# Persistence
# ===========================================================================


class TestRecord:
    def test_record_uses_ledger_field_names(self):
        assert _make_product().to_record() == {
            "type": "tomato",
            "quantity": 100,
            "harvestDate": "2024-03-01",
            "origin": "Bahia",
            "status": "Harvested",
            "ownedBy": "Farm A",
            "assetType": "product",
        }

    def test_sale_price_stored_once_set(self):
        record = _make_product(sale_price=9.5).to_record()
        assert record["salePrice"] == 9.5
        assert Product.from_record(record).sale_price == 9.5

    def test_frozen(self):
        with pytest.raises(ValidationError):
            _make_product().status = "Harvested"
