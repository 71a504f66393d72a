"""Unit tests for Product DTOs."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from contracts.products.dtos import (
    CreateProductDTO,
    PageRequestDTO,
    ProductEntryDTO,
    ProductHistoryEntryDTO,
    ProductPageDTO,
)
from contracts.products.models import Product

pytestmark = pytest.mark.unit


def _create(**overrides):
    fields = {
        "product_id": "P1",
        "type": "tomato",
        "quantity": "100",
        "harvest_date": "2024-03-01",
        "origin": "Bahia",
        "producer_name": "Farm A",
    }
    fields.update(overrides)
    return CreateProductDTO(**fields)


class TestCreateProductDTO:
    def test_to_product_is_harvested_and_owned_by_producer(self):
        product = _create().to_product()

        assert product.quantity == 100
        assert product.status == "Harvested"
        assert product.owned_by == "Farm A"

    def test_zero_quantity_allowed(self):
        assert _create(quantity="0").quantity == 0

    @pytest.mark.parametrize("quantity", ["-1", "12kg", "", "1_000", "+5", "\u0663"])
    def test_bad_quantity(self, quantity):
        with pytest.raises(ValidationError):
            _create(quantity=quantity)

    @pytest.mark.parametrize("field", ["product_id", "type", "producer_name"])
    def test_blank_required_text(self, field):
        with pytest.raises(ValidationError):
            _create(**{field: " "})


class TestPageRequestDTO:
    def test_parses_string_size(self):
        assert PageRequestDTO(page_size="3").page_size == 3

    @pytest.mark.parametrize("page_size", ["0", "-2", "two", 0, "1_0", "+3", "\u0663"])
    def test_rejects_non_positive(self, page_size):
        with pytest.raises(ValidationError):
            PageRequestDTO(page_size=page_size)


class TestOutputDTOs:
    product = Product(
        type="tomato",
        quantity=1,
        harvest_date="2024-03-01",
        origin="Bahia",
        status="Harvested",
        owned_by="Farm A",
    )

    def test_history_entry(self):
        entry = ProductHistoryEntryDTO(
            tx_id="tx-1",
            timestamp=datetime(2024, 3, 1, tzinfo=timezone.utc),
            is_delete=False,
            record=self.product,
        )

        assert entry.to_dict() == {
            "TxId": "tx-1",
            "Timestamp": "2024-03-01T00:00:00+00:00",
            "IsDelete": False,
            "Record": self.product.to_record(),
        }

    def test_history_delete_entry_has_no_record(self):
        entry = ProductHistoryEntryDTO(
            tx_id="tx-2",
            timestamp=datetime(2024, 3, 2, tzinfo=timezone.utc),
            is_delete=True,
            record=None,
        )
        assert entry.to_dict()["Record"] is None

    def test_page(self):
        page = ProductPageDTO(
            records=[ProductEntryDTO(key="P1", record=self.product)],
            record_count=1,
            bookmark="bm",
        )

        assert page.to_dict() == {
            "Result": [{"Key": "P1", "Record": self.product.to_record()}],
            "ResponseMetaData": {"RecordCount": 1, "Bookmark": "bm"},
        }
