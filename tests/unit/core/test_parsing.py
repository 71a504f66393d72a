"""Unit tests for strict integer parsing and redacted validation messages."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError, field_validator

from contracts.core.exceptions import describe_invalid_fields
from contracts.core.parsing import parse_int

pytestmark = pytest.mark.unit


class TestParseInt:
    @pytest.mark.parametrize("text, expected", [("7", 7), (" 7 ", 7), ("-3", -3), ("007", 7)])
    def test_accepts_plain_decimal(self, text, expected):
        assert parse_int(text) == expected

    @pytest.mark.parametrize("text", ["", "1_000", "+5", "\u0663", "1.0", "0x10", "1e3"])
    def test_rejects_everything_else(self, text):
        with pytest.raises(ValueError):
            parse_int(text)


class _Priced(BaseModel):
    price: float

    @field_validator("price")
    @classmethod
    def non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Price must not be negative.")
        return v


class TestDescribeInvalidFields:
    def test_names_field_and_kind_without_value(self):
        with pytest.raises(ValidationError) as excinfo:
            _Priced(price=-1234.5)

        message = describe_invalid_fields(excinfo.value)

        assert message == "price (value_error)"
        assert "1234.5" not in message

    def test_unparseable_input_not_echoed(self):
        with pytest.raises(ValidationError) as excinfo:
            _Priced(price="secret-price")

        message = describe_invalid_fields(excinfo.value)

        assert message.startswith("price (")
        assert "secret-price" not in message
