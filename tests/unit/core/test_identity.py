"""Unit tests for the identity guard and informational outcomes."""

from __future__ import annotations

import logging

import pytest

from contracts.core.identity import Affiliation, IdentityGuard
from contracts.core.outcomes import Denied, Matched, NoMatch, present

pytestmark = pytest.mark.unit


@pytest.fixture()
def guard():
    return IdentityGuard()


class TestAffiliation:
    @pytest.mark.parametrize(
        "mspid, affiliation",
        [
            ("manufacturerMSP", Affiliation.MANUFACTURER),
            ("distributerMSP", Affiliation.DISTRIBUTER),
            ("wholesalerMSP", Affiliation.WHOLESALER),
            ("marketMSP", Affiliation.MARKET),
        ],
    )
    def test_known_msps(self, guard, mspid, affiliation):
        assert guard.affiliation_of(mspid) is affiliation

    def test_unknown_msp(self, guard):
        assert guard.affiliation_of("auditorMSP") is None

    def test_custom_mapping(self):
        guard = IdentityGuard({"market": "Org4MSP"})
        assert guard.affiliation_of("Org4MSP") is Affiliation.MARKET
        assert guard.affiliation_of("marketMSP") is None


class TestAuthorize:
    def test_allowed_returns_none(self, guard):
        assert guard.authorize("distributerMSP", Affiliation.DISTRIBUTER, "createOrder") is None

    def test_other_affiliation_denied(self, guard):
        denied = guard.authorize("marketMSP", Affiliation.DISTRIBUTER, "createOrder")

        assert isinstance(denied, Denied)
        assert denied.message == "Organization with MSP ID marketMSP cannot perform createOrder"
        assert denied.required == "distributer"
        assert denied.operation == "createOrder"

    def test_unknown_msp_denied(self, guard):
        denied = guard.authorize("auditorMSP", Affiliation.MARKET, "completeProductSaleAtMarket")
        assert denied is not None
        assert denied.mspid == "auditorMSP"

    def test_denial_is_logged(self, guard, caplog):
        with caplog.at_level(logging.WARNING):
            guard.authorize("marketMSP", Affiliation.MANUFACTURER, "createProduct")

        assert any("identity.denied" in r.getMessage() for r in caplog.records)


class TestOutcomes:
    def test_str_is_message(self):
        outcome = NoMatch(message="no", product_id="P1", order_id="O1")
        assert str(outcome) == "no"

    def test_to_dict_names_the_outcome(self):
        outcome = Matched(message="ok", product_id="P1", order_id="O1", owner="D1")
        assert outcome.to_dict() == {
            "outcome": "Matched",
            "message": "ok",
            "product_id": "P1",
            "order_id": "O1",
            "owner": "D1",
        }

    def test_present_passes_outcomes_through(self):
        outcome = NoMatch(message="no", product_id="P1", order_id="O1")
        assert present(outcome) is outcome
        assert present(None) is None
