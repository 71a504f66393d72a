import pytest

import config.settings  # noqa: F401  (configures structlog)
from contracts.core.dispatcher import ContractDispatcher
from shared.infrastructure.ledger import InMemoryLedger


@pytest.fixture()
def ledger():
    """Fresh in-memory ledger with its own event bus."""
    return InMemoryLedger()


@pytest.fixture()
def dispatcher(ledger):
    """Dispatcher exposing the Order and Product contracts."""
    return ContractDispatcher(ledger)


@pytest.fixture()
def order_transient():
    """Factory for the transient map of ``createOrder``."""

    def _make(**overrides):
        fields = {
            "type": "tomato",
            "quantity": "10",
            "price": "2.5",
            "distributerName": "D1",
        }
        fields.update(overrides)
        return {
            name: value.encode("utf-8") if isinstance(value, str) else value
            for name, value in fields.items()
        }

    return _make
