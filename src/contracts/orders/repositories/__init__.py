"""Order repositories package."""

from contracts.orders.repositories.interfaces import IOrderRepository
from contracts.orders.repositories.ledger_repository import OrderLedgerRepository

__all__ = ["IOrderRepository", "OrderLedgerRepository"]
