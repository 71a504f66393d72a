"""Product repositories package."""

from contracts.products.repositories.interfaces import IProductRepository
from contracts.products.repositories.ledger_repository import ProductLedgerRepository

__all__ = ["IProductRepository", "ProductLedgerRepository"]
