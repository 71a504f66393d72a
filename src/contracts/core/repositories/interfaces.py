"""Record store and generic repository interfaces (Dependency Inversion Principle).

``IRecordStore`` is the uniform contract over the two ledger partitions:
the shared world state and a restricted private data collection.
``IRepository[T]`` is the base every aggregate repository extends;
aggregate repositories sit on a record store and never call the
chaincode stub directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Generic, List, Mapping, NamedTuple, Optional, Tuple, TypeVar

Document = Dict[str, Any]

T = TypeVar("T")


class StoredRecord(NamedTuple):
    key: str
    record: Document


class HistoryEntry(NamedTuple):
    tx_id: str
    timestamp: datetime
    is_delete: bool
    record: Optional[Document]


class RecordPage(NamedTuple):
    records: List[StoredRecord]
    bookmark: str
    fetched_count: int


class IRecordStore(ABC):
    """Base record store contract for one partition.

    Partitions that cannot serve a query raise
    ``UnsupportedPartitionOperation``.
    """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return ``True`` iff a non-empty record is stored at *key*."""

    @abstractmethod
    def get(self, key: str) -> Document:
        """Return the record at *key*; raise ``RecordNotFound`` if absent."""

    @abstractmethod
    def put(self, key: str, record: Mapping[str, Any]) -> None:
        """Stage a write of *record* at *key*."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Stage the removal of *key*."""

    @abstractmethod
    def range_query(self, start_key: str, end_key: str) -> List[StoredRecord]:
        """Records with ``start_key <= key < end_key``, in key order."""

    @abstractmethod
    def rich_query(self, selector: Mapping[str, Any]) -> List[StoredRecord]:
        """Records matching a CouchDB-style selector."""

    @abstractmethod
    def history_query(self, key: str) -> List[HistoryEntry]:
        """Every committed mutation of *key*, newest first."""

    @abstractmethod
    def paged_query(
        self, selector: Mapping[str, Any], page_size: int, bookmark: str = ""
    ) -> RecordPage:
        """One page of records matching *selector*, resumable by bookmark."""


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the record model managed by the
    repository (e.g. ``Order``, ``Product``).
    """

    @abstractmethod
    def exists(self, id: str) -> bool:
        """Return ``True`` if a record is stored under *id*."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve a record by key, ``None`` if absent."""

    @abstractmethod
    def save(self, id: str, entity: T) -> T:
        """Persist (create or replace) a record."""

    @abstractmethod
    def delete(self, id: str) -> None:
        """Remove a record by key."""

    @abstractmethod
    def list(self) -> List[Tuple[str, T]]:
        """All records of this kind, as ``(key, record)`` pairs."""
