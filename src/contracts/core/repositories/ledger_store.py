"""Ledger-backed implementations of ``IRecordStore``.

Records are JSON documents stored as UTF-8 bytes.  Every iterator-backed
query drains its cursor inside ``contextlib.closing`` so the server-side
cursor is released on every exit path, including a record that fails to
decode halfway through.
"""

from __future__ import annotations

import json
from contextlib import closing
from typing import Any, List, Mapping

import structlog

from contracts.core.exceptions import RecordNotFound, UnsupportedPartitionOperation
from contracts.core.repositories.interfaces import (
    Document,
    HistoryEntry,
    IRecordStore,
    RecordPage,
    StoredRecord,
)
from shared.domain.ledger import KV, IChaincodeStub, IResultIterator, KeyModification

logger = structlog.get_logger(__name__)


def encode(record: Mapping[str, Any]) -> bytes:
    return json.dumps(record, sort_keys=True).encode("utf-8")


def decode(value: bytes) -> Document:
    return json.loads(value.decode("utf-8"))


def drain_records(iterator: IResultIterator[KV]) -> List[StoredRecord]:
    """Consume *iterator* fully, skipping empty values, and close it."""
    with closing(iterator):
        return [StoredRecord(kv.key, decode(kv.value)) for kv in iterator if kv.value]


def drain_history(iterator: IResultIterator[KeyModification]) -> List[HistoryEntry]:
    with closing(iterator):
        return [
            HistoryEntry(
                tx_id=mod.tx_id,
                timestamp=mod.timestamp,
                is_delete=mod.is_delete,
                record=None if mod.is_delete or not mod.value else decode(mod.value),
            )
            for mod in iterator
        ]


def build_query(selector: Mapping[str, Any]) -> str:
    return json.dumps({"selector": dict(selector)})


class SharedStateStore(IRecordStore):
    """Shared partition: the world state visible to every member."""

    partition = "shared"

    def __init__(self, stub: IChaincodeStub) -> None:
        self._stub = stub

    def exists(self, key: str) -> bool:
        value = self._stub.get_state(key)
        return bool(value) and len(value) > 0

    def get(self, key: str) -> Document:
        value = self._stub.get_state(key)
        if not value:
            raise RecordNotFound(f"No record stored at {key}.")
        return decode(value)

    def put(self, key: str, record: Mapping[str, Any]) -> None:
        self._stub.put_state(key, encode(record))
        logger.debug("store.put", partition=self.partition, key=key)

    def delete(self, key: str) -> None:
        self._stub.del_state(key)
        logger.debug("store.delete", partition=self.partition, key=key)

    def range_query(self, start_key: str, end_key: str) -> List[StoredRecord]:
        raise UnsupportedPartitionOperation(
            "Range queries are only served by the restricted partition."
        )

    def rich_query(self, selector: Mapping[str, Any]) -> List[StoredRecord]:
        return drain_records(self._stub.get_query_result(build_query(selector)))

    def history_query(self, key: str) -> List[HistoryEntry]:
        return drain_history(self._stub.get_history_for_key(key))

    def paged_query(
        self, selector: Mapping[str, Any], page_size: int, bookmark: str = ""
    ) -> RecordPage:
        iterator, metadata = self._stub.get_query_result_with_pagination(
            build_query(selector), page_size, bookmark
        )
        records = drain_records(iterator)
        return RecordPage(
            records=records,
            bookmark=metadata.bookmark,
            fetched_count=metadata.fetched_records_count,
        )


class PrivateCollectionStore(IRecordStore):
    """Restricted partition: one private data collection.

    Existence is checked through the private data hash, which every
    channel member can read even without access to the content.
    """

    partition = "restricted"

    def __init__(self, stub: IChaincodeStub, collection: str) -> None:
        self._stub = stub
        self.collection = collection

    def exists(self, key: str) -> bool:
        digest = self._stub.get_private_data_hash(self.collection, key)
        return bool(digest) and len(digest) > 0

    def get(self, key: str) -> Document:
        value = self._stub.get_private_data(self.collection, key)
        if not value:
            raise RecordNotFound(f"No record stored at {key} in {self.collection}.")
        return decode(value)

    def put(self, key: str, record: Mapping[str, Any]) -> None:
        self._stub.put_private_data(self.collection, key, encode(record))
        logger.debug(
            "store.put", partition=self.partition, collection=self.collection, key=key
        )

    def delete(self, key: str) -> None:
        self._stub.del_private_data(self.collection, key)
        logger.debug(
            "store.delete",
            partition=self.partition,
            collection=self.collection,
            key=key,
        )

    def range_query(self, start_key: str, end_key: str) -> List[StoredRecord]:
        return drain_records(
            self._stub.get_private_data_by_range(self.collection, start_key, end_key)
        )

    def rich_query(self, selector: Mapping[str, Any]) -> List[StoredRecord]:
        return drain_records(
            self._stub.get_private_data_query_result(
                self.collection, build_query(selector)
            )
        )

    def history_query(self, key: str) -> List[HistoryEntry]:
        raise UnsupportedPartitionOperation(
            "Private data collections keep no key history."
        )

    def paged_query(
        self, selector: Mapping[str, Any], page_size: int, bookmark: str = ""
    ) -> RecordPage:
        raise UnsupportedPartitionOperation(
            "Paginated queries are only served by the shared partition."
        )
