"""In-memory ledger implementing the chaincode stub protocol.

Used for local runs and tests.  It mirrors the peer behaviour the
contracts depend on:

- Reads always see committed state; writes are staged per transaction
  and applied together on commit (or dropped on abort).
- Every committed write to the shared partition is appended to the
  key's history, newest first on read.
- Private data is exposed through its sha256 hash to parties that only
  need to check existence.
- Rich queries take a CouchDB-style ``{"selector": {...}}`` document.
- At most one chaincode event per transaction; the last ``set_event``
  wins and is published to the event bus on commit.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)
from uuid import uuid4

import structlog

from shared.domain.bus import IEventBus
from shared.domain.events import ChaincodeEvent
from shared.domain.ledger import KV, KeyModification, QueryResponseMetadata
from shared.infrastructure.bus import InMemoryEventBus

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class LedgerQueryError(ValueError):
    """A query string or bookmark could not be interpreted."""


class TransactionClosed(RuntimeError):
    """The transaction was already committed or aborted."""


class StaticClientIdentity:
    """Client identity with a fixed MSP id."""

    def __init__(self, mspid: str) -> None:
        self._mspid = mspid

    def get_mspid(self) -> str:
        return self._mspid


class InMemoryResultIterator(Iterator[T]):
    """List-backed cursor that reports itself to the owning ledger."""

    def __init__(self, items: Iterable[T], ledger: InMemoryLedger) -> None:
        self._items = iter(list(items))
        self._ledger = ledger
        self.closed = False
        ledger._open_iterators += 1

    def __iter__(self) -> InMemoryResultIterator[T]:
        return self

    def __next__(self) -> T:
        if self.closed:
            raise StopIteration
        return next(self._items)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._ledger._open_iterators -= 1


# ---------------------------------------------------------------------------
# Selector evaluation
# ---------------------------------------------------------------------------

_MISSING = object()


def _lookup(document: Mapping[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _compare(op: str, value: Any, operand: Any) -> bool:
    if op == "$exists":
        return (value is not _MISSING) == bool(operand)
    if value is _MISSING:
        return op == "$ne" or op == "$nin"
    try:
        if op == "$eq":
            return value == operand
        if op == "$ne":
            return value != operand
        if op == "$gt":
            return value > operand
        if op == "$gte":
            return value >= operand
        if op == "$lt":
            return value < operand
        if op == "$lte":
            return value <= operand
    except TypeError:
        return False
    if op == "$in":
        return value in operand
    if op == "$nin":
        return value not in operand
    raise LedgerQueryError(f"Unsupported selector operator {op!r}.")


def matches_selector(document: Mapping[str, Any], selector: Mapping[str, Any]) -> bool:
    """Return ``True`` if *document* satisfies the CouchDB-style *selector*."""
    for field, condition in selector.items():
        if field == "$and":
            if not all(matches_selector(document, sub) for sub in condition):
                return False
            continue
        if field == "$or":
            if not any(matches_selector(document, sub) for sub in condition):
                return False
            continue

        value = _lookup(document, field)
        if isinstance(condition, dict) and condition and all(
            key.startswith("$") for key in condition
        ):
            if not all(_compare(op, value, operand) for op, operand in condition.items()):
                return False
        elif value is _MISSING or value != condition:
            return False
    return True


def _parse_selector(query: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(query)
    except json.JSONDecodeError as exc:
        raise LedgerQueryError(f"Query is not valid JSON: {exc}") from exc
    selector = parsed.get("selector") if isinstance(parsed, dict) else None
    if not isinstance(selector, dict):
        raise LedgerQueryError("Query must contain a 'selector' object.")
    return selector


def _decode_document(value: bytes) -> Optional[Mapping[str, Any]]:
    try:
        document = json.loads(value.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return document if isinstance(document, dict) else None


def encode_bookmark(last_key: str) -> str:
    raw = json.dumps({"last": last_key}).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_bookmark(bookmark: str) -> Optional[str]:
    if not bookmark:
        return None
    try:
        raw = base64.urlsafe_b64decode(bookmark.encode("ascii"))
        return json.loads(raw.decode("utf-8"))["last"]
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise LedgerQueryError(f"Invalid bookmark {bookmark!r}.") from exc


# ---------------------------------------------------------------------------
# Ledger + per-transaction stub
# ---------------------------------------------------------------------------


class InMemoryLedger:
    """Committed ledger state plus the factory for transaction stubs."""

    def __init__(
        self,
        bus: Optional[IEventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.bus = bus if bus is not None else InMemoryEventBus()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._state: Dict[str, bytes] = {}
        self._private: Dict[str, Dict[str, bytes]] = {}
        self._history: Dict[str, List[KeyModification]] = {}
        self._open_iterators = 0
        self.committed_tx_ids: List[str] = []
        self.events: List[ChaincodeEvent] = []

    @property
    def open_iterators(self) -> int:
        """Number of cursors handed out and not yet closed."""
        return self._open_iterators

    def begin(
        self,
        transient: Optional[Mapping[str, bytes]] = None,
        tx_id: Optional[str] = None,
    ) -> InMemoryStub:
        return InMemoryStub(self, tx_id or uuid4().hex, transient or {})

    @contextmanager
    def transaction(
        self,
        transient: Optional[Mapping[str, bytes]] = None,
        tx_id: Optional[str] = None,
    ) -> Iterator[InMemoryStub]:
        """Commit on normal exit, abort when the body raises."""
        stub = self.begin(transient=transient, tx_id=tx_id)
        try:
            yield stub
        except BaseException:
            self.abort(stub)
            raise
        self.commit(stub)

    def commit(self, stub: InMemoryStub) -> None:
        stub._ensure_open()
        timestamp = self._clock()

        for key, value in stub._writes.items():
            if value is None:
                self._state.pop(key, None)
                modification = KeyModification(stub.tx_id, b"", timestamp, True)
            else:
                self._state[key] = value
                modification = KeyModification(stub.tx_id, value, timestamp, False)
            self._history.setdefault(key, []).append(modification)

        for (collection, key), value in stub._private_writes.items():
            bucket = self._private.setdefault(collection, {})
            if value is None:
                bucket.pop(key, None)
            else:
                bucket[key] = value

        stub._closed = True
        self.committed_tx_ids.append(stub.tx_id)
        logger.debug(
            "ledger.committed",
            tx_id=stub.tx_id,
            writes=len(stub._writes),
            private_writes=len(stub._private_writes),
        )

        if stub._event is not None:
            name, payload = stub._event
            event = ChaincodeEvent(tx_id=stub.tx_id, event_name=name, payload=payload)
            self.events.append(event)
            try:
                self.bus.publish(event)
            except Exception:
                logger.exception("ledger.publish_failed", tx_id=stub.tx_id, event_name=name)

    def abort(self, stub: InMemoryStub) -> None:
        if stub._closed:
            return
        stub._closed = True
        logger.debug("ledger.aborted", tx_id=stub.tx_id)

    # -- committed-state readers used by stubs ------------------------------

    def _iterator(self, items: Iterable[T]) -> InMemoryResultIterator[T]:
        return InMemoryResultIterator(items, self)

    def _sorted_state(self) -> List[Tuple[str, bytes]]:
        return sorted(self._state.items())

    def _sorted_private(self, collection: str) -> List[Tuple[str, bytes]]:
        return sorted(self._private.get(collection, {}).items())


def _require_key(key: str) -> None:
    if not key:
        raise ValueError("Key must not be empty.")


class InMemoryStub:
    """Chaincode stub bound to one transaction of an ``InMemoryLedger``."""

    def __init__(
        self, ledger: InMemoryLedger, tx_id: str, transient: Mapping[str, bytes]
    ) -> None:
        self.tx_id = tx_id
        self._ledger = ledger
        self._transient = dict(transient)
        self._writes: Dict[str, Optional[bytes]] = {}
        self._private_writes: Dict[Tuple[str, str], Optional[bytes]] = {}
        self._event: Optional[Tuple[str, bytes]] = None
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransactionClosed(f"Transaction {self.tx_id} is closed.")

    # -- shared partition -----------------------------------------------------

    def get_state(self, key: str) -> bytes:
        _require_key(key)
        return self._ledger._state.get(key, b"")

    def put_state(self, key: str, value: bytes) -> None:
        self._ensure_open()
        _require_key(key)
        self._writes[key] = bytes(value)

    def del_state(self, key: str) -> None:
        self._ensure_open()
        _require_key(key)
        self._writes[key] = None

    def get_query_result(self, query: str) -> InMemoryResultIterator[KV]:
        selector = _parse_selector(query)
        return self._ledger._iterator(_select(self._ledger._sorted_state(), selector))

    def get_query_result_with_pagination(
        self, query: str, page_size: int, bookmark: str = ""
    ) -> Tuple[InMemoryResultIterator[KV], QueryResponseMetadata]:
        if page_size < 1:
            raise LedgerQueryError("Page size must be a positive integer.")
        selector = _parse_selector(query)
        after = decode_bookmark(bookmark)

        page: List[KV] = []
        for kv in _select(self._ledger._sorted_state(), selector):
            if after is not None and kv.key <= after:
                continue
            page.append(kv)
            if len(page) == page_size:
                break

        next_bookmark = encode_bookmark(page[-1].key) if page else bookmark
        metadata = QueryResponseMetadata(
            fetched_records_count=len(page), bookmark=next_bookmark
        )
        return self._ledger._iterator(page), metadata

    def get_history_for_key(self, key: str) -> InMemoryResultIterator[KeyModification]:
        _require_key(key)
        history = self._ledger._history.get(key, [])
        return self._ledger._iterator(reversed(history))

    # -- restricted partition ---------------------------------------------------

    def get_private_data(self, collection: str, key: str) -> bytes:
        _require_key(key)
        return self._ledger._private.get(collection, {}).get(key, b"")

    def get_private_data_hash(self, collection: str, key: str) -> bytes:
        value = self.get_private_data(collection, key)
        return hashlib.sha256(value).digest() if value else b""

    def put_private_data(self, collection: str, key: str, value: bytes) -> None:
        self._ensure_open()
        _require_key(key)
        self._private_writes[(collection, key)] = bytes(value)

    def del_private_data(self, collection: str, key: str) -> None:
        self._ensure_open()
        _require_key(key)
        self._private_writes[(collection, key)] = None

    def get_private_data_by_range(
        self, collection: str, start_key: str, end_key: str
    ) -> InMemoryResultIterator[KV]:
        items = [
            KV(key, value)
            for key, value in self._ledger._sorted_private(collection)
            if key >= start_key and (not end_key or key < end_key)
        ]
        return self._ledger._iterator(items)

    def get_private_data_query_result(
        self, collection: str, query: str
    ) -> InMemoryResultIterator[KV]:
        selector = _parse_selector(query)
        return self._ledger._iterator(
            _select(self._ledger._sorted_private(collection), selector)
        )

    # -- invocation collaborators -----------------------------------------------

    def get_transient(self) -> Mapping[str, bytes]:
        return dict(self._transient)

    def set_event(self, name: str, payload: Optional[bytes]) -> None:
        self._ensure_open()
        if not name:
            raise ValueError("Event name must not be empty.")
        self._event = (name, payload or b"")


def _select(
    items: Iterable[Tuple[str, bytes]], selector: Mapping[str, Any]
) -> List[KV]:
    selected = []
    for key, value in items:
        document = _decode_document(value)
        if document is not None and matches_selector(document, selector):
            selected.append(KV(key, value))
    return selected
