"""Ledger platform contracts consumed by the chaincode layer.

The contracts never talk to a concrete peer.  They depend on the
``IChaincodeStub`` and ``IClientIdentity`` protocols below; the peer
shim (or ``shared.infrastructure.ledger.InMemoryLedger`` in tests and
local runs) provides the implementation.
"""

from __future__ import annotations

from datetime import datetime
from typing import (
    ContextManager,
    Iterator,
    Mapping,
    NamedTuple,
    Optional,
    Protocol,
    Tuple,
    TypeVar,
)

T_co = TypeVar("T_co", covariant=True)


class KV(NamedTuple):
    """A key/value pair yielded by state and private-data queries."""

    key: str
    value: bytes


class KeyModification(NamedTuple):
    """One entry of a key's history in the shared partition."""

    tx_id: str
    value: bytes
    timestamp: datetime
    is_delete: bool


class QueryResponseMetadata(NamedTuple):
    fetched_records_count: int
    bookmark: str


class IResultIterator(Protocol[T_co]):
    """Server-side cursor.  Must be closed once consumed."""

    def __iter__(self) -> Iterator[T_co]: ...

    def __next__(self) -> T_co: ...

    def close(self) -> None: ...


class IClientIdentity(Protocol):
    """Identity of the party submitting the transaction."""

    def get_mspid(self) -> str: ...


class IChaincodeStub(Protocol):
    """Subset of the chaincode stub API the contracts rely on."""

    tx_id: str

    # Shared partition (world state)
    def get_state(self, key: str) -> bytes: ...

    def put_state(self, key: str, value: bytes) -> None: ...

    def del_state(self, key: str) -> None: ...

    def get_query_result(self, query: str) -> IResultIterator[KV]: ...

    def get_query_result_with_pagination(
        self, query: str, page_size: int, bookmark: str = ""
    ) -> Tuple[IResultIterator[KV], QueryResponseMetadata]: ...

    def get_history_for_key(self, key: str) -> IResultIterator[KeyModification]: ...

    # Restricted partition (private data collections)
    def get_private_data(self, collection: str, key: str) -> bytes: ...

    def get_private_data_hash(self, collection: str, key: str) -> bytes: ...

    def put_private_data(self, collection: str, key: str, value: bytes) -> None: ...

    def del_private_data(self, collection: str, key: str) -> None: ...

    def get_private_data_by_range(
        self, collection: str, start_key: str, end_key: str
    ) -> IResultIterator[KV]: ...

    def get_private_data_query_result(
        self, collection: str, query: str
    ) -> IResultIterator[KV]: ...

    # Invocation collaborators
    def get_transient(self) -> Mapping[str, bytes]: ...

    def set_event(self, name: str, payload: Optional[bytes]) -> None: ...


class ILedger(Protocol):
    """Transaction boundary offered by the platform.

    ``transaction`` yields a stub whose writes commit on normal exit and
    are discarded when the body raises.
    """

    def transaction(
        self,
        transient: Optional[Mapping[str, bytes]] = None,
        tx_id: Optional[str] = None,
    ) -> ContextManager[IChaincodeStub]: ...

    def begin(
        self,
        transient: Optional[Mapping[str, bytes]] = None,
        tx_id: Optional[str] = None,
    ) -> IChaincodeStub: ...

    def abort(self, stub: IChaincodeStub) -> None: ...
