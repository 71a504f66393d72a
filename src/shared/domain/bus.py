"""Domain bus interfaces for committed ledger events."""

from __future__ import annotations

from typing import Protocol

from shared.domain.events import ChaincodeEvent, DomainEvent


class IEventHandler(Protocol):
    """Handler interface for delivered ledger events."""

    def handle(self, event: ChaincodeEvent) -> None: ...


class IEventBus(Protocol):
    """Event bus interface."""

    def publish(self, event: ChaincodeEvent) -> None: ...

    def subscribe(self, event_name: str, handler: IEventHandler) -> None: ...


class IEventEmitter(Protocol):
    """Outbound channel for events raised inside a transaction."""

    def emit(self, event: DomainEvent) -> None: ...
