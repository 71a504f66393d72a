"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List

import structlog

from shared.domain.bus import IEventBus, IEventEmitter, IEventHandler
from shared.domain.events import ChaincodeEvent, DomainEvent
from shared.domain.ledger import IChaincodeStub

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus keyed by ledger event name."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[IEventHandler]] = {}

    def subscribe(self, event_name: str, handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: ChaincodeEvent) -> None:
        handlers = self._handlers.get(event.event_name, [])
        if not handlers:
            logger.debug("bus.no_subscribers", event_name=event.event_name)
        for handler in handlers:
            try:
                handler.handle(event)
            except Exception:
                # Delivery happens after commit; a subscriber cannot undo it.
                logger.exception(
                    "bus.handler_failed",
                    event_name=event.event_name,
                    tx_id=event.tx_id,
                    handler=handler.__class__.__name__,
                )


class LedgerEventEmitter(IEventEmitter):
    """Emits domain events through the chaincode stub.

    The ledger delivers the event to subscribers only if the transaction
    commits.
    """

    def __init__(self, stub: IChaincodeStub) -> None:
        self._stub = stub

    def emit(self, event: DomainEvent) -> None:
        self._stub.set_event(event.ledger_name, event.encode())
        logger.info(
            "bus.event_emitted",
            event_name=event.ledger_name,
            domain_event=event.event_name,
            event_id=str(event.event_id),
            occurred_on=event.occurred_on.isoformat(),
            aggregate_id=event.aggregate_id,
        )
