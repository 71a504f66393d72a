"""Ledger-context handle passed to every contract operation."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.ledger import IChaincodeStub, IClientIdentity


@dataclass(frozen=True)
class TransactionContext:
    stub: IChaincodeStub
    client_identity: IClientIdentity

    @property
    def mspid(self) -> str:
        return self.client_identity.get_mspid()

    @property
    def tx_id(self) -> str:
        return self.stub.tx_id
