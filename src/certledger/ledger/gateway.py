"""Ledger gateway interface and receipt normalisation."""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

SUCCESS = "SUCCESS"


class LedgerError(Exception):
    """Raised by a ledger implementation when the contract rejects a call."""


@runtime_checkable
class LedgerGateway(Protocol):
    """Operations the document-registry contract exposes.

    Write operations return the raw receipt payload; use
    :meth:`LedgerReceipt.from_payload` to read it.
    """

    async def read_document(self, doc_hash: str) -> Optional[dict[str, Any]]: ...

    async def store_document(
        self, name: str, doc_hash: str, metadata: Optional[dict[str, Any]],
    ) -> dict[str, Any]: ...

    async def verify_document(self, doc_hash: str) -> Optional[dict[str, Any]]: ...

    async def is_whitelisted(self, address: str) -> bool: ...

    async def init_contract(self) -> dict[str, Any]: ...

    async def whitelist_address(self, address: str) -> dict[str, Any]: ...


@dataclass
class LedgerReceipt:
    """Outcome of a ledger write: status and transaction hash."""

    status: str
    tx_hash: Optional[str]
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def from_payload(cls, payload: Optional[dict[str, Any]]) -> "LedgerReceipt":
        """Build a receipt from a relay/contract response.

        The transaction hash is accepted under ``hash``, ``txHash`` or ``tx_hash``.
        """
        payload = payload or {}
        tx_hash = payload.get("hash") or payload.get("txHash") or payload.get("tx_hash")
        return cls(
            status=str(payload.get("status", "")).upper(),
            tx_hash=tx_hash or None,
            raw=dict(payload),
        )
