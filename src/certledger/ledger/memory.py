"""In-process ledger with the registry contract's rules, for development and tests."""

import hashlib
import time
from typing import Any, Optional

from certledger.ledger.gateway import SUCCESS, LedgerError


class InMemoryLedger:
    """Document registry held in a dict.

    Mirrors the on-chain contract: a single owner set by ``init_contract``,
    a whitelist the owner manages, and documents keyed by hash that may be
    stored once by the owner or a whitelisted actor.
    """

    def __init__(self, service_address: str):
        self.service_address = service_address
        self.owner: str | None = None
        self.whitelist: set[str] = set()
        self.documents: dict[str, dict[str, Any]] = {}
        self._tx_counter = 0

    def _receipt(self, operation: str, subject: str) -> dict[str, Any]:
        self._tx_counter += 1
        tx_hash = hashlib.sha256(
            f"{operation}:{subject}:{self._tx_counter}".encode()
        ).hexdigest()
        return {"status": SUCCESS, "hash": tx_hash, "operation": operation}

    def _assert_initialized(self) -> str:
        if self.owner is None:
            raise LedgerError("contract not initialized")
        return self.owner

    def _assert_owner(self, actor: str) -> None:
        if actor != self._assert_initialized():
            raise LedgerError("not authorized: only owner")

    def _assert_owner_or_whitelisted(self, actor: str) -> None:
        owner = self._assert_initialized()
        if actor != owner and actor not in self.whitelist:
            raise LedgerError("not authorized: only owner or whitelisted address")

    # ── Admin ──

    async def init_contract(self) -> dict[str, Any]:
        if self.owner is not None:
            raise LedgerError("already initialized")
        self.owner = self.service_address
        return self._receipt("init", self.owner)

    async def whitelist_address(self, address: str) -> dict[str, Any]:
        self._assert_owner(self.service_address)
        self.whitelist.add(address)
        return self._receipt("whitelist", address)

    async def remove_from_whitelist(self, address: str) -> dict[str, Any]:
        self._assert_owner(self.service_address)
        self.whitelist.discard(address)
        return self._receipt("unwhitelist", address)

    async def is_whitelisted(self, address: str) -> bool:
        return address in self.whitelist

    async def owner_address(self) -> str:
        return self._assert_initialized()

    async def transfer_ownership(self, new_owner: str) -> dict[str, Any]:
        owner = self._assert_initialized()
        self._assert_owner(self.service_address)
        if new_owner == owner:
            raise LedgerError("new owner must be different")
        self.owner = new_owner
        return self._receipt("transfer", new_owner)

    # ── Documents ──

    async def store_document(
        self,
        name: str,
        doc_hash: str,
        metadata: Optional[dict[str, Any]],
        actor: str | None = None,
    ) -> dict[str, Any]:
        actor = actor or self.service_address
        self._assert_owner_or_whitelisted(actor)
        if doc_hash in self.documents:
            raise LedgerError("Document already registered")
        self.documents[doc_hash] = {
            "name": name,
            "hash": doc_hash,
            "timestamp": int(time.time()),
            "added_by": actor,
            "metadata": metadata,
        }
        return self._receipt("store", doc_hash)

    async def read_document(self, doc_hash: str) -> Optional[dict[str, Any]]:
        doc = self.documents.get(doc_hash)
        return dict(doc) if doc else None

    async def verify_document(self, doc_hash: str) -> Optional[dict[str, Any]]:
        doc = self.documents.get(doc_hash)
        if doc is None:
            return None
        return {**doc, "verified_document": True}
