"""HTTP client for the document-registry contract relay."""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class HttpLedgerGateway:
    """Calls the contract relay's /v1 endpoints.

    The relay holds the signing key and submits transactions; this client
    only marshals requests. HTTP errors are raised as ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        base_url: str,
        service_token: str = "",
        owner_address: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_token = service_token
        self.owner_account = owner_address
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init httpx.AsyncClient."""
        if self._client is None:
            headers = {}
            if self.service_token:
                headers["X-Service-Token"] = self.service_token
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_or_none(self, path: str) -> Optional[dict[str, Any]]:
        resp = await self._get_client().get(path)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        data = resp.json()
        return data or None

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        resp = await self._get_client().post(path, json=payload)
        resp.raise_for_status()
        return resp.json()

    # ── Reads ──

    async def read_document(self, doc_hash: str) -> Optional[dict[str, Any]]:
        return await self._get_or_none(f"/v1/documents/{doc_hash}")

    async def verify_document(self, doc_hash: str) -> Optional[dict[str, Any]]:
        return await self._get_or_none(f"/v1/documents/{doc_hash}/verify")

    async def is_whitelisted(self, address: str) -> bool:
        resp = await self._get_client().get(f"/v1/whitelist/{address}")
        resp.raise_for_status()
        return bool(resp.json().get("whitelisted"))

    async def owner_address(self) -> str:
        resp = await self._get_client().get("/v1/contract/owner")
        resp.raise_for_status()
        return resp.json()["owner"]

    # ── Writes ──

    async def store_document(
        self, name: str, doc_hash: str, metadata: Optional[dict[str, Any]],
    ) -> dict[str, Any]:
        logger.info("Submitting store_document", extra={"doc_hash": doc_hash})
        return await self._post(
            "/v1/documents",
            {"name": name, "hash": doc_hash, "metadata": metadata},
        )

    async def init_contract(self) -> dict[str, Any]:
        return await self._post("/v1/contract/init", {"owner": self.owner_account})

    async def whitelist_address(self, address: str) -> dict[str, Any]:
        return await self._post("/v1/whitelist", {"address": address})
