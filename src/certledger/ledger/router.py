"""Ledger lookup and contract-admin API router."""

from typing import Any, Optional

from fastapi import APIRouter, Depends

from certledger.certificates.schemas import (
    LedgerReceiptResponse,
    WhitelistRequest,
    WhitelistStatusResponse,
)
from certledger.common.exceptions import NotFoundError
from certledger.common.security import Capability, require_capability
from certledger.transactions.schemas import TransactionResponse

router = APIRouter(prefix="/ledger")


def _get_service():
    from certledger.deps import get_certificate_service
    return get_certificate_service()


def _get_db():
    from certledger.deps import get_db
    return get_db()


def _receipt_response(result) -> LedgerReceiptResponse:
    return LedgerReceiptResponse(
        status=result.receipt.status,
        hash=result.hash,
        tx=TransactionResponse.model_validate(result.tx) if result.tx else None,
    )


@router.get("/documents/{doc_hash}")
async def read_document(
    doc_hash: str,
    _=Depends(require_capability(Capability.VIEW_CERTIFICATES)),
) -> dict[str, Any]:
    svc = _get_service()
    document: Optional[dict[str, Any]] = await svc.read_document(doc_hash)
    if document is None:
        raise NotFoundError("Document not found on chain")
    return document


@router.get("/whitelist/{address}", response_model=WhitelistStatusResponse)
async def whitelist_status(
    address: str,
    _=Depends(require_capability(Capability.VIEW_CERTIFICATES)),
):
    svc = _get_service()
    return WhitelistStatusResponse(
        address=address, whitelisted=await svc.is_address_whitelisted(address),
    )


@router.post("/init", response_model=LedgerReceiptResponse)
async def init_contract(_=Depends(require_capability(Capability.MANAGE_CONTRACT))):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return _receipt_response(await svc.init_contract(session))


@router.post("/whitelist", response_model=LedgerReceiptResponse)
async def whitelist_address(
    body: WhitelistRequest,
    _=Depends(require_capability(Capability.MANAGE_CONTRACT)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return _receipt_response(await svc.whitelist_address(session, body.address))
