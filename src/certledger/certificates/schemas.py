"""Pydantic schemas for certificate endpoints."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from certledger.audit.schemas import AuditEventResponse
from certledger.transactions.schemas import TransactionResponse


class CertificateIssue(BaseModel):
    """Issue a certificate for a hash computed by the caller."""
    certificate_name: str = Field(..., min_length=1, max_length=255)
    subject: str = Field(..., min_length=1, max_length=255)
    metadata_hash: str = Field(..., min_length=1, max_length=128)
    company_id: Optional[str] = None
    network: Optional[str] = None


class CertificateUpdate(BaseModel):
    certificate_name: Optional[str] = Field(None, min_length=1, max_length=255)
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[Literal["issued", "revoked"]] = None


class ChainInfo(BaseModel):
    tx_hash_issue: Optional[str] = None
    on_chain_id: Optional[str] = None


class StorageInfo(BaseModel):
    provider: Optional[str] = None
    path: Optional[str] = None
    public_url: Optional[str] = None


class CertificateResponse(BaseModel):
    id: str
    certificate_name: str
    subject: str
    company_id: Optional[str] = None
    metadata_hash: str
    status: str
    network: Optional[str] = None
    requested_by_user_id: Optional[str] = None
    chain: ChainInfo
    storage: StorageInfo
    certificate_url: Optional[str] = None
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, cert) -> "CertificateResponse":
        return cls(
            id=cert.id,
            certificate_name=cert.certificate_name,
            subject=cert.subject,
            company_id=cert.company_id,
            metadata_hash=cert.metadata_hash,
            status=cert.status,
            network=cert.network,
            requested_by_user_id=cert.requested_by_user_id,
            chain=ChainInfo(tx_hash_issue=cert.tx_hash_issue, on_chain_id=cert.on_chain_id),
            storage=StorageInfo(
                provider=cert.storage_provider,
                path=cert.storage_path,
                public_url=cert.storage_public_url,
            ),
            certificate_url=cert.certificate_url,
            original_filename=cert.original_filename,
            mime_type=cert.mime_type,
            size=cert.size,
            created_at=cert.created_at,
            updated_at=cert.updated_at,
        )


class AuxiliaryOutcomeResponse(BaseModel):
    name: str
    ok: bool
    error: Optional[str] = None

    model_config = {"from_attributes": True}


class IssuanceResponse(BaseModel):
    cert: CertificateResponse
    tx: Optional[TransactionResponse] = None
    auxiliary: list[AuxiliaryOutcomeResponse] = []


class CertificateSummary(BaseModel):
    id: str
    certificate_name: str
    subject: str
    company_id: Optional[str] = None
    status: str
    tx_hash: Optional[str] = None
    certificate_url: Optional[str] = None
    original_filename: Optional[str] = None
    signed_by: Optional[str] = None
    signed_by_role: Optional[str] = None
    created_at: datetime


class CertificateListResponse(BaseModel):
    certificates: list[CertificateSummary]
    total: int
    current_page: int
    total_pages: int


class CertificateDetailResponse(CertificateResponse):
    events: list[AuditEventResponse] = []
    transactions: list[TransactionResponse] = []


class UpdateResponse(BaseModel):
    certificate: CertificateResponse
    auxiliary: list[AuxiliaryOutcomeResponse] = []


class DeletionResponse(BaseModel):
    deleted_counts: dict[str, int]
    auxiliary: list[AuxiliaryOutcomeResponse] = []


class VerificationResponse(BaseModel):
    issued: bool
    value: Optional[dict[str, Any]] = None


class LedgerReceiptResponse(BaseModel):
    status: str
    hash: Optional[str] = None
    tx: Optional[TransactionResponse] = None


class WhitelistRequest(BaseModel):
    address: str = Field(..., min_length=1, max_length=64)


class WhitelistStatusResponse(BaseModel):
    address: str
    whitelisted: bool
