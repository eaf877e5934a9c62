"""Certificate API router."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from certledger.audit.schemas import AuditEventResponse
from certledger.certificates.schemas import (
    AuxiliaryOutcomeResponse,
    CertificateDetailResponse,
    CertificateIssue,
    CertificateListResponse,
    CertificateResponse,
    CertificateSummary,
    CertificateUpdate,
    DeletionResponse,
    IssuanceResponse,
    UpdateResponse,
    VerificationResponse,
)
from certledger.common.security import ActorContext, Capability, require_capability
from certledger.transactions.schemas import TransactionResponse

router = APIRouter(prefix="/certificates")


def _get_service():
    from certledger.deps import get_certificate_service
    return get_certificate_service()


def _get_db():
    from certledger.deps import get_db
    return get_db()


def _issuance_response(result) -> IssuanceResponse:
    return IssuanceResponse(
        cert=CertificateResponse.from_model(result.cert),
        tx=TransactionResponse.model_validate(result.tx) if result.tx else None,
        auxiliary=[AuxiliaryOutcomeResponse.model_validate(a) for a in result.auxiliary],
    )


@router.post("", response_model=IssuanceResponse, status_code=201)
async def upload_and_issue(
    file: UploadFile = File(...),
    certificate_name: str = Form(..., min_length=1),
    subject: str = Form(..., min_length=1),
    company_id: Optional[str] = Form(None),
    network: Optional[str] = Form(None),
    actor: ActorContext = Depends(require_capability(Capability.ISSUE_CERTIFICATE)),
):
    svc = _get_service()
    db = _get_db()
    content = await file.read()
    async with db.get_session() as session:
        result = await svc.issue_from_upload(
            session,
            content=content,
            original_filename=file.filename or "document",
            mime_type=file.content_type or "application/octet-stream",
            certificate_name=certificate_name,
            subject=subject,
            company_id=company_id,
            network=network,
            requested_by_user_id=actor.user_id,
            actor_role=actor.role.value,
        )
        return _issuance_response(result)


@router.post("/issue", response_model=IssuanceResponse, status_code=201)
async def issue_certificate(
    body: CertificateIssue,
    actor: ActorContext = Depends(require_capability(Capability.ISSUE_CERTIFICATE)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        result = await svc.create_certificate(
            session,
            certificate_name=body.certificate_name,
            subject=body.subject,
            metadata_hash=body.metadata_hash,
            company_id=body.company_id,
            network=body.network,
            requested_by_user_id=actor.user_id,
            actor_role=actor.role.value,
        )
        return _issuance_response(result)


@router.get("", response_model=CertificateListResponse)
async def list_certificates(
    status: str | None = Query(None),
    company_id: str | None = Query(None),
    subject: str | None = Query(None),
    requested_by_user_id: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    sort_by: str = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    _=Depends(require_capability(Capability.VIEW_CERTIFICATES)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        data = await svc.get_all_certificates(
            session,
            filters={
                "status": status,
                "company_id": company_id,
                "subject": subject,
                "requested_by_user_id": requested_by_user_id,
                "search": search,
            },
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return CertificateListResponse(
            certificates=[CertificateSummary(**c) for c in data["certificates"]],
            total=data["total"],
            current_page=data["current_page"],
            total_pages=data["total_pages"],
        )


@router.get("/verify/{doc_hash}", response_model=VerificationResponse)
async def verify_certificate(doc_hash: str):
    """Public lookup: is this hash anchored on the ledger?"""
    svc = _get_service()
    return VerificationResponse(**await svc.check_certificate_issued(doc_hash))


@router.get("/{certificate_id}", response_model=CertificateDetailResponse)
async def get_certificate(
    certificate_id: str,
    _=Depends(require_capability(Capability.VIEW_CERTIFICATES)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        detail = await svc.get_certificate_by_id(session, certificate_id)
        base = CertificateResponse.from_model(detail.certificate)
        return CertificateDetailResponse(
            **base.model_dump(),
            events=[AuditEventResponse.from_model(e) for e in detail.events],
            transactions=[TransactionResponse.model_validate(t) for t in detail.transactions],
        )


@router.patch("/{certificate_id}", response_model=UpdateResponse)
async def update_certificate(
    certificate_id: str,
    body: CertificateUpdate,
    actor: ActorContext = Depends(require_capability(Capability.MANAGE_CERTIFICATES)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        result = await svc.update_certificate(
            session,
            certificate_id,
            update_data=body.model_dump(exclude_none=True),
            updated_by_user_id=actor.user_id,
            updated_by_role=actor.role.value,
        )
        return UpdateResponse(
            certificate=CertificateResponse.from_model(result.certificate),
            auxiliary=[AuxiliaryOutcomeResponse.model_validate(a) for a in result.auxiliary],
        )


@router.delete("/{certificate_id}", response_model=DeletionResponse)
async def delete_certificate(
    certificate_id: str,
    actor: ActorContext = Depends(require_capability(Capability.MANAGE_CERTIFICATES)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        result = await svc.delete_certificate(
            session, certificate_id, deleted_by_user_id=actor.user_id,
        )
        return DeletionResponse(
            deleted_counts=result.deleted_counts,
            auxiliary=[AuxiliaryOutcomeResponse.model_validate(a) for a in result.auxiliary],
        )
