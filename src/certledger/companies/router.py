"""Company API router."""

from fastapi import APIRouter, Depends, Query

from certledger.common.security import Capability, require_capability
from certledger.companies.schemas import CompanyCreate, CompanyResponse

router = APIRouter(prefix="/companies")


def _get_service():
    from certledger.deps import get_company_service
    return get_company_service()


def _get_db():
    from certledger.deps import get_db
    return get_db()


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    body: CompanyCreate, _=Depends(require_capability(Capability.MANAGE_USERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        company = await svc.create_company(
            session, body.name,
            contact_email=body.contact_email,
            contact_phone=body.contact_phone,
            wallet_address=body.wallet_address,
            metadata=body.metadata,
        )
        return CompanyResponse.from_model(company)


@router.get("", response_model=list[CompanyResponse])
async def list_companies(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    q: str = Query(""),
    _=Depends(require_capability(Capability.VIEW_USERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        companies = await svc.list_companies(session, skip=skip, limit=limit, q=q)
        return [CompanyResponse.from_model(c) for c in companies]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str, _=Depends(require_capability(Capability.VIEW_USERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return CompanyResponse.from_model(await svc.get_company(session, company_id))
