"""User and regulator-role API router."""

from fastapi import APIRouter, Depends

from certledger.common.security import Capability, require_capability
from certledger.companies.schemas import CompanyResponse
from certledger.users.schemas import (
    GroupedUser,
    GroupedUsersResponse,
    RoleChangeRequest,
    UserCreate,
    UserResponse,
)

router = APIRouter()


def _get_service():
    from certledger.deps import get_user_service
    return get_user_service()


def _get_db():
    from certledger.deps import get_db
    return get_db()


def _grouped(entry) -> GroupedUser:
    base = UserResponse.model_validate(entry["user"])
    company = entry["company"]
    return GroupedUser(
        **base.model_dump(),
        company=CompanyResponse.from_model(company) if company else None,
        is_regulator=entry["is_regulator"],
    )


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate, _=Depends(require_capability(Capability.MANAGE_USERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.create_user(session, **body.model_dump())
        return UserResponse.model_validate(user)


@router.get("/users/grouped", response_model=GroupedUsersResponse)
async def list_users_grouped(_=Depends(require_capability(Capability.VIEW_USERS))):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        grouped = await svc.list_grouped(session)
        return GroupedUsersResponse(
            regulator_admins=[_grouped(e) for e in grouped["regulator_admins"]],
            company_admins=[_grouped(e) for e in grouped["company_admins"]],
        )


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, _=Depends(require_capability(Capability.VIEW_USERS))):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        return UserResponse.model_validate(await svc.get_user(session, user_id))


@router.post("/regulators/promote", response_model=UserResponse)
async def promote_user(
    body: RoleChangeRequest, _=Depends(require_capability(Capability.MANAGE_USERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.promote_to_regulator_admin(session, body.user_id)
        return UserResponse.model_validate(user)


@router.post("/regulators/demote", response_model=UserResponse)
async def demote_user(
    body: RoleChangeRequest, _=Depends(require_capability(Capability.MANAGE_USERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.demote_regulator_admin(session, body.user_id)
        return UserResponse.model_validate(user)
