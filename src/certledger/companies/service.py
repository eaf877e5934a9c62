"""Company CRUD service."""

import logging
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from certledger.common.exceptions import NotFoundError, ValidationError
from certledger.companies.models import CompanyModel
from certledger.users.models import UserModel

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100


class CompanyService:
    """Company management operations."""

    async def create_company(
        self, session: AsyncSession, name: str | None, **kwargs: Any,
    ) -> CompanyModel:
        if not name:
            raise ValidationError("Company name is required")
        company = CompanyModel(
            name=name,
            contact_email=kwargs.get("contact_email", ""),
            contact_phone=kwargs.get("contact_phone", ""),
            wallet_address=kwargs.get("wallet_address"),
            metadata_=kwargs.get("metadata", {}),
        )
        session.add(company)
        await session.flush()
        logger.info("Company created", extra={"company_id": company.id})
        return company

    async def get_company(self, session: AsyncSession, company_id: str) -> CompanyModel:
        company = await session.get(CompanyModel, company_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    async def list_companies(
        self,
        session: AsyncSession,
        skip: int = 0,
        limit: int = 50,
        q: str = "",
    ) -> list[CompanyModel]:
        query = select(CompanyModel)
        if q:
            pattern = f"%{q}%"
            query = query.where(or_(
                CompanyModel.name.ilike(pattern),
                CompanyModel.contact_email.ilike(pattern),
            ))
        query = (
            query.order_by(CompanyModel.created_at.desc())
            .offset(max(skip, 0))
            .limit(min(MAX_LIST_LIMIT, limit))
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    async def list_companies_with_users(
        self, session: AsyncSession,
    ) -> list[tuple[CompanyModel, list[UserModel]]]:
        """Every company, newest first, with its users (newest first)."""
        companies = list((await session.execute(
            select(CompanyModel).order_by(CompanyModel.created_at.desc())
        )).scalars().all())
        users = (await session.execute(
            select(UserModel)
            .where(UserModel.company_id.is_not(None))
            .order_by(UserModel.created_at.desc())
        )).scalars().all()

        by_company: dict[str, list[UserModel]] = {c.id: [] for c in companies}
        for user in users:
            by_company.setdefault(user.company_id, []).append(user)
        return [(c, by_company[c.id]) for c in companies]
