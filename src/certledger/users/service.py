"""User service — registration records and role promotion."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certledger.common.exceptions import ConflictError, NotFoundError, ValidationError
from certledger.common.security import Role
from certledger.companies.models import CompanyModel
from certledger.users.models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """User lookups and role changes. Credentials live in the auth gateway."""

    async def create_user(
        self,
        session: AsyncSession,
        email: str,
        name: str = "",
        role: str = Role.COMPANY_ADMIN.value,
        company_id: str | None = None,
        wallet_address: str | None = None,
    ) -> UserModel:
        if not email:
            raise ValidationError("email is required")
        try:
            role = Role(role).value
        except ValueError as exc:
            raise ValidationError(f"Unknown role '{role}'") from exc

        email = email.strip().lower()
        if await self.get_by_email(session, email) is not None:
            raise ConflictError("Email already registered")
        if role == Role.SUPER_ADMIN.value:
            existing = await session.execute(
                select(UserModel.id).where(UserModel.role == Role.SUPER_ADMIN.value).limit(1)
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError("A super admin already exists")

        user = UserModel(
            email=email,
            name=name,
            role=role,
            company_id=company_id,
            wallet_address=wallet_address,
        )
        session.add(user)
        await session.flush()
        return user

    async def get_user(self, session: AsyncSession, user_id: str) -> UserModel:
        user = await session.get(UserModel, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_by_email(self, session: AsyncSession, email: str) -> UserModel | None:
        result = await session.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def update_user(
        self, session: AsyncSession, user_id: str, **updates: Any,
    ) -> UserModel:
        """Update safe profile fields only; role changes go through promote/demote."""
        user = await self.get_user(session, user_id)
        for field in ("name", "wallet_address", "is_active"):
            if field in updates and updates[field] is not None:
                setattr(user, field, updates[field])
        await session.flush()
        return user

    async def promote_to_regulator_admin(
        self, session: AsyncSession, user_id: str,
    ) -> UserModel:
        user = await self.get_user(session, user_id)
        if user.role == Role.SUPER_ADMIN.value:
            raise ValidationError("Cannot change the role of a super admin")
        user.role = Role.REGULATOR_ADMIN.value
        await session.flush()
        logger.info("User promoted to regulator admin", extra={"user_id": user_id})
        return user

    async def demote_regulator_admin(
        self, session: AsyncSession, user_id: str,
    ) -> UserModel:
        user = await self.get_user(session, user_id)
        if user.role == Role.SUPER_ADMIN.value:
            raise ValidationError("Cannot change the role of a super admin")
        user.role = Role.COMPANY_ADMIN.value
        await session.flush()
        logger.info("Regulator admin demoted", extra={"user_id": user_id})
        return user

    async def delete_user(self, session: AsyncSession, user_id: str) -> None:
        user = await self.get_user(session, user_id)
        await session.delete(user)
        await session.flush()

    async def list_grouped(self, session: AsyncSession) -> dict[str, list[dict[str, Any]]]:
        """Regulator and company admins, each with its company attached."""
        result = await session.execute(
            select(UserModel)
            .where(UserModel.role.in_([Role.REGULATOR_ADMIN.value, Role.COMPANY_ADMIN.value]))
            .order_by(UserModel.created_at.desc())
        )
        users = list(result.scalars().all())

        company_ids = {u.company_id for u in users if u.company_id}
        companies: dict[str, CompanyModel] = {}
        if company_ids:
            rows = await session.execute(
                select(CompanyModel).where(CompanyModel.id.in_(company_ids))
            )
            companies = {c.id: c for c in rows.scalars().all()}

        grouped: dict[str, list[dict[str, Any]]] = {
            "regulator_admins": [],
            "company_admins": [],
        }
        for user in users:
            entry = {
                "user": user,
                "company": companies.get(user.company_id) if user.company_id else None,
                "is_regulator": user.role == Role.REGULATOR_ADMIN.value,
            }
            key = "regulator_admins" if entry["is_regulator"] else "company_admins"
            grouped[key].append(entry)

        logger.info(
            "Fetched grouped users",
            extra={
                "regulator_admins": len(grouped["regulator_admins"]),
                "company_admins": len(grouped["company_admins"]),
            },
        )
        return grouped
