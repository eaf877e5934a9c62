"""Tests for user and company services."""

import pytest

from certledger.common.config import CertLedgerSettings
from certledger.common.database import DatabaseManager
from certledger.common.exceptions import ConflictError, NotFoundError, ValidationError
from certledger.companies.service import CompanyService
from certledger.users.service import UserService


@pytest.fixture
async def db():
    manager = DatabaseManager(
        CertLedgerSettings(db_url="sqlite+aiosqlite://", api_key="k")
    )
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def users():
    return UserService()


@pytest.fixture
def companies():
    return CompanyService()


class TestUserService:
    async def test_create_normalises_email(self, db, users):
        async with db.get_session() as session:
            user = await users.create_user(session, "  Admin@Example.COM ", name="Admin")
            assert user.email == "admin@example.com"
            assert user.role == "company_admin"
            assert user.is_active is True

    async def test_duplicate_email(self, db, users):
        async with db.get_session() as session:
            await users.create_user(session, "a@example.com")
        async with db.get_session() as session:
            with pytest.raises(ConflictError):
                await users.create_user(session, "A@example.com")

    async def test_unknown_role(self, db, users):
        async with db.get_session() as session:
            with pytest.raises(ValidationError):
                await users.create_user(session, "a@example.com", role="root")

    async def test_single_super_admin(self, db, users):
        async with db.get_session() as session:
            await users.create_user(session, "root@example.com", role="super_admin")
        async with db.get_session() as session:
            with pytest.raises(ConflictError):
                await users.create_user(session, "root2@example.com", role="super_admin")

    async def test_get_user_not_found(self, db, users):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await users.get_user(session, "missing")

    async def test_update_ignores_role(self, db, users):
        async with db.get_session() as session:
            user = await users.create_user(session, "a@example.com")
            updated = await users.update_user(
                session, user.id, name="New Name", role="super_admin", is_active=False,
            )
            assert updated.name == "New Name"
            assert updated.role == "company_admin"
            assert updated.is_active is False

    async def test_promote_and_demote(self, db, users):
        async with db.get_session() as session:
            user = await users.create_user(session, "a@example.com")
            promoted = await users.promote_to_regulator_admin(session, user.id)
            assert promoted.role == "regulator_admin"
            demoted = await users.demote_regulator_admin(session, user.id)
            assert demoted.role == "company_admin"

    async def test_super_admin_role_is_fixed(self, db, users):
        async with db.get_session() as session:
            root = await users.create_user(session, "root@example.com", role="super_admin")
            with pytest.raises(ValidationError):
                await users.promote_to_regulator_admin(session, root.id)
            with pytest.raises(ValidationError):
                await users.demote_regulator_admin(session, root.id)

    async def test_delete_user(self, db, users):
        async with db.get_session() as session:
            user = await users.create_user(session, "a@example.com")
        async with db.get_session() as session:
            await users.delete_user(session, user.id)
        async with db.get_session() as session:
            assert await users.get_by_email(session, "a@example.com") is None

    async def test_list_grouped(self, db, users, companies):
        async with db.get_session() as session:
            company = await companies.create_company(session, "Acme")
            await users.create_user(session, "root@example.com", role="super_admin")
            await users.create_user(session, "reg@example.com", role="regulator_admin")
            await users.create_user(session, "co@example.com", company_id=company.id)
        async with db.get_session() as session:
            grouped = await users.list_grouped(session)
        assert [e["user"].email for e in grouped["regulator_admins"]] == ["reg@example.com"]
        assert grouped["regulator_admins"][0]["is_regulator"] is True
        assert grouped["regulator_admins"][0]["company"] is None
        entry = grouped["company_admins"][0]
        assert entry["user"].email == "co@example.com"
        assert entry["company"].name == "Acme"
        assert entry["is_regulator"] is False


class TestCompanyService:
    async def test_create_company(self, db, companies):
        async with db.get_session() as session:
            company = await companies.create_company(
                session, "Acme", contact_email="info@acme.test", metadata={"tier": "gold"},
            )
            assert company.id
            assert company.metadata_ == {"tier": "gold"}

    async def test_name_required(self, db, companies):
        async with db.get_session() as session:
            with pytest.raises(ValidationError):
                await companies.create_company(session, "")

    async def test_get_company_not_found(self, db, companies):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await companies.get_company(session, "missing")

    async def test_list_search_and_limit(self, db, companies):
        async with db.get_session() as session:
            await companies.create_company(session, "Acme Corp")
            await companies.create_company(session, "Globex", contact_email="hi@acme.test")
            await companies.create_company(session, "Initech")
        async with db.get_session() as session:
            assert len(await companies.list_companies(session)) == 3
            assert len(await companies.list_companies(session, q="acme")) == 2
            assert len(await companies.list_companies(session, limit=1)) == 1
            assert len(await companies.list_companies(session, skip=2)) == 1

    async def test_list_with_users(self, db, companies, users):
        async with db.get_session() as session:
            acme = await companies.create_company(session, "Acme")
            await companies.create_company(session, "Empty")
            await users.create_user(session, "a@acme.test", company_id=acme.id)
        async with db.get_session() as session:
            rows = await companies.list_companies_with_users(session)
        by_name = {company.name: members for company, members in rows}
        assert [u.email for u in by_name["Acme"]] == ["a@acme.test"]
        assert by_name["Empty"] == []
