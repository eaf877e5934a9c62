#!/usr/bin/env python3
"""Seed the database with the super admin and a demo company.

Usage:
    python scripts/seed_admins.py admin@example.com
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from certledger.common.config import get_settings
from certledger.common.database import DatabaseManager
from certledger.common.security import Role
from certledger.companies.service import CompanyService
from certledger.users.service import UserService

DEMO_COMPANY = {
    "name": "Demo Issuer Ltd",
    "contact_email": "issuer@example.com",
}


async def seed_admins(super_admin_email: str) -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    await db.create_all()

    users = UserService()
    companies = CompanyService()

    async with db.get_session() as session:
        if await users.get_by_email(session, super_admin_email):
            print(f"  [skip] {super_admin_email} already exists")
        else:
            await users.create_user(
                session, super_admin_email, name="Super Admin", role=Role.SUPER_ADMIN.value,
            )
            print(f"  [created] super admin {super_admin_email}")

        existing = await companies.list_companies(session, q=DEMO_COMPANY["name"])
        if existing:
            print(f"  [skip] {DEMO_COMPANY['name']} already exists")
        else:
            company = await companies.create_company(
                session, DEMO_COMPANY["name"], contact_email=DEMO_COMPANY["contact_email"],
            )
            await users.create_user(
                session,
                DEMO_COMPANY["contact_email"],
                name="Demo Issuer",
                role=Role.COMPANY_ADMIN.value,
                company_id=company.id,
            )
            print(f"  [created] {company.name} with admin {DEMO_COMPANY['contact_email']}")

    await db.close()
    print("\nDone.")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(seed_admins(sys.argv[1]))
