"""Shared test fixtures for CertLedger."""

import os
import pytest
from httpx import ASGITransport, AsyncClient


API_KEY = "test-admin-api-key"
OWNER_ADDRESS = "GTESTOWNER"


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def app(tmp_path):
    """Create a test app with in-memory DB and the in-process ledger."""
    os.environ["CERTLEDGER_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["CERTLEDGER_API_KEY"] = API_KEY
    os.environ["CERTLEDGER_LEDGER_BACKEND"] = "memory"
    os.environ["CERTLEDGER_LEDGER_OWNER_ADDRESS"] = OWNER_ADDRESS
    os.environ["CERTLEDGER_UPLOAD_DIR"] = str(tmp_path / "uploads")

    # Clear caches and singletons so new env vars take effect
    from certledger.common.config import get_settings
    get_settings.cache_clear()

    from certledger.deps import reset_singletons
    reset_singletons()

    from certledger.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from certledger.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


def _headers(user_id: str, role: str) -> dict[str, str]:
    return {"X-CertLedger-Api-Key": API_KEY, "X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def company_admin_headers():
    return _headers("user-company-1", "company_admin")


@pytest.fixture
def regulator_headers():
    return _headers("user-regulator-1", "regulator_admin")


@pytest.fixture
def super_admin_headers():
    return _headers("user-super-1", "super_admin")


@pytest.fixture
async def initialized_ledger(client, super_admin_headers):
    resp = await client.post("/ledger/init", headers=super_admin_headers)
    assert resp.status_code == 200
    return resp.json()
