"""Tests for role capabilities and the header auth dependencies."""

import pytest
from fastapi import HTTPException

from certledger.common.exceptions import AuthorizationError
from certledger.common.security import (
    Capability,
    Role,
    has_capability,
    require_api_key,
    require_capability,
)


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    monkeypatch.setenv("CERTLEDGER_API_KEY", "unit-key")
    from certledger.common.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestCapabilities:
    def test_company_admin(self):
        assert has_capability(Role.COMPANY_ADMIN, Capability.ISSUE_CERTIFICATE)
        assert has_capability("company_admin", Capability.MANAGE_CERTIFICATES)
        assert not has_capability(Role.COMPANY_ADMIN, Capability.MANAGE_USERS)
        assert not has_capability(Role.COMPANY_ADMIN, Capability.MANAGE_CONTRACT)

    def test_regulator_admin_is_read_only(self):
        assert has_capability(Role.REGULATOR_ADMIN, Capability.VIEW_CERTIFICATES)
        assert has_capability(Role.REGULATOR_ADMIN, Capability.VIEW_USERS)
        assert not has_capability(Role.REGULATOR_ADMIN, Capability.ISSUE_CERTIFICATE)

    def test_super_admin_has_everything(self):
        for capability in Capability:
            assert has_capability(Role.SUPER_ADMIN, capability)

    def test_unknown_role_has_nothing(self):
        assert not has_capability("auditor", Capability.VIEW_CERTIFICATES)
        assert not has_capability("", Capability.VIEW_CERTIFICATES)


class TestRequireApiKey:
    async def test_valid_key(self):
        assert await require_api_key("unit-key") == "unit-key"

    async def test_invalid_key(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_api_key("wrong")
        assert exc_info.value.status_code == 403


class TestRequireCapability:
    async def test_resolves_actor(self):
        dep = require_capability(Capability.ISSUE_CERTIFICATE)
        actor = await dep("unit-key", "user-1", "company_admin")
        assert actor.user_id == "user-1"
        assert actor.role is Role.COMPANY_ADMIN

    async def test_missing_capability(self):
        dep = require_capability(Capability.MANAGE_CONTRACT)
        with pytest.raises(AuthorizationError) as exc_info:
            await dep("unit-key", "user-1", "company_admin")
        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "FORBIDDEN"

    async def test_bad_key_checked_first(self):
        dep = require_capability(Capability.VIEW_CERTIFICATES)
        with pytest.raises(HTTPException):
            await dep("wrong", "user-1", "super_admin")
