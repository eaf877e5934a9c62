"""Role model and request authentication dependencies.

Identity is established upstream (auth gateway); requests reach this service
with the shared API key plus the caller's user id and role in headers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Header, HTTPException

from certledger.common.exceptions import AuthorizationError


class Role(str, Enum):
    COMPANY_ADMIN = "company_admin"
    REGULATOR_ADMIN = "regulator_admin"
    SUPER_ADMIN = "super_admin"


class Capability(str, Enum):
    ISSUE_CERTIFICATE = "issue_certificate"
    MANAGE_CERTIFICATES = "manage_certificates"
    VIEW_CERTIFICATES = "view_certificates"
    MANAGE_USERS = "manage_users"
    VIEW_USERS = "view_users"
    MANAGE_CONTRACT = "manage_contract"


_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.COMPANY_ADMIN: frozenset({
        Capability.ISSUE_CERTIFICATE,
        Capability.MANAGE_CERTIFICATES,
        Capability.VIEW_CERTIFICATES,
    }),
    Role.REGULATOR_ADMIN: frozenset({
        Capability.VIEW_CERTIFICATES,
        Capability.VIEW_USERS,
    }),
    Role.SUPER_ADMIN: frozenset(Capability),
}


def has_capability(role: Role | str, capability: Capability) -> bool:
    """Return True if ``role`` grants ``capability``. Unknown roles grant nothing."""
    try:
        role = Role(role)
    except ValueError:
        return False
    return capability in _CAPABILITIES[role]


@dataclass
class ActorContext:
    """Resolved caller identity available to request handlers."""
    user_id: Optional[str] = None
    role: Optional[Role] = None


async def require_api_key(
    x_certledger_api_key: str = Header(..., alias="X-CertLedger-Api-Key"),
) -> str:
    """FastAPI dependency that validates the shared API key from header."""
    from certledger.common.config import get_settings

    settings = get_settings()
    if x_certledger_api_key != settings.api_key:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return x_certledger_api_key


def require_capability(capability: Capability):
    """Build a dependency that resolves the actor and checks ``capability``."""

    async def dependency(
        x_certledger_api_key: str = Header(..., alias="X-CertLedger-Api-Key"),
        x_user_id: str = Header(..., alias="X-User-Id"),
        x_user_role: str = Header(..., alias="X-User-Role"),
    ) -> ActorContext:
        await require_api_key(x_certledger_api_key)
        if not has_capability(x_user_role, capability):
            raise AuthorizationError(f"Role '{x_user_role}' lacks '{capability.value}'")
        return ActorContext(user_id=x_user_id, role=Role(x_user_role))

    return dependency
