"""Pydantic schemas for user endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from certledger.companies.schemas import CompanyResponse


class UserCreate(BaseModel):
    email: EmailStr
    name: str = ""
    role: Literal["company_admin", "regulator_admin", "super_admin"] = "company_admin"
    company_id: Optional[str] = None
    wallet_address: Optional[str] = Field(None, max_length=64)


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    company_id: Optional[str] = None
    wallet_address: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleChangeRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class GroupedUser(UserResponse):
    company: Optional[CompanyResponse] = None
    is_regulator: bool = False


class GroupedUsersResponse(BaseModel):
    regulator_admins: list[GroupedUser]
    company_admins: list[GroupedUser]
