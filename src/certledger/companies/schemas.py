"""Pydantic schemas for company endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_email: str = ""
    contact_phone: str = ""
    wallet_address: Optional[str] = Field(None, max_length=64)
    metadata: dict[str, Any] = {}


class CompanyResponse(BaseModel):
    id: str
    name: str
    contact_email: str
    contact_phone: str
    wallet_address: Optional[str] = None
    metadata: dict[str, Any] = {}
    created_at: datetime

    @classmethod
    def from_model(cls, company) -> "CompanyResponse":
        return cls(
            id=company.id,
            name=company.name,
            contact_email=company.contact_email or "",
            contact_phone=company.contact_phone or "",
            wallet_address=company.wallet_address,
            metadata=company.metadata_ or {},
            created_at=company.created_at,
        )
