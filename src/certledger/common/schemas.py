"""Shared Pydantic schemas for CertLedger."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "certledger"
    ledger_backend: str = "memory"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""
