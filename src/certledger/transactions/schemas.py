"""Pydantic schemas for transaction record responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TransactionResponse(BaseModel):
    id: str
    certificate_id: Optional[str] = None
    purpose: str
    tx_hash: str
    status: str
    network: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
