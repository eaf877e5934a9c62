"""SQLAlchemy model mirroring ledger transaction receipts."""

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from certledger.common.models import Base, TimestampMixin, generate_uuid


class TransactionRecordModel(Base, TimestampMixin):
    __tablename__ = "transaction_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    certificate_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("certificates.id"), nullable=True, index=True
    )
    purpose: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    tx_hash: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default="confirmed")
    network: Mapped[str | None] = mapped_column(String(32), nullable=True)
    receipt: Mapped[dict] = mapped_column(JSON, default=dict)
