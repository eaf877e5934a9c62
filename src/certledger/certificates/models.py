"""SQLAlchemy model for issued certificates."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from certledger.common.models import Base, TimestampMixin, generate_uuid


class CertificateModel(Base, TimestampMixin):
    __tablename__ = "certificates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    certificate_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    company_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    metadata_hash: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default="issued", index=True)
    network: Mapped[str | None] = mapped_column(String(32), nullable=True)
    requested_by_user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    # chain
    tx_hash_issue: Mapped[str | None] = mapped_column(String(128), nullable=True)
    on_chain_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # storage
    storage_provider: Mapped[str | None] = mapped_column(String(32), nullable=True)
    storage_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    storage_public_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    certificate_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # file
    original_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    size: Mapped[int | None] = mapped_column(Integer, nullable=True)
