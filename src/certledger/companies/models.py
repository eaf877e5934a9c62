"""SQLAlchemy model for companies (issuing organisations)."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from certledger.common.models import Base, TimestampMixin, generate_uuid


class CompanyModel(Base, TimestampMixin):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_email: Mapped[str] = mapped_column(String(255), default="")
    contact_phone: Mapped[str] = mapped_column(String(50), default="")
    wallet_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, default=dict)
