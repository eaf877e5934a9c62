"""Certificate service — issue, verify, list, update and delete certificates.

Issuance anchors the document hash on the ledger first and only then writes
the local record. The ledger receipt and the certificate row are the primary
outcome of every call; transaction records, audit events and file cleanup are
auxiliary and never fail the operation.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from certledger.audit.models import AuditEventModel
from certledger.audit.service import AuditService
from certledger.certificates.models import CertificateModel
from certledger.common.config import CertLedgerSettings
from certledger.common.exceptions import (
    CertLedgerError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from certledger.ledger.gateway import LedgerGateway, LedgerReceipt
from certledger.storage.files import FileMeta, LocalFileStorage, StorageMeta, sha256_bytes
from certledger.transactions.models import TransactionRecordModel
from certledger.transactions.service import TransactionService

T = TypeVar("T")

REQUIRED_FIELDS = ("certificate_name", "subject", "metadata_hash", "requested_by_user_id")
EDITABLE_FIELDS = ("certificate_name", "subject", "status")
CERTIFICATE_STATUSES = frozenset({"issued", "revoked"})
SORTABLE_FIELDS = {
    "created_at": CertificateModel.created_at,
    "certificate_name": CertificateModel.certificate_name,
    "subject": CertificateModel.subject,
    "status": CertificateModel.status,
}


# ── Results ──

@dataclass
class AuxiliaryOutcome:
    """Outcome of a best-effort side write."""
    name: str
    ok: bool
    error: Optional[str] = None


@dataclass
class IssuanceResult:
    cert: CertificateModel
    tx: Optional[TransactionRecordModel] = None
    auxiliary: list[AuxiliaryOutcome] = field(default_factory=list)


@dataclass
class CertificateDetail:
    certificate: CertificateModel
    events: list[AuditEventModel]
    transactions: list[TransactionRecordModel]


@dataclass
class UpdateResult:
    certificate: CertificateModel
    auxiliary: list[AuxiliaryOutcome] = field(default_factory=list)


@dataclass
class DeletionResult:
    deleted_counts: dict[str, int]
    auxiliary: list[AuxiliaryOutcome] = field(default_factory=list)


@dataclass
class LedgerCallResult:
    receipt: LedgerReceipt
    tx: Optional[TransactionRecordModel] = None
    auxiliary: list[AuxiliaryOutcome] = field(default_factory=list)

    @property
    def hash(self) -> Optional[str]:
        return self.receipt.tx_hash


class CertificateService:
    """Certificate lifecycle over the ledger gateway and the database."""

    def __init__(
        self,
        settings: CertLedgerSettings,
        ledger: LedgerGateway,
        storage: LocalFileStorage,
        audit_service: AuditService,
        transaction_service: TransactionService,
        logger: logging.Logger | None = None,
    ):
        self.settings = settings
        self.ledger = ledger
        self.storage = storage
        self.audit = audit_service
        self.transactions = transaction_service
        self.logger = logger or logging.getLogger(__name__)

    # ── Issue ──

    async def create_certificate(
        self,
        session: AsyncSession,
        certificate_name: str | None = None,
        subject: str | None = None,
        metadata_hash: str | None = None,
        requested_by_user_id: str | None = None,
        company_id: str | None = None,
        file_meta: FileMeta | None = None,
        storage_meta: StorageMeta | None = None,
        network: str | None = None,
        actor_role: str | None = None,
    ) -> IssuanceResult:
        """Anchor ``metadata_hash`` on the ledger and record the certificate.

        Steps:
        1. Validate required fields
        2. Duplicate check on the ledger
        3. store_document and receipt checks
        4. Persist the certificate (authoritative)
        5. Best-effort transaction record and ``issued`` audit event
        """
        supplied = {
            "certificate_name": certificate_name,
            "subject": subject,
            "metadata_hash": metadata_hash,
            "requested_by_user_id": requested_by_user_id,
        }
        missing = [name for name in REQUIRED_FIELDS if not supplied[name]]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        network = network or self.settings.ledger_network

        # 2. Duplicate check. Advisory only, the store call can still race.
        try:
            existing = await self.ledger.read_document(metadata_hash)
        except Exception as exc:
            self.logger.exception("Ledger read_document failed", extra={"doc_hash": metadata_hash})
            raise UpstreamError(
                "Failed to verify existing document on chain", detail=str(exc),
            ) from exc
        if existing:
            raise ConflictError(
                "A document with the same metadataHash already exists on chain",
            )

        # 3. Submit
        try:
            payload = await self.ledger.store_document(certificate_name, metadata_hash, None)
        except Exception as exc:
            self.logger.exception("Ledger store_document failed", extra={"doc_hash": metadata_hash})
            raise UpstreamError(
                "Blockchain store_document call failed", status_code=502, detail=str(exc),
            ) from exc

        receipt = LedgerReceipt.from_payload(payload)
        if not receipt.succeeded:
            raise UpstreamError(
                "Blockchain store_document failed", detail=f"status={receipt.status or 'missing'}",
            )
        if not receipt.tx_hash:
            raise UpstreamError("Missing txHash from blockchain receipt")

        # 4. Persist. The hash is on chain now, so a failure here leaves an orphan.
        cert = CertificateModel(
            certificate_name=certificate_name,
            subject=subject,
            company_id=company_id,
            metadata_hash=metadata_hash,
            status="issued",
            network=network,
            requested_by_user_id=requested_by_user_id,
            tx_hash_issue=receipt.tx_hash,
            on_chain_id=receipt.tx_hash,
        )
        if file_meta is not None:
            _apply_file_meta(cert, file_meta)
        if storage_meta is not None:
            _apply_storage_meta(cert, storage_meta)

        try:
            session.add(cert)
            await session.flush()
        except SQLAlchemyError as exc:
            self.logger.error(
                "Certificate write failed after ledger store",
                extra={"doc_hash": metadata_hash, "tx_hash": receipt.tx_hash},
            )
            raise PersistenceError(
                "Failed to save certificate",
                detail=f"on-chain tx {receipt.tx_hash}: {exc}",
            ) from exc

        # 5. Auxiliary writes
        tx, tx_outcome = await self._best_effort(
            session, "transaction_record",
            lambda: self.transactions.record_receipt(
                session, receipt, "issue", certificate_id=cert.id, network=network,
            ),
        )
        _, event_outcome = await self._best_effort(
            session, "audit_event",
            lambda: self.audit.record_event(
                session, cert.id, "issued",
                actor_user_id=requested_by_user_id,
                actor_role=actor_role,
                details={"tx_hash": receipt.tx_hash, "network": network},
            ),
        )

        self.logger.info(
            "Certificate issued",
            extra={"certificate_id": cert.id, "tx_hash": receipt.tx_hash},
        )
        return IssuanceResult(cert=cert, tx=tx, auxiliary=[tx_outcome, event_outcome])

    async def issue_from_upload(
        self,
        session: AsyncSession,
        content: bytes,
        original_filename: str,
        mime_type: str,
        **fields: Any,
    ) -> IssuanceResult:
        """Store an uploaded document, hash it and issue a certificate for it.

        The stored file is removed again if issuance fails.
        """
        if not content:
            raise ValidationError("Uploaded file is empty")
        file_meta, storage_meta = self.storage.save(content, original_filename, mime_type)
        try:
            return await self.create_certificate(
                session,
                metadata_hash=sha256_bytes(content),
                file_meta=file_meta,
                storage_meta=storage_meta,
                **fields,
            )
        except Exception:
            self._remove_file(storage_meta.path, level=logging.WARNING)
            raise

    # ── Ledger reads ──

    async def check_certificate_issued(self, doc_hash: str) -> dict[str, Any]:
        """Ask the ledger whether ``doc_hash`` is anchored."""
        try:
            value = await self.ledger.verify_document(doc_hash)
        except Exception as exc:
            self.logger.exception("Ledger verify_document failed", extra={"doc_hash": doc_hash})
            raise UpstreamError("Failed to verify document on chain", detail=str(exc)) from exc
        return {"issued": bool(value), "value": value}

    async def read_document(self, doc_hash: str) -> Optional[dict[str, Any]]:
        try:
            return await self.ledger.read_document(doc_hash)
        except CertLedgerError:
            raise
        except Exception as exc:
            raise UpstreamError("readDocument failed", detail=str(exc)) from exc

    async def is_address_whitelisted(self, address: str) -> bool:
        try:
            return bool(await self.ledger.is_whitelisted(address))
        except CertLedgerError:
            raise
        except Exception as exc:
            raise UpstreamError("isAddressWhitelisted failed", detail=str(exc)) from exc

    # ── Read ──

    async def get_all_certificates(
        self,
        session: AsyncSession,
        filters: dict[str, Any] | None = None,
        page: int = 1,
        limit: int | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> dict[str, Any]:
        """Paginated certificate summaries with the latest signer of each."""
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort by '{sort_by}'")
        if sort_order not in ("asc", "desc"):
            raise ValidationError("sort_order must be 'asc' or 'desc'")
        page = max(page, 1)
        limit = min(max(limit or self.settings.default_page_size, 1), self.settings.max_page_size)

        conditions = _filter_conditions(filters or {})
        sort_column = SORTABLE_FIELDS[sort_by]
        order = sort_column.asc() if sort_order == "asc" else sort_column.desc()

        try:
            count_result = await session.execute(
                select(func.count(CertificateModel.id)).where(*conditions)
            )
            total = count_result.scalar() or 0

            result = await session.execute(
                select(CertificateModel)
                .where(*conditions)
                .order_by(order, CertificateModel.id)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            certs = list(result.scalars().all())
            latest = await self.audit.latest_by_certificate(session, [c.id for c in certs])
        except SQLAlchemyError as exc:
            self.logger.exception("Listing certificates failed")
            raise CertLedgerError(
                "Failed to retrieve certificates", code="DB_ERROR", detail=str(exc),
            ) from exc

        return {
            "certificates": [_summarize(c, latest.get(c.id)) for c in certs],
            "total": total,
            "current_page": page,
            "total_pages": math.ceil(total / limit),
        }

    async def get_certificate(
        self, session: AsyncSession, certificate_id: str,
    ) -> CertificateModel | None:
        return await session.get(CertificateModel, certificate_id)

    async def get_certificate_by_id(
        self, session: AsyncSession, certificate_id: str,
    ) -> CertificateDetail:
        cert = await self.get_certificate(session, certificate_id)
        if cert is None:
            raise NotFoundError("Certificate not found")
        events = await self.audit.get_events(session, cert.id, limit=200)
        transactions = await self.transactions.list_for_certificate(session, cert.id)
        return CertificateDetail(certificate=cert, events=events, transactions=transactions)

    # ── Update ──

    async def update_certificate(
        self,
        session: AsyncSession,
        certificate_id: str,
        update_data: dict[str, Any] | None = None,
        new_file_meta: FileMeta | None = None,
        new_storage_meta: StorageMeta | None = None,
        updated_by_user_id: str | None = None,
        updated_by_role: str | None = None,
    ) -> UpdateResult:
        cert = await self.get_certificate(session, certificate_id)
        if cert is None:
            raise NotFoundError("Certificate not found")

        update_data = update_data or {}
        if "status" in update_data and update_data["status"] not in CERTIFICATE_STATUSES:
            raise ValidationError(f"Invalid status '{update_data['status']}'")

        changed = []
        for field_name in EDITABLE_FIELDS:
            if update_data.get(field_name) is not None:
                setattr(cert, field_name, update_data[field_name])
                changed.append(field_name)

        old_path = cert.storage_path
        if new_file_meta is not None:
            _apply_file_meta(cert, new_file_meta)
        if new_storage_meta is not None:
            _apply_storage_meta(cert, new_storage_meta)

        # The old file may only go once the new path is durable.
        await self._commit(session, "Failed to update certificate", certificate_id=cert.id)

        auxiliary = []
        file_replaced = new_storage_meta is not None
        if file_replaced and old_path and old_path != new_storage_meta.path:
            outcome = self._remove_file(old_path, level=logging.WARNING)
            if outcome is not None:
                auxiliary.append(outcome)

        _, event_outcome = await self._best_effort(
            session, "audit_event",
            lambda: self.audit.record_event(
                session, cert.id, "comment",
                actor_user_id=updated_by_user_id,
                actor_role=updated_by_role,
                details={"action": "updated", "fields": changed, "file_replaced": file_replaced},
            ),
        )
        auxiliary.append(event_outcome)

        self.logger.info("Certificate updated", extra={"certificate_id": cert.id, "fields": changed})
        return UpdateResult(certificate=cert, auxiliary=auxiliary)

    # ── Delete ──

    async def delete_certificate(
        self,
        session: AsyncSession,
        certificate_id: str,
        deleted_by_user_id: str | None = None,
    ) -> DeletionResult:
        cert = await self.get_certificate(session, certificate_id)
        if cert is None:
            raise NotFoundError("Certificate not found")

        try:
            events = await self.audit.delete_for_certificate(session, cert.id)
            transactions = await self.transactions.delete_for_certificate(session, cert.id)
        except SQLAlchemyError as exc:
            self.logger.exception("Deleting certificate history failed", extra={"certificate_id": cert.id})
            raise PersistenceError("Failed to delete certificate", detail=str(exc)) from exc
        storage_path = cert.storage_path
        await session.delete(cert)
        await self._commit(session, "Failed to delete certificate", certificate_id=certificate_id)

        files_deleted = 0
        auxiliary = []
        if storage_path:
            outcome = self._remove_file(storage_path, level=logging.ERROR)
            if outcome is not None:
                auxiliary.append(outcome)
                files_deleted = int(outcome.ok)

        self.logger.info(
            "Certificate deleted",
            extra={
                "certificate_id": certificate_id,
                "deleted_by": deleted_by_user_id,
                "events": events,
                "transactions": transactions,
            },
        )
        return DeletionResult(
            deleted_counts={
                "certificate": 1,
                "events": events,
                "transactions": transactions,
                "files_deleted": files_deleted,
            },
            auxiliary=auxiliary,
        )

    # ── Contract admin ──

    async def init_contract(self, session: AsyncSession) -> LedgerCallResult:
        return await self._ledger_admin_call(session, "init_contract", "init", self.ledger.init_contract)

    async def whitelist_address(self, session: AsyncSession, address: str) -> LedgerCallResult:
        if not address:
            raise ValidationError("address is required")
        return await self._ledger_admin_call(
            session, "whitelist_address", "whitelist",
            lambda: self.ledger.whitelist_address(address),
        )

    # ── Internal helpers ──

    async def _ledger_admin_call(
        self,
        session: AsyncSession,
        operation: str,
        purpose: str,
        call: Callable[[], Awaitable[dict[str, Any]]],
    ) -> LedgerCallResult:
        try:
            payload = await call()
        except Exception as exc:
            self.logger.exception("Ledger %s failed", operation)
            raise UpstreamError(
                f"Blockchain {operation} call failed", status_code=502, detail=str(exc),
            ) from exc

        receipt = LedgerReceipt.from_payload(payload)
        if not receipt.succeeded:
            raise UpstreamError(
                f"Blockchain {operation} failed", detail=f"status={receipt.status or 'missing'}",
            )

        tx, outcome = await self._best_effort(
            session, "transaction_record",
            lambda: self.transactions.record_receipt(
                session, receipt, purpose, network=self.settings.ledger_network,
            ),
        )
        return LedgerCallResult(receipt=receipt, tx=tx, auxiliary=[outcome])

    async def _commit(self, session: AsyncSession, message: str, **context: Any) -> None:
        """Flush and commit the primary write, raising ``PersistenceError`` on failure."""
        try:
            await session.flush()
            await session.commit()
        except SQLAlchemyError as exc:
            self.logger.exception(message, extra=context)
            raise PersistenceError(message, detail=str(exc)) from exc

    async def _best_effort(
        self,
        session: AsyncSession,
        name: str,
        write: Callable[[], Awaitable[T]],
    ) -> tuple[Optional[T], AuxiliaryOutcome]:
        """Run ``write`` inside a SAVEPOINT; log and report failure instead of raising."""
        try:
            async with session.begin_nested():
                value = await write()
        except Exception as exc:
            self.logger.exception("Best-effort %s write failed", name)
            return None, AuxiliaryOutcome(name=name, ok=False, error=str(exc))
        return value, AuxiliaryOutcome(name=name, ok=True)

    def _remove_file(self, path: str, level: int) -> AuxiliaryOutcome | None:
        """Delete a stored file. Returns None when there was nothing to delete."""
        try:
            if not self.storage.exists(path):
                return None
            self.storage.delete(path)
        except Exception as exc:
            self.logger.log(level, "Failed to delete stored file", extra={"path": path, "error": str(exc)})
            return AuxiliaryOutcome(name="file_cleanup", ok=False, error=str(exc))
        return AuxiliaryOutcome(name="file_cleanup", ok=True)


def _apply_file_meta(cert: CertificateModel, meta: FileMeta) -> None:
    cert.original_filename = meta.original_filename
    cert.mime_type = meta.mime_type
    cert.size = meta.size


def _apply_storage_meta(cert: CertificateModel, meta: StorageMeta) -> None:
    cert.storage_provider = meta.provider
    cert.storage_path = meta.path
    cert.storage_public_url = meta.public_url
    cert.certificate_url = meta.public_url


def _filter_conditions(filters: dict[str, Any]) -> list:
    conditions = []
    for key in ("status", "company_id", "subject", "requested_by_user_id"):
        if filters.get(key):
            conditions.append(getattr(CertificateModel, key) == filters[key])
    if filters.get("search"):
        pattern = f"%{filters['search']}%"
        conditions.append(or_(
            CertificateModel.certificate_name.ilike(pattern),
            CertificateModel.subject.ilike(pattern),
        ))
    return conditions


def _summarize(cert: CertificateModel, latest: AuditEventModel | None) -> dict[str, Any]:
    return {
        "id": cert.id,
        "certificate_name": cert.certificate_name,
        "subject": cert.subject,
        "company_id": cert.company_id,
        "status": cert.status,
        "tx_hash": cert.tx_hash_issue,
        "certificate_url": cert.certificate_url,
        "original_filename": cert.original_filename,
        "signed_by": latest.actor_user_id if latest else None,
        "signed_by_role": latest.actor_role if latest else None,
        "created_at": cert.created_at,
    }
