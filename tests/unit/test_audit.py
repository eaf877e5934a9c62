"""Tests for the certificate audit trail and transaction records."""

import pytest

from certledger.audit.service import AuditService
from certledger.certificates.models import CertificateModel
from certledger.common.config import CertLedgerSettings
from certledger.common.database import DatabaseManager
from certledger.ledger.gateway import LedgerReceipt
from certledger.transactions.service import TransactionService


def make_settings(**overrides) -> CertLedgerSettings:
    defaults = {"db_url": "sqlite+aiosqlite://", "api_key": "k"}
    defaults.update(overrides)
    return CertLedgerSettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def audit_svc():
    return AuditService()


@pytest.fixture
def tx_svc():
    return TransactionService()


async def _create_certificate(db, metadata_hash="h1") -> str:
    async with db.get_session() as session:
        cert = CertificateModel(
            certificate_name="Diploma", subject="Jane", metadata_hash=metadata_hash,
        )
        session.add(cert)
        await session.flush()
        return cert.id


class TestAuditService:
    async def test_record_event(self, db, audit_svc):
        cert_id = await _create_certificate(db)
        async with db.get_session() as session:
            event = await audit_svc.record_event(
                session, cert_id, "issued",
                actor_user_id="user-1", actor_role="company_admin",
                details={"tx_hash": "0x1"},
            )
            assert event.id is not None
            assert event.certificate_id == cert_id
            assert event.details == {"tx_hash": "0x1"}

    async def test_unknown_event_type(self, db, audit_svc):
        cert_id = await _create_certificate(db)
        async with db.get_session() as session:
            with pytest.raises(ValueError):
                await audit_svc.record_event(session, cert_id, "exploded")

    async def test_events_newest_first(self, db, audit_svc):
        cert_id = await _create_certificate(db)
        async with db.get_session() as session:
            await audit_svc.record_event(session, cert_id, "issued")
            await audit_svc.record_event(session, cert_id, "comment")
            await audit_svc.record_event(session, cert_id, "revoked")
        async with db.get_session() as session:
            events = await audit_svc.get_events(session, cert_id)
            only_comments = await audit_svc.get_events(session, cert_id, event_type="comment")
            page = await audit_svc.get_events(session, cert_id, limit=1, offset=1)
        assert [e.event_type for e in events] == ["revoked", "comment", "issued"]
        assert len(only_comments) == 1
        assert [e.event_type for e in page] == ["comment"]

    async def test_latest_by_certificate(self, db, audit_svc):
        first = await _create_certificate(db, "h1")
        second = await _create_certificate(db, "h2")
        async with db.get_session() as session:
            await audit_svc.record_event(session, first, "issued", actor_user_id="a")
            await audit_svc.record_event(session, first, "comment", actor_user_id="b")
            await audit_svc.record_event(session, second, "issued", actor_user_id="c")
        async with db.get_session() as session:
            latest = await audit_svc.latest_by_certificate(session, [first, second, "none"])
        assert latest[first].actor_user_id == "b"
        assert latest[second].actor_user_id == "c"
        assert "none" not in latest

    async def test_latest_empty_ids(self, db, audit_svc):
        async with db.get_session() as session:
            assert await audit_svc.latest_by_certificate(session, []) == {}

    async def test_delete_for_certificate(self, db, audit_svc):
        cert_id = await _create_certificate(db)
        async with db.get_session() as session:
            await audit_svc.record_event(session, cert_id, "issued")
            await audit_svc.record_event(session, cert_id, "comment")
        async with db.get_session() as session:
            assert await audit_svc.delete_for_certificate(session, cert_id) == 2
        async with db.get_session() as session:
            assert await audit_svc.get_events(session, cert_id) == []


class TestTransactionService:
    async def test_record_receipt(self, db, tx_svc):
        cert_id = await _create_certificate(db)
        receipt = LedgerReceipt.from_payload({"status": "SUCCESS", "hash": "0xabc"})
        async with db.get_session() as session:
            record = await tx_svc.record_receipt(
                session, receipt, "issue", certificate_id=cert_id, network="testnet",
            )
            assert record.status == "confirmed"
            assert record.tx_hash == "0xabc"
            assert record.receipt == {"status": "SUCCESS", "hash": "0xabc"}

    async def test_failed_receipt_status(self, db, tx_svc):
        receipt = LedgerReceipt.from_payload({"status": "PENDING", "hash": "0x1"})
        async with db.get_session() as session:
            record = await tx_svc.record_receipt(session, receipt, "whitelist")
            assert record.status == "pending"

    async def test_rejects_bad_purpose(self, db, tx_svc):
        receipt = LedgerReceipt.from_payload({"status": "SUCCESS", "hash": "0x1"})
        async with db.get_session() as session:
            with pytest.raises(ValueError):
                await tx_svc.record_receipt(session, receipt, "transfer")

    async def test_rejects_missing_hash(self, db, tx_svc):
        receipt = LedgerReceipt.from_payload({"status": "SUCCESS"})
        async with db.get_session() as session:
            with pytest.raises(ValueError):
                await tx_svc.record_receipt(session, receipt, "init")

    async def test_list_and_delete(self, db, tx_svc):
        cert_id = await _create_certificate(db)
        async with db.get_session() as session:
            for i in range(2):
                receipt = LedgerReceipt.from_payload({"status": "SUCCESS", "hash": f"0x{i}"})
                await tx_svc.record_receipt(session, receipt, "issue", certificate_id=cert_id)
            await tx_svc.record_receipt(
                session, LedgerReceipt.from_payload({"status": "SUCCESS", "hash": "0xi"}), "init",
            )
        async with db.get_session() as session:
            assert len(await tx_svc.list_for_certificate(session, cert_id)) == 2
            assert [r.tx_hash for r in await tx_svc.list_by_purpose(session, "init")] == ["0xi"]
            assert await tx_svc.delete_for_certificate(session, cert_id) == 2
            assert await tx_svc.list_for_certificate(session, cert_id) == []
