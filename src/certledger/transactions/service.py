"""Transaction record service — local mirror of ledger receipts."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from certledger.ledger.gateway import LedgerReceipt
from certledger.transactions.models import TransactionRecordModel

VALID_PURPOSES: frozenset[str] = frozenset({"issue", "init", "whitelist"})


class TransactionService:
    """Persists and queries transaction records."""

    async def record_receipt(
        self,
        session: AsyncSession,
        receipt: LedgerReceipt,
        purpose: str,
        certificate_id: str | None = None,
        network: str | None = None,
    ) -> TransactionRecordModel:
        if purpose not in VALID_PURPOSES:
            raise ValueError(f"Unknown transaction purpose: {purpose!r}")
        if not receipt.tx_hash:
            raise ValueError("Receipt has no transaction hash")
        record = TransactionRecordModel(
            certificate_id=certificate_id,
            purpose=purpose,
            tx_hash=receipt.tx_hash,
            status="confirmed" if receipt.succeeded else receipt.status.lower(),
            network=network,
            receipt=receipt.raw,
        )
        session.add(record)
        await session.flush()
        return record

    async def list_for_certificate(
        self, session: AsyncSession, certificate_id: str,
    ) -> list[TransactionRecordModel]:
        """Transactions for a certificate, newest first."""
        result = await session.execute(
            select(TransactionRecordModel)
            .where(TransactionRecordModel.certificate_id == certificate_id)
            .order_by(TransactionRecordModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_purpose(
        self, session: AsyncSession, purpose: str, limit: int = 50,
    ) -> list[TransactionRecordModel]:
        result = await session.execute(
            select(TransactionRecordModel)
            .where(TransactionRecordModel.purpose == purpose)
            .order_by(TransactionRecordModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def delete_for_certificate(
        self, session: AsyncSession, certificate_id: str,
    ) -> int:
        result = await session.execute(
            delete(TransactionRecordModel).where(
                TransactionRecordModel.certificate_id == certificate_id
            )
        )
        return result.rowcount or 0
