"""Dependency injection singletons for CertLedger.

Services receive their collaborators through their constructors; this module
only decides which concrete instances the running application shares.
"""

from certledger.audit.service import AuditService
from certledger.certificates.service import CertificateService
from certledger.common.config import CertLedgerSettings, get_settings
from certledger.common.database import DatabaseManager
from certledger.common.logging import get_logger
from certledger.companies.service import CompanyService
from certledger.ledger.gateway import LedgerGateway
from certledger.ledger.http_client import HttpLedgerGateway
from certledger.ledger.memory import InMemoryLedger
from certledger.storage.files import LocalFileStorage
from certledger.transactions.service import TransactionService
from certledger.users.service import UserService

_db: DatabaseManager | None = None
_ledger: LedgerGateway | None = None
_storage: LocalFileStorage | None = None
_audit: AuditService | None = None
_transactions: TransactionService | None = None
_certificates: CertificateService | None = None
_users: UserService | None = None
_companies: CompanyService | None = None


def build_ledger(settings: CertLedgerSettings) -> LedgerGateway:
    if settings.ledger_backend == "http":
        return HttpLedgerGateway(
            settings.ledger_url,
            service_token=settings.ledger_service_token,
            owner_address=settings.ledger_owner_address,
            timeout=settings.ledger_timeout,
        )
    if settings.ledger_backend == "memory":
        return InMemoryLedger(settings.ledger_owner_address)
    raise ValueError(f"Unknown ledger backend: {settings.ledger_backend!r}")


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_ledger() -> LedgerGateway:
    global _ledger
    if _ledger is None:
        _ledger = build_ledger(get_settings())
    return _ledger


def get_storage() -> LocalFileStorage:
    global _storage
    if _storage is None:
        settings = get_settings()
        if settings.storage_provider != LocalFileStorage.provider:
            raise ValueError(f"Unknown storage provider: {settings.storage_provider!r}")
        _storage = LocalFileStorage(settings.upload_dir, settings.public_base_url)
    return _storage


def get_audit_service() -> AuditService:
    global _audit
    if _audit is None:
        _audit = AuditService()
    return _audit


def get_transaction_service() -> TransactionService:
    global _transactions
    if _transactions is None:
        _transactions = TransactionService()
    return _transactions


def get_certificate_service() -> CertificateService:
    global _certificates
    if _certificates is None:
        _certificates = CertificateService(
            get_settings(),
            ledger=get_ledger(),
            storage=get_storage(),
            audit_service=get_audit_service(),
            transaction_service=get_transaction_service(),
            logger=get_logger("certificates"),
        )
    return _certificates


def get_user_service() -> UserService:
    global _users
    if _users is None:
        _users = UserService()
    return _users


def get_company_service() -> CompanyService:
    global _companies
    if _companies is None:
        _companies = CompanyService()
    return _companies


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _ledger, _storage, _audit, _transactions, _certificates, _users, _companies
    _db = None
    _ledger = None
    _storage = None
    _audit = None
    _transactions = None
    _certificates = None
    _users = None
    _companies = None
