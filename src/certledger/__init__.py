"""CertLedger: document hash issuance and verification on a ledger contract."""

from certledger.ledger.gateway import LedgerError, LedgerGateway, LedgerReceipt
from certledger.ledger.http_client import HttpLedgerGateway
from certledger.ledger.memory import InMemoryLedger
from certledger.storage.files import sha256_bytes, sha256_file

__all__ = [
    "HttpLedgerGateway",
    "InMemoryLedger",
    "LedgerError",
    "LedgerGateway",
    "LedgerReceipt",
    "sha256_bytes",
    "sha256_file",
]
__version__ = "0.1.0"
