"""CertLedger exception hierarchy.

Every error carries an HTTP-style ``status_code`` so the routing layer can map
it straight onto a response.
"""


class CertLedgerError(Exception):
    """Base exception for all CertLedger errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str = "",
        code: str = "CERTLEDGER_ERROR",
        status_code: int | None = None,
        detail: str = "",
    ):
        self.message = message
        self.code = code
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(CertLedgerError):
    """Raised when input is missing or malformed. Nothing has been written."""

    status_code = 400

    def __init__(self, message: str = "Invalid input", detail: str = ""):
        super().__init__(message, code="VALIDATION_FAILED", detail=detail)


class AuthorizationError(CertLedgerError):
    """Raised when the caller's role lacks a capability."""

    status_code = 403

    def __init__(self, message: str = "Not permitted"):
        super().__init__(message, code="FORBIDDEN")


class NotFoundError(CertLedgerError):
    """Raised when an entity cannot be found in the database."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictError(CertLedgerError):
    """Raised when an entity (or on-chain document) already exists."""

    status_code = 409

    def __init__(self, message: str = "Already exists", detail: str = ""):
        super().__init__(message, code="CONFLICT", detail=detail)


class UpstreamError(CertLedgerError):
    """Raised when a ledger call fails or returns an unusable receipt."""

    def __init__(self, message: str, status_code: int = 500, detail: str = ""):
        super().__init__(
            message, code="UPSTREAM_FAILED", status_code=status_code, detail=detail,
        )


class PersistenceError(CertLedgerError):
    """Raised when a primary database write fails."""

    def __init__(self, message: str = "Database write failed", detail: str = ""):
        super().__init__(message, code="PERSISTENCE_FAILED", detail=detail)
