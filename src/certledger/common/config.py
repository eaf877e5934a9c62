"""CertLedger configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "api_key": "insecure-admin-key-change-me",
}


class CertLedgerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CERTLEDGER_")

    environment: str = "development"
    log_level: str = "INFO"

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/certledger.db"

    # API
    api_title: str = "CertLedger"
    api_version: str = "0.1.0"
    api_key: str = "insecure-admin-key-change-me"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Ledger: "memory" runs the in-process ledger, "http" talks to the contract relay.
    ledger_backend: str = "memory"
    ledger_url: str = "http://localhost:8545"
    ledger_service_token: str = ""
    ledger_timeout: float = 30.0
    ledger_network: str = "testnet"
    ledger_owner_address: str = "GOWNER"

    # File storage
    storage_provider: str = "local"
    upload_dir: str = "./data/uploads"
    public_base_url: str = "http://localhost:8080/files"

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"CERTLEDGER_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if self.environment != "development" and self.ledger_backend == "memory":
            raise RuntimeError(
                "The in-memory ledger is for development only. "
                "Set CERTLEDGER_LEDGER_BACKEND=http and CERTLEDGER_LEDGER_URL."
            )

        if insecure_fields:
            warnings.warn(
                "Using the insecure default API key, set CERTLEDGER_API_KEY "
                "for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> CertLedgerSettings:
    settings = CertLedgerSettings()
    settings.validate_for_production()
    return settings
