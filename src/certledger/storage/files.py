"""Local file storage for uploaded certificate documents."""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def sha256_bytes(content: bytes) -> str:
    """Hex SHA-256 of ``content``; this is the metadata hash anchored on the ledger."""
    return hashlib.sha256(content).hexdigest()


def sha256_file(path: str | Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


@dataclass
class FileMeta:
    original_filename: str
    mime_type: str
    size: int


@dataclass
class StorageMeta:
    provider: str
    path: str
    public_url: str


class LocalFileStorage:
    """Stores files under ``upload_dir`` and serves them from ``public_base_url``."""

    provider = "local"

    def __init__(self, upload_dir: str | Path, public_base_url: str):
        self.upload_dir = Path(upload_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def save(
        self, content: bytes, original_filename: str, mime_type: str = "application/octet-stream",
    ) -> tuple[FileMeta, StorageMeta]:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(original_filename).suffix
        stored_name = f"{secrets.token_hex(8)}{suffix}"
        path = self.upload_dir / stored_name
        path.write_bytes(content)
        logger.info("Stored upload", extra={"path": str(path), "size": len(content)})
        return (
            FileMeta(
                original_filename=original_filename,
                mime_type=mime_type,
                size=len(content),
            ),
            StorageMeta(
                provider=self.provider,
                path=str(path),
                public_url=f"{self.public_base_url}/{stored_name}",
            ),
        )

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def delete(self, path: str) -> None:
        """Remove ``path``. Raises ``OSError`` on failure."""
        Path(path).unlink()
