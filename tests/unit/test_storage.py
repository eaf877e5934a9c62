"""Tests for local file storage and document hashing."""

import hashlib

import pytest

from certledger.storage.files import LocalFileStorage, sha256_bytes, sha256_file


def test_sha256_bytes():
    assert sha256_bytes(b"hello") == hashlib.sha256(b"hello").hexdigest()


def test_sha256_file_matches_bytes(tmp_path):
    content = b"x" * 200_000
    path = tmp_path / "big.bin"
    path.write_bytes(content)
    assert sha256_file(path) == sha256_bytes(content)


class TestLocalFileStorage:
    @pytest.fixture
    def storage(self, tmp_path):
        return LocalFileStorage(tmp_path / "uploads", "http://files.test/")

    def test_save_creates_dir_and_file(self, storage):
        file_meta, storage_meta = storage.save(b"pdf-bytes", "cert.pdf", "application/pdf")
        assert storage.upload_dir.is_dir()
        assert storage.exists(storage_meta.path)
        assert storage_meta.provider == "local"
        assert storage_meta.path.endswith(".pdf")
        assert storage_meta.public_url.startswith("http://files.test/")
        assert "//" not in storage_meta.public_url.removeprefix("http://")
        assert file_meta.original_filename == "cert.pdf"
        assert file_meta.mime_type == "application/pdf"
        assert file_meta.size == 9

    def test_same_name_gets_distinct_paths(self, storage):
        _, first = storage.save(b"a", "cert.pdf")
        _, second = storage.save(b"b", "cert.pdf")
        assert first.path != second.path

    def test_delete(self, storage):
        _, meta = storage.save(b"a", "cert.pdf")
        storage.delete(meta.path)
        assert not storage.exists(meta.path)

    def test_delete_missing_raises(self, storage, tmp_path):
        with pytest.raises(OSError):
            storage.delete(str(tmp_path / "nothing.pdf"))
