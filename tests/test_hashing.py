# Tests for runway.utils.hashing
# Content fingerprints for change detection

import hashlib

import pytest

from runway.utils.hashing import content_hash, read_and_hash


class TestContentHash:
    """Tests for content_hash."""

    def test_string_input(self):
        h = content_hash("hello")
        assert isinstance(h, str)
        assert len(h) == 64  # SHA256 hex length

    def test_bytes_input(self):
        h = content_hash(b"hello")
        assert h == content_hash("hello")

    def test_matches_sha256(self):
        assert content_hash(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_deterministic(self):
        assert content_hash("test") == content_hash("test")

    def test_different_content(self):
        assert content_hash("a") != content_hash("b")

    def test_empty_content(self):
        assert content_hash(b"") == hashlib.sha256(b"").hexdigest()


class TestReadAndHash:
    """Tests for read_and_hash."""

    def test_returns_bytes_and_their_hash(self, temp_dir):
        f = temp_dir / "sound.ogg"
        f.write_bytes(b"ogg bytes")
        contents, digest = read_and_hash(f)
        assert contents == b"ogg bytes"
        assert digest == content_hash(contents)

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(OSError):
            read_and_hash(temp_dir / "missing.png")
