# Runway Hashing Utilities
# Content fingerprints for change detection

import hashlib
from pathlib import Path

FINGERPRINT_ALGORITHM = "sha256"


def content_hash(content: str | bytes, *, algorithm: str = FINGERPRINT_ALGORITHM) -> str:
    """
    Calculate the fingerprint of in-memory content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def read_and_hash(path: Path, *, algorithm: str = FINGERPRINT_ALGORITHM) -> tuple[bytes, str]:
    """
    Read a file once and fingerprint exactly the bytes that were read.

    Returns:
        Tuple of (contents, hex digest).
    """
    contents = path.read_bytes()
    return contents, content_hash(contents, algorithm=algorithm)
