# Runway Utilities Module
# Helper functions for path handling and content hashing

from runway.utils.hashing import (
    content_hash,
    read_and_hash,
)
from runway.utils.paths import (
    atomic_write,
    ensure_dir,
    expand_braces,
    get_relative_path,
    matches_any_pattern,
    matches_pattern,
    non_pattern_prefix,
    to_posix,
)

__all__ = [
    # Paths
    "ensure_dir",
    "atomic_write",
    "get_relative_path",
    "matches_pattern",
    "matches_any_pattern",
    "expand_braces",
    "non_pattern_prefix",
    "to_posix",
    # Hashing
    "content_hash",
    "read_and_hash",
]
