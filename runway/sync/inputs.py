# Runway Input Resolution
# Expands input globs into an ordered list of asset files

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from runway.sync.state import DURABLE_STATE_FILENAME, LOCAL_STATE_DIRNAME
from runway.utils.paths import get_relative_path, matches_any_pattern, matches_pattern, non_pattern_prefix

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({LOCAL_STATE_DIRNAME, ".git"})
IGNORED_FILES = frozenset({DURABLE_STATE_FILENAME, "runway.yaml"})


@dataclass(frozen=True)
class InputFile:
    """A resolved asset file and its identity."""

    identity: str
    path: Path


def asset_identity(root: Path, path: Path) -> str:
    """
    Compute the identity of a file: its POSIX path relative to the project root.

    Raises:
        ValueError: If the path is outside the root.
    """
    root = Path(os.path.normpath(root.absolute()))
    path = Path(os.path.normpath(path if path.is_absolute() else root / path))
    relative = get_relative_path(path, root) or get_relative_path(path.resolve(), root.resolve())
    if relative is None or relative == Path("."):
        raise ValueError(f"{path} is not inside the project root {root}")
    return relative.as_posix()


def is_ignored(identity: str, cache_dirs: Iterable[str] = ()) -> bool:
    """
    Check if an identity points at Runway's own files.

    Args:
        identity: Project-relative POSIX path.
        cache_dirs: Project-relative cache directories of local targets.
    """
    parts = identity.split("/")
    if parts[-1] in IGNORED_FILES or any(part in IGNORED_DIRS for part in parts[:-1]):
        return True
    return any(identity.startswith(cache_dir.rstrip("/") + "/") for cache_dir in cache_dirs)


def _walk(base: Path, skipped: frozenset[Path] = frozenset()) -> Iterable[Path]:
    """Yield files below base in a stable order, pruning skipped directories."""
    if base.is_file():
        yield base
        return

    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(
            d for d in dirnames if d not in IGNORED_DIRS and Path(dirpath, d) not in skipped
        )
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def resolve_inputs(
    root: Path,
    globs: list[str],
    exclude: list[str] | None = None,
    cache_dirs: Iterable[str] = (),
) -> list[InputFile]:
    """
    Resolve input globs to asset files.

    Files are returned glob by glob in declaration order, sorted by identity
    within each glob. A file matched by several globs appears once, at its
    first match.

    Args:
        root: Project root.
        globs: Project-relative glob patterns.
        exclude: Patterns removed from every glob's matches.
        cache_dirs: Project-relative cache directories, never treated as inputs.

    Returns:
        Ordered, de-duplicated list of InputFile.
    """
    root = root.resolve()
    exclude = exclude or []
    cache_dirs = list(cache_dirs)
    skipped = frozenset(root / cache_dir for cache_dir in cache_dirs)
    seen: set[str] = set()
    resolved: list[InputFile] = []

    for pattern in globs:
        base = root / non_pattern_prefix(pattern)
        if not base.exists():
            logger.debug(f"Input '{pattern}': {base} does not exist")
            continue

        matches: list[InputFile] = []
        for path in _walk(base, skipped):
            identity = asset_identity(root, path)
            if identity in seen or is_ignored(identity, cache_dirs):
                continue
            if not matches_pattern(identity, pattern) or matches_any_pattern(identity, exclude):
                continue
            seen.add(identity)
            matches.append(InputFile(identity, path))

        logger.debug(f"Input '{pattern}' matched {len(matches)} files")
        resolved.extend(sorted(matches, key=lambda f: f.identity))

    return resolved
