# Runway Path Utilities
# Atomic writes, identity normalization and glob matching

import fnmatch
import os
import tempfile
from pathlib import Path

GLOB_PATTERN_CHARACTERS = "*?[]{}"


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file in the target directory and an atomic rename, so
    readers see either the old or the new file, never a partial one.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding, newline="\n") as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def to_posix(path: str | Path) -> str:
    """Convert a relative path to a forward-slash string."""
    return Path(path).as_posix()


def get_relative_path(path: Path, base: Path) -> Path | None:
    """
    Get path relative to base, or None if not relative.

    Args:
        path: Path to make relative.
        base: Base path.

    Returns:
        Relative path or None if not relative.
    """
    try:
        return path.relative_to(base)
    except ValueError:
        return None


def matches_pattern(path: str | Path, pattern: str) -> bool:
    """
    Check if a relative POSIX path matches a glob pattern.

    Supports:
    - * for any characters within a path component
    - ** for any number of path components (including none)
    - ? for single character
    - {a,b} for alternatives, which may span path components

    Args:
        path: Path to check.
        pattern: Glob pattern.

    Returns:
        True if path matches pattern.
    """
    path_parts = to_posix(path).split("/")
    return any(_match_parts(path_parts, expanded.strip("/").split("/")) for expanded in expand_braces(pattern))


def expand_braces(pattern: str) -> list[str]:
    """
    Expand brace alternatives in a glob.

    ``assets/*.{png,jpg}`` -> ``["assets/*.png", "assets/*.jpg"]``. Groups may
    nest; a group without a comma is kept literally.

    Raises:
        ValueError: If braces are unbalanced.
    """
    start = pattern.find("{")
    if start == -1:
        if "}" in pattern:
            raise ValueError(f"Unbalanced '}}' in pattern: {pattern}")
        return [pattern]

    depth = 0
    options: list[str] = []
    option_start = start + 1
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                options.append(pattern[option_start:index])
                break
        elif char == "," and depth == 1:
            options.append(pattern[option_start:index])
            option_start = index + 1
    else:
        raise ValueError(f"Unbalanced '{{' in pattern: {pattern}")

    head, tail = pattern[:start], pattern[index + 1 :]
    if "}" in head:
        raise ValueError(f"Unbalanced '}}' in pattern: {pattern}")
    if len(options) == 1:
        # {png} has no alternatives; match the braces literally
        return [f"{head}[{{]{options[0]}[}}]{rest}" for rest in expand_braces(tail)]

    expanded: list[str] = []
    for option in options:
        for candidate in expand_braces(head + option + tail):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def _match_parts(path_parts: list[str], pattern_parts: list[str]) -> bool:
    if not pattern_parts:
        return not path_parts

    head, rest = pattern_parts[0], pattern_parts[1:]

    if head == "**":
        # ** consumes zero or more leading components
        return any(_match_parts(path_parts[i:], rest) for i in range(len(path_parts) + 1))

    if not path_parts:
        return False

    return fnmatch.fnmatchcase(path_parts[0], head) and _match_parts(path_parts[1:], rest)


def matches_any_pattern(path: str | Path, patterns: list[str]) -> bool:
    """
    Check if path matches any of the given patterns.

    Args:
        path: Path to check.
        patterns: List of glob patterns.

    Returns:
        True if path matches any pattern.
    """
    return any(matches_pattern(path, p) for p in patterns)


def non_pattern_prefix(pattern: str) -> str:
    """
    Get the leading components of a glob that contain no pattern characters.

    ``assets/ui/**/*.png`` -> ``assets/ui``. Used to limit watched directories.
    """
    prefix: list[str] = []
    for component in pattern.strip("/").split("/"):
        if any(c in component for c in GLOB_PATTERN_CHARACTERS):
            break
        prefix.append(component)
    return "/".join(prefix)
