# Runway Codegen Module
# Generates source files mapping asset paths to synced identifiers

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from runway.codegen.formats import (
    render_json,
    render_luau,
    render_typescript,
    render_typescript_declaration,
)
from runway.codegen.tree import CodegenOptions, Tree, build_mapping, build_tree, transform_key
from runway.config.schema import CodegenConfig, CodegenFormat
from runway.exceptions import CodegenError, ConfigError
from runway.utils.paths import atomic_write

logger = logging.getLogger(__name__)

RENDERERS = {
    CodegenFormat.JSON: render_json,
    CodegenFormat.LUAU: render_luau,
    CodegenFormat.TYPESCRIPT: render_typescript,
    CodegenFormat.TYPESCRIPT_DECLARATION: render_typescript_declaration,
}


@dataclass
class CodegenFailure:
    """An output that could not be generated."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def render(mapping: dict[str, str], format: CodegenFormat, options: CodegenOptions | None = None) -> str:
    """
    Render a mapping in one output format.

    Args:
        mapping: Identity to identifier.
        format: Output format.
        options: Key transformation and nesting options.

    Returns:
        File contents; equal mappings always render to equal text.

    Raises:
        ConfigError: If the format is not supported.
        CodegenError: If the keys collide.
    """
    try:
        renderer = RENDERERS[CodegenFormat(format)]
    except (KeyError, ValueError):
        raise ConfigError(f"Unsupported codegen format: {format!r}") from None

    return renderer(build_tree(mapping, options))


def options_for(codegen: CodegenConfig) -> CodegenOptions:
    """Codegen options of a configured output."""
    return CodegenOptions(
        flatten=codegen.flatten,
        strip_prefix=codegen.strip_prefix,
        strip_extension=codegen.strip_extension,
    )


def generate(codegen: CodegenConfig, mapping: dict[str, str], root: Path) -> Path:
    """
    Render and write one configured output.

    The file is left untouched when its contents would not change.

    Returns:
        Path of the output file.

    Raises:
        CodegenError: If the output cannot be built or written.
    """
    path = root / codegen.path
    logger.debug(f"Generating {codegen.format.value} output at {path}")

    contents = render(mapping, codegen.format, options_for(codegen))

    try:
        if path.is_file() and path.read_text(encoding="utf-8") == contents:
            logger.debug(f"{path} is up to date")
            return path
        atomic_write(path, contents)
    except OSError as e:
        raise CodegenError(f"Could not write {path}: {e}") from e

    return path


def generate_all(codegens: Iterable[CodegenConfig], mapping: dict[str, str], root: Path) -> list[CodegenFailure]:
    """
    Generate every configured output.

    A failing output is logged and does not stop the others.

    Returns:
        List of failed outputs.
    """
    codegens = list(codegens)
    failures: list[CodegenFailure] = []

    logger.info(f"Generating {len(codegens)} outputs")

    for codegen in codegens:
        try:
            generate(codegen, mapping, root)
        except CodegenError as e:
            logger.error(str(e))
            failures.append(CodegenFailure(path=root / codegen.path, message=str(e)))

    if failures:
        logger.error(f"Codegen finished but {len(failures)} of {len(codegens)} outputs failed to generate")

    return failures


__all__ = [
    "CodegenFormat",
    "CodegenOptions",
    "CodegenFailure",
    "Tree",
    "build_mapping",
    "build_tree",
    "transform_key",
    "render",
    "generate",
    "generate_all",
    "options_for",
]
