# Runway Codegen Mapping
# Turns stored records into the path -> identifier table that gets rendered

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Optional, Union

from runway.exceptions import CodegenError
from runway.sync.state import RecordSet

# Nested table: directory names map to subtables, file names to identifiers
Tree = dict[str, Union[str, "Tree"]]


@dataclass(frozen=True)
class CodegenOptions:
    """How asset paths become keys of a generated table."""

    flatten: bool = False
    strip_prefix: Optional[str] = None
    strip_extension: bool = False


def build_mapping(
    records: RecordSet,
    id_template: Union[str, Callable[[str], str]] = "{id}",
    identities: Optional[Iterable[str]] = None,
) -> dict[str, str]:
    """
    Collect the final identifier of every synced asset.

    Args:
        records: Record set of the active target.
        id_template: Template containing ``{id}``, or a function formatting an identifier.
        identities: Restrict the mapping to these identities.

    Returns:
        Mapping of identity to formatted identifier, for records that have one.
    """
    if isinstance(id_template, str):
        template = id_template

        def format_id(identifier: str) -> str:
            return template.replace("{id}", identifier)

    else:
        format_id = id_template

    wanted = None if identities is None else set(identities)
    mapping: dict[str, str] = {}

    for identity in records.identities():
        if wanted is not None and identity not in wanted:
            continue
        record = records.get(identity)
        if record is None or record.id is None:
            continue
        mapping[identity] = format_id(record.id)

    return mapping


def transform_key(identity: str, options: CodegenOptions) -> str:
    """
    Apply prefix and extension stripping to an identity.

    Raises:
        CodegenError: If nothing is left of the key.
    """
    key = identity

    if options.strip_prefix:
        prefix = options.strip_prefix.strip("/")
        if prefix and key.startswith(prefix + "/"):
            key = key[len(prefix) + 1 :]

    if options.strip_extension:
        head, _, name = key.rpartition("/")
        stem, dot, _ = name.rpartition(".")
        if dot and stem:
            key = f"{head}/{stem}" if head else stem

    if not key or key.endswith("/"):
        raise CodegenError(f"'{identity}' has an empty key after stripping")
    return key


def build_tree(mapping: dict[str, str], options: Optional[CodegenOptions] = None) -> Tree:
    """
    Arrange a mapping as the table that gets rendered.

    Nested mode makes every directory a subtable; flattened mode keys a single
    table by the full path.

    Raises:
        CodegenError: If a key is both an asset and a directory, or two assets
            end up with the same key.
    """
    options = options or CodegenOptions()
    tree: Tree = {}
    origins: dict[str, str] = {}

    for identity in sorted(mapping):
        key = transform_key(identity, options)

        if options.flatten:
            if key in tree:
                raise CodegenError(f"'{identity}' and '{origins[key]}' both map to key '{key}'")
            tree[key] = mapping[identity]
            origins[key] = identity
            continue

        *dirs, leaf = key.split("/")
        node = tree
        walked: list[str] = []
        for name in dirs:
            walked.append(name)
            child = node.setdefault(name, {})
            if not isinstance(child, dict):
                raise CodegenError(f"'{'/'.join(walked)}' is both an asset and a directory (from '{identity}')")
            node = child

        if leaf in node:
            if isinstance(node[leaf], dict):
                raise CodegenError(f"'{key}' is both an asset and a directory (from '{identity}')")
            raise CodegenError(f"'{identity}' and '{origins[key]}' both map to key '{key}'")

        node[leaf] = mapping[identity]
        origins[key] = identity

    return tree
