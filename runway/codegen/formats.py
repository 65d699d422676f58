# Runway Codegen Formats
# Renderers for JSON, Luau and TypeScript outputs

import json
import re

from runway.codegen.tree import Tree

HEADER = "This file was @generated by Runway. It is not intended for manual editing."

LUAU_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TYPESCRIPT_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

LUAU_KEYWORDS = frozenset(
    {
        "and",
        "break",
        "continue",
        "do",
        "else",
        "elseif",
        "end",
        "export",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "type",
        "until",
        "while",
    }
)

_LUAU_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def render_json(tree: Tree) -> str:
    """Render as pretty-printed JSON with sorted keys."""
    return json.dumps(tree, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


# Luau


def luau_string(value: str) -> str:
    """Quote a string as a Luau literal."""
    escaped = []
    for char in value:
        if char in _LUAU_ESCAPES:
            escaped.append(_LUAU_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\{ord(char):03d}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'


def luau_key(key: str) -> str:
    """Format a table key, bracketing anything that is not a plain name."""
    if LUAU_IDENTIFIER.match(key) and key not in LUAU_KEYWORDS:
        return key
    return f"[{luau_string(key)}]"


def _luau_table(tree: Tree, depth: int) -> str:
    indent = "\t" * depth
    lines = ["{"]
    for key in sorted(tree):
        value = tree[key]
        rendered = _luau_table(value, depth + 1) if isinstance(value, dict) else luau_string(value)
        lines.append(f"{indent}\t{luau_key(key)} = {rendered},")
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def render_luau(tree: Tree) -> str:
    """Render as a Luau module returning a table."""
    return f"-- {HEADER}\nreturn {_luau_table(tree, 0)}\n"


# TypeScript


def typescript_string(value: str) -> str:
    """Quote a string as a TypeScript literal."""
    return json.dumps(value, ensure_ascii=False)


def typescript_key(key: str) -> str:
    """Format an object key, quoting anything that is not an identifier."""
    if TYPESCRIPT_IDENTIFIER.match(key):
        return key
    return typescript_string(key)


def _typescript_object(tree: Tree, depth: int, declaration: bool) -> str:
    indent = "\t" * depth
    terminator = ";" if declaration else ","
    lines = ["{"]
    for key in sorted(tree):
        value = tree[key]
        if isinstance(value, dict):
            rendered = _typescript_object(value, depth + 1, declaration)
        elif declaration:
            rendered = "string"
        else:
            rendered = typescript_string(value)
        lines.append(f"{indent}\t{typescript_key(key)}: {rendered}{terminator}")
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def render_typescript(tree: Tree) -> str:
    """Render as a TypeScript module with a constant default export."""
    return f"// {HEADER}\nexport default {_typescript_object(tree, 0, False)} as const;\n"


def render_typescript_declaration(tree: Tree) -> str:
    """Render as a TypeScript declaration file describing the table's shape."""
    return f"// {HEADER}\ndeclare const assets: {_typescript_object(tree, 0, True)};\n\nexport = assets;\n"
