"""Dotted scope names used by captures and theme rules."""

import re

# Scope names fired by the bundled tree-sitter highlight queries
HIGHLIGHT_NAMES: tuple[str, ...] = (
    "attribute",
    "comment",
    "constant",
    "constant.builtin",
    "constructor",
    "escape",
    "function",
    "function.builtin",
    "function.method",
    "function.macro",
    "include",
    "keyword",
    "label",
    "namespace",
    "number",
    "operator",
    "property",
    "punctuation",
    "punctuation.bracket",
    "punctuation.delimiter",
    "repeat",
    "string",
    "type",
    "type.builtin",
    "variable",
    "variable.builtin",
    "variable.parameter",
)

SCOPE_COMPONENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

Scope = tuple[str, ...]


def parse_scope(value: str) -> Scope | None:
    """Split a dotted scope string into its components.

    Args:
        value: Scope string such as ``"keyword.control"``.

    Returns:
        Tuple of components, or None if the string is not a well-formed scope.
    """
    if not isinstance(value, str) or not value:
        return None
    parts = tuple(value.split("."))
    for part in parts:
        if not SCOPE_COMPONENT_PATTERN.fullmatch(part):
            return None
    return parts


def format_scope(scope: Scope) -> str:
    """Join scope components back into their dotted form."""
    return ".".join(scope)
