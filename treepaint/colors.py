"""Color literal handling for theme palettes and stylesheets.

Colors are parsed with Textual's color parser so themes can use any notation
it understands, and are always written back out as hex strings.

Usage:
    from treepaint.colors import parse_color, css_color

    color = parse_color("#61afef")
    css = f"color: {css_color(color)};"
"""

from __future__ import annotations

from textual.color import Color, ColorParseError

# Page colors used when a theme lacks ui.text or ui.background
FALLBACK_COLORS = {
    "foreground": "#ffffff",
    "background": "#000000",
}


def _is_terminal_color(color: Color) -> bool:
    """Check if a parsed color only has meaning inside a terminal.

    Args:
        color: Parsed color.

    Returns:
        True for ANSI and automatic colors, which have no RGB value.
    """
    return getattr(color, "ansi", None) is not None or bool(getattr(color, "auto", False))


def parse_color(value: str) -> Color | None:
    """Parse a color literal.

    Args:
        value: Color text such as ``"#fab283"``, ``"rgb(1, 2, 3)"`` or ``"red"``.

    Returns:
        The parsed color, or None if the value is not a usable color literal.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        color = Color.parse(value.strip())
    except ColorParseError:
        return None
    if _is_terminal_color(color):
        return None
    return color


def is_color_literal(value: str) -> bool:
    """Check if a string is a color literal rather than a palette name."""
    return parse_color(value) is not None


def css_color(color: Color) -> str:
    """Format a color for a stylesheet declaration.

    Args:
        color: Color to format.

    Returns:
        ``#RRGGBB``, or ``#RRGGBBAA`` for translucent colors.
    """
    return color.hex
