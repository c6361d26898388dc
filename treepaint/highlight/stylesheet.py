"""Stylesheet generation for a theme's allocated classes."""

from textual.color import Color

from treepaint.colors import FALLBACK_COLORS, css_color
from treepaint.highlight.style import Modifier, Style
from treepaint.highlight.theme import Theme

LINE_CLASS = "tsc-line"
FOREGROUND_VARIABLE = "--tsc-main-fg-color"
BACKGROUND_VARIABLE = "--tsc-main-bg-color"
DIM_OPACITY = "0.6"

_DECORATIONS = (
    (Modifier.UNDERLINE, "underline"),
    (Modifier.STRIKETHROUGH, "line-through"),
)


def style_declarations(style: Style) -> list[str]:
    """Translate a style into the CSS declarations it needs.

    Unset fields produce no declaration.

    Args:
        style: Style to translate.

    Returns:
        Declarations such as ``"color: #61AFEF"`` in a fixed order.
    """
    declarations: list[str] = []
    if style.foreground is not None:
        declarations.append(f"color: {css_color(style.foreground)}")
    if style.background is not None:
        declarations.append(f"background-color: {css_color(style.background)}")
    if style.has(Modifier.BOLD):
        declarations.append("font-weight: bold")
    if style.has(Modifier.ITALIC):
        declarations.append("font-style: italic")
    decorations = [value for modifier, value in _DECORATIONS if style.has(modifier)]
    if decorations:
        declarations.append(f"text-decoration: {' '.join(decorations)}")
    if style.has(Modifier.DIM):
        declarations.append(f"opacity: {DIM_OPACITY}")
    return declarations


def class_rules(theme: Theme) -> list[str]:
    """One CSS rule per allocated class, in allocation order."""
    rules: list[str] = []
    for class_id, style in theme.classes:
        body = "; ".join(style_declarations(style))
        rules.append(f".{theme.class_name_for_id(class_id)} {{ {body}; }}")
    return rules


def page_colors(theme: Theme) -> tuple[Color, Color]:
    """Page foreground and background, falling back to white on black.

    Args:
        theme: Theme whose ``ui.text`` and ``ui.background`` colors to use.

    Returns:
        ``(foreground, background)``.
    """
    foreground = theme.foreground
    if foreground is None:
        foreground = Color.parse(FALLBACK_COLORS["foreground"])
    background = theme.background
    if background is None:
        background = Color.parse(FALLBACK_COLORS["background"])
    return foreground, background


def stylesheet(theme: Theme, *, line_class: str = LINE_CLASS) -> str:
    """Render the full stylesheet for a theme.

    The sheet opens with a ``:root`` rule carrying the page colors, continues
    with the class rules and ends with the rule for the cells holding
    rendered lines.

    Args:
        theme: Theme whose classes to emit.
        line_class: Class of the element wrapping each rendered line.

    Returns:
        Stylesheet text, identical for every call on the same theme.
    """
    foreground, background = page_colors(theme)
    lines = [
        f":root {{ {FOREGROUND_VARIABLE}: {css_color(foreground)}; "
        f"{BACKGROUND_VARIABLE}: {css_color(background)}; }}"
    ]
    lines.extend(class_rules(theme))
    lines.append(f".{line_class} {{ word-wrap: normal; white-space: pre; }}")
    return "\n".join(lines) + "\n"
