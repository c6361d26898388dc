"""Resolved style values attached to theme rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from textual.color import Color


class Modifier(Enum):
    """Text modifiers a style can switch on."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    DIM = "dim"


# Theme spellings mapped to modifiers (Helix uses "underlined" and "crossed_out")
MODIFIER_ALIASES: dict[str, Modifier] = {
    "bold": Modifier.BOLD,
    "italic": Modifier.ITALIC,
    "underline": Modifier.UNDERLINE,
    "underlined": Modifier.UNDERLINE,
    "strikethrough": Modifier.STRIKETHROUGH,
    "crossed_out": Modifier.STRIKETHROUGH,
    "dim": Modifier.DIM,
}

# Terminal-only modifiers that have no stylesheet equivalent
IGNORED_MODIFIERS: frozenset[str] = frozenset({"reversed", "hidden", "slow_blink", "rapid_blink"})


@dataclass(frozen=True)
class Style:
    """Foreground, background and modifiers of a piece of text.

    Attributes:
        foreground: Text color, or None when unset.
        background: Background color, or None when unset.
        modifiers: Modifiers switched on; empty when unset.
    """

    foreground: Color | None = None
    background: Color | None = None
    modifiers: frozenset[Modifier] = frozenset()

    @property
    def is_empty(self) -> bool:
        """True when the style sets nothing at all."""
        return self.foreground is None and self.background is None and not self.modifiers

    def merge(self, other: Style) -> Style:
        """Overlay ``other`` on this style.

        Fields set in ``other`` win; unset fields fall through to this style.

        Args:
            other: The overriding style.

        Returns:
            A new merged style.
        """
        return Style(
            foreground=other.foreground if other.foreground is not None else self.foreground,
            background=other.background if other.background is not None else self.background,
            modifiers=other.modifiers if other.modifiers else self.modifiers,
        )

    def has(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers
