"""Theme resolution: turn a theme description into an immutable style table.

A theme description is a mapping laid out like a Helix editor theme:

    inherits = "onedark"

    "keyword" = "purple"
    "keyword.control" = { fg = "red", modifiers = ["bold"] }
    "ui.background" = { bg = "black" }

    [palette]
    purple = "#c678dd"
    red = "#e06c75"
    black = "#282c34"
    accent = "purple"

``palette`` and ``inherits`` are reserved keys; every other key is a dotted
scope. The resolved Theme answers "which style does this scope get" with the
longest matching scope prefix, later rules winning ties, and hands out a
stable CSS class per distinct style.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from textual.color import Color

from treepaint.colors import parse_color
from treepaint.highlight.errors import InputError, ThemeError
from treepaint.highlight.scopes import Scope, format_scope, parse_scope
from treepaint.highlight.style import IGNORED_MODIFIERS, MODIFIER_ALIASES, Modifier, Style
from treepaint.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CLASS_PREFIX = "tsc-"

PALETTE_KEY = "palette"
INHERITS_KEY = "inherits"
RESERVED_KEYS = frozenset({PALETTE_KEY, INHERITS_KEY})

STYLE_TABLE_KEYS = frozenset({"fg", "bg", "modifiers", "underline"})

UI_TEXT_SCOPE: Scope = ("ui", "text")
UI_BACKGROUND_SCOPE: Scope = ("ui", "background")

ThemeLibraryLike = Mapping[str, Mapping[str, object]]


@dataclass(frozen=True)
class ScopeRule:
    """A scope mapped to a style.

    Attributes:
        scope: Scope components, e.g. ``("keyword", "control")``.
        style: Style applied to matching captures.
        order: Position in the merged rule list; later rules win ties.
    """

    scope: Scope
    style: Style
    order: int

    @property
    def name(self) -> str:
        return format_scope(self.scope)


class Theme:
    """Immutable, specificity-ordered rule table with a class allocation.

    A Theme is never modified after construction, so one instance can be
    shared by any number of concurrent renders.
    """

    __slots__ = ("_background", "_by_scope", "_class_prefix", "_classes", "_foreground", "_name", "_rules")

    def __init__(
        self,
        rules: Iterable[tuple[Scope, Style]],
        *,
        name: str | None = None,
        class_prefix: str = DEFAULT_CLASS_PREFIX,
    ) -> None:
        """Build the lookup table and allocate classes.

        Args:
            rules: ``(scope, style)`` pairs in declaration order.
            name: Optional theme name, used in messages.
            class_prefix: Prefix of every CSS class name this theme hands out.
        """
        if not isinstance(class_prefix, str) or not class_prefix:
            raise ThemeError("Class prefix must be a non-empty string")
        self._name = name
        self._class_prefix = class_prefix
        self._rules: tuple[ScopeRule, ...] = tuple(
            ScopeRule(scope=scope, style=style, order=order) for order, (scope, style) in enumerate(rules)
        )

        # Later rules overwrite earlier ones for the same exact scope
        by_scope: dict[Scope, ScopeRule] = {}
        for rule in self._rules:
            by_scope[rule.scope] = rule
        self._by_scope: Mapping[Scope, ScopeRule] = MappingProxyType(by_scope)

        text_rule = by_scope.get(UI_TEXT_SCOPE)
        background_rule = by_scope.get(UI_BACKGROUND_SCOPE)
        self._foreground = text_rule.style.foreground if text_rule else None
        self._background = background_rule.style.background if background_rule else None

        classes: dict[Style, int] = {}
        for rule in self._rules:
            style = by_scope[rule.scope].style
            if style.is_empty or style in classes:
                continue
            classes[style] = len(classes)
        # Assigned last: the theme is frozen from here on
        self._classes: Mapping[Style, int] = MappingProxyType(classes)

        logger.debug(f"Built theme {name!r} with {len(self._rules)} rules and {len(classes)} classes")

    def __repr__(self) -> str:
        return f"Theme(name={self._name!r}, rules={len(self._rules)}, classes={len(self._classes)})"

    def __setattr__(self, key: str, value: object) -> None:
        if hasattr(self, "_classes"):
            raise AttributeError("Theme is immutable")
        object.__setattr__(self, key, value)

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def rules(self) -> tuple[ScopeRule, ...]:
        return self._rules

    @property
    def class_prefix(self) -> str:
        return self._class_prefix

    @property
    def foreground(self) -> Color | None:
        """Page text color taken from the ``ui.text`` rule."""
        return self._foreground

    @property
    def background(self) -> Color | None:
        """Page background color taken from the ``ui.background`` rule."""
        return self._background

    @property
    def classes(self) -> tuple[tuple[int, Style], ...]:
        """All allocated ``(class_id, style)`` pairs in allocation order."""
        return tuple((class_id, style) for style, class_id in self._classes.items())

    def match(self, scope: str | Scope) -> ScopeRule | None:
        """Find the rule that wins for a scope.

        The winner is the rule whose scope is the longest component-wise
        prefix of the query; among equally long prefixes the latest declared
        rule wins.

        Args:
            scope: Dotted scope string or scope components.

        Returns:
            The winning rule, or None if no rule matches.

        Raises:
            InputError: If a scope string is malformed.
        """
        components = _coerce_scope(scope)
        for length in range(len(components), 0, -1):
            rule = self._by_scope.get(components[:length])
            if rule is not None:
                return rule
        return None

    def lookup(self, scope: str | Scope) -> Style | None:
        """Resolve a scope to its style, or None for plain text."""
        rule = self.match(scope)
        if rule is None or rule.style.is_empty:
            return None
        return rule.style

    def class_id(self, style: Style) -> int | None:
        """Return the class id allocated to a style."""
        return self._classes.get(style)

    def class_name_for_id(self, class_id: int) -> str:
        return f"{self._class_prefix}{class_id}"

    def class_name(self, scope: str | Scope) -> str | None:
        """Resolve a scope straight to the CSS class wrapping its text.

        Args:
            scope: Dotted scope string or scope components.

        Returns:
            Class name such as ``"tsc-3"``, or None when the scope is unstyled.
        """
        style = self.lookup(scope)
        if style is None:
            return None
        class_id = self.class_id(style)
        if class_id is None:
            return None
        return self.class_name_for_id(class_id)


def build_theme(
    description: Mapping[str, object],
    *,
    library: ThemeLibraryLike | None = None,
    name: str | None = None,
    class_prefix: str = DEFAULT_CLASS_PREFIX,
) -> Theme:
    """Resolve a theme description into a Theme.

    Args:
        description: Theme description mapping (palette, rules, inherits).
        library: Named theme descriptions that ``inherits`` may refer to.
        name: Name of the description itself, used for cycle detection.
        class_prefix: Prefix for allocated CSS class names.

    Returns:
        The resolved Theme.

    Raises:
        ThemeError: If the description or one of its bases is invalid.
    """
    label = name or "<theme>"
    chain = (name,) if name else ()
    _palette, rules = _resolve_description(description, label, library, chain)
    return Theme(rules, name=name, class_prefix=class_prefix)


def load_theme(
    name: str,
    library: ThemeLibraryLike,
    *,
    class_prefix: str = DEFAULT_CLASS_PREFIX,
) -> Theme:
    """Look up a named description in a library and resolve it.

    Raises:
        ThemeError: If the name is unknown or the description is invalid.
    """
    if name not in library:
        raise ThemeError(f"Unknown theme {name!r}")
    return build_theme(library[name], library=library, name=name, class_prefix=class_prefix)


def _coerce_scope(scope: str | Scope) -> Scope:
    if isinstance(scope, tuple):
        if scope and all(isinstance(part, str) and part for part in scope):
            return scope
        raise InputError(f"Malformed scope {scope!r}")
    parsed = parse_scope(scope)
    if parsed is None:
        raise InputError(f"Malformed scope {scope!r}")
    return parsed


def _resolve_description(
    description: Mapping[str, object],
    label: str,
    library: ThemeLibraryLike | None,
    chain: tuple[str, ...],
) -> tuple[dict[str, Color], list[tuple[Scope, Style]]]:
    """Resolve one description, and recursively its base, into palette and rules."""
    if not isinstance(description, Mapping):
        raise ThemeError(f"Theme {label!r} must be a mapping, got {type(description).__name__}")

    base_palette: dict[str, Color] = {}
    base_rules: list[tuple[Scope, Style]] = []
    inherits = description.get(INHERITS_KEY)
    if inherits is not None:
        if not isinstance(inherits, str) or not inherits:
            raise ThemeError(f"Theme {label!r} has an invalid 'inherits' value: {inherits!r}")
        if inherits in chain:
            cycle = " -> ".join((*chain, inherits))
            raise ThemeError(f"Inheritance cycle detected: {cycle}")
        if library is None or inherits not in library:
            raise ThemeError(f"Theme {label!r} inherits unknown theme {inherits!r}")
        logger.debug(f"Resolving base theme {inherits!r} for {label!r}")
        base_palette, base_rules = _resolve_description(library[inherits], inherits, library, (*chain, inherits))

    palette = _resolve_palette(description.get(PALETTE_KEY), base_palette, label)

    inherited: dict[Scope, Style] = dict(base_rules)
    rules = list(base_rules)
    for key, value in description.items():
        if key in RESERVED_KEYS:
            continue
        scope = parse_scope(key) if isinstance(key, str) else None
        if scope is None:
            raise ThemeError(f"Theme {label!r} has a malformed scope {key!r}")
        style = _parse_style(value, palette, label, key)
        base_style = inherited.get(scope)
        if base_style is not None:
            style = base_style.merge(style)
        rules.append((scope, style))
    return palette, rules


def _resolve_palette(raw: object, base: Mapping[str, Color], label: str) -> dict[str, Color]:
    """Resolve palette entries in two passes: literals first, then one level of references.

    Args:
        raw: The ``palette`` table of the description, or None.
        base: Fully resolved palette inherited from the base theme.
        label: Theme name for messages.

    Returns:
        The merged palette, child entries overriding base entries.

    Raises:
        ThemeError: On malformed entries, undefined names, or reference chains and cycles.
    """
    resolved = dict(base)
    if raw is None:
        return resolved
    if not isinstance(raw, Mapping):
        raise ThemeError(f"Theme {label!r} palette must be a table")

    literals: dict[str, Color] = {}
    references: dict[str, str] = {}
    for entry, value in raw.items():
        if not isinstance(entry, str) or not isinstance(value, str):
            raise ThemeError(f"Theme {label!r} palette entry {entry!r} must map a name to a string")
        if value in raw or value in base:
            references[entry] = value
            continue
        color = parse_color(value)
        if color is None:
            raise ThemeError(f"Theme {label!r} palette entry {entry!r} references undefined color {value!r}")
        literals[entry] = color

    resolved.update(literals)
    for entry, target in references.items():
        if target in references:
            raise ThemeError(
                f"Theme {label!r} palette entry {entry!r} references {target!r}, which is itself a reference"
            )
        resolved[entry] = literals[target] if target in literals else base[target]
    return resolved


def _resolve_color(value: object, palette: Mapping[str, Color], label: str, key: str) -> Color:
    if not isinstance(value, str):
        raise ThemeError(f"Theme {label!r} rule {key!r} has a non-string color {value!r}")
    if value in palette:
        return palette[value]
    color = parse_color(value)
    if color is None:
        raise ThemeError(f"Theme {label!r} rule {key!r} references undefined color {value!r}")
    return color


def _parse_modifiers(raw: object, label: str, key: str) -> set[Modifier]:
    if not isinstance(raw, list | tuple):
        raise ThemeError(f"Theme {label!r} rule {key!r} modifiers must be a list")
    modifiers: set[Modifier] = set()
    for item in raw:
        if not isinstance(item, str):
            raise ThemeError(f"Theme {label!r} rule {key!r} has a non-string modifier {item!r}")
        if item in IGNORED_MODIFIERS:
            logger.debug(f"Ignoring terminal-only modifier {item!r} in rule {key!r}")
            continue
        modifier = MODIFIER_ALIASES.get(item)
        if modifier is None:
            raise ThemeError(f"Theme {label!r} rule {key!r} has unknown modifier {item!r}")
        modifiers.add(modifier)
    return modifiers


def _parse_style(value: object, palette: Mapping[str, Color], label: str, key: str) -> Style:
    """Parse a rule value: a bare color, or a table of fg/bg/modifiers/underline."""
    if isinstance(value, str):
        return Style(foreground=_resolve_color(value, palette, label, key))
    if not isinstance(value, Mapping):
        raise ThemeError(f"Theme {label!r} rule {key!r} must be a color or a table")

    unknown = set(value) - STYLE_TABLE_KEYS
    if unknown:
        raise ThemeError(f"Theme {label!r} rule {key!r} has unknown attributes: {', '.join(sorted(unknown))}")

    foreground = _resolve_color(value["fg"], palette, label, key) if "fg" in value else None
    background = _resolve_color(value["bg"], palette, label, key) if "bg" in value else None
    modifiers = _parse_modifiers(value["modifiers"], label, key) if "modifiers" in value else set()
    if "underline" in value:
        if not isinstance(value["underline"], Mapping):
            raise ThemeError(f"Theme {label!r} rule {key!r} underline must be a table")
        modifiers.add(Modifier.UNDERLINE)
    return Style(foreground=foreground, background=background, modifiers=frozenset(modifiers))
