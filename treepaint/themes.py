"""Bundled theme descriptions and the library that resolves theme names.

Descriptions follow the Helix theme layout (see ``treepaint.highlight.theme``).
Bundled ones are read-only data; user themes are ``<name>.toml`` files found
in the library's search directories and take precedence over bundled themes
of the same name.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from treepaint.highlight.errors import ThemeError
from treepaint.highlight.theme import DEFAULT_CLASS_PREFIX, Theme, build_theme, load_theme
from treepaint.logger import get_logger

logger = get_logger(__name__)

BASE16_THEME_NAME = "base16"
ONEDARK_THEME_NAME = "onedark"
ONEDARK_BOLD_THEME_NAME = "onedark-bold"

DEFAULT_THEME_NAME = ONEDARK_THEME_NAME

THEME_FILE_SUFFIX = ".toml"


def _freeze(value: object) -> object:
    """Turn nested dicts and lists into read-only mappings and tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


_BASE16 = {
    "attribute": "base09",
    "comment": {"fg": "base03", "modifiers": ["italic"]},
    "constant": "base09",
    "constant.builtin": "base09",
    "constructor": "base0D",
    "escape": "base0C",
    "function": "base0D",
    "function.macro": "base08",
    "include": "base0E",
    "keyword": "base0E",
    "label": "base0E",
    "namespace": "base0E",
    "number": "base09",
    "operator": "base05",
    "property": "base08",
    "punctuation": "base05",
    "string": "base0B",
    "type": "base0A",
    "variable": "base08",
    "variable.builtin": "base09",
    "ui.text": "base05",
    "ui.background": {"bg": "base00"},
    "palette": {
        "base00": "#181818",
        "base03": "#585858",
        "base05": "#d8d8d8",
        "base08": "#ab4642",
        "base09": "#dc9656",
        "base0A": "#f7ca88",
        "base0B": "#a1b56c",
        "base0C": "#86c1b9",
        "base0D": "#7cafc2",
        "base0E": "#ba8baf",
    },
}

_ONEDARK = {
    "attribute": "yellow",
    "comment": {"fg": "comment", "modifiers": ["italic"]},
    "constant": "cyan",
    "constant.builtin": "gold",
    "constructor": "blue",
    "escape": "gold",
    "function": "blue",
    "function.builtin": "blue",
    "function.macro": "purple",
    "include": "purple",
    "keyword": "purple",
    "keyword.control": "accent",
    "label": "purple",
    "namespace": "blue",
    "number": "gold",
    "operator": "purple",
    "property": "red",
    "punctuation": "white",
    "string": "green",
    "type": "yellow",
    "variable": "light-white",
    "variable.builtin": "blue",
    "variable.parameter": "red",
    "ui.text": "white",
    "ui.background": {"bg": "black"},
    "palette": {
        "yellow": "#e5c07b",
        "blue": "#61afef",
        "red": "#e06c75",
        "purple": "#c678dd",
        "green": "#98c379",
        "gold": "#d19a66",
        "cyan": "#56b6c2",
        "white": "#abb2bf",
        "light-white": "#dcdfe4",
        "black": "#282c34",
        "comment": "#5c6370",
        "accent": "purple",
    },
}

_ONEDARK_BOLD = {
    "inherits": ONEDARK_THEME_NAME,
    "keyword": {"modifiers": ["bold"]},
    "function": {"modifiers": ["bold"]},
    "type": {"fg": "gold", "modifiers": ["bold"]},
    "palette": {
        "gold": "#e0a86f",
    },
}

BUNDLED_THEMES: Mapping[str, Mapping[str, object]] = MappingProxyType(
    {
        BASE16_THEME_NAME: _freeze(_BASE16),
        ONEDARK_THEME_NAME: _freeze(_ONEDARK),
        ONEDARK_BOLD_THEME_NAME: _freeze(_ONEDARK_BOLD),
    }
)

THEME_LABELS: dict[str, str] = {
    BASE16_THEME_NAME: "Base16 Default Dark",
    ONEDARK_THEME_NAME: "One Dark",
    ONEDARK_BOLD_THEME_NAME: "One Dark (bold keywords)",
}


def parse_theme_toml(text: str, source: str = "<string>") -> dict[str, object]:
    """Parse a TOML theme description.

    Args:
        text: TOML document.
        source: Where the text came from, for messages.

    Returns:
        The description mapping.

    Raises:
        ThemeError: If the text is not valid TOML.
    """
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ThemeError(f"Failed to parse theme {source}: {exc}") from exc


def load_theme_file(path: Path) -> dict[str, object]:
    """Read and parse a TOML theme file.

    Raises:
        ThemeError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ThemeError(f"Failed to read theme file {path}: {exc}") from exc
    return parse_theme_toml(text, str(path))


class ThemeLibrary(Mapping[str, Mapping[str, object]]):
    """Theme descriptions by name: files in search directories, then bundled ones."""

    def __init__(self, search_dirs: Iterable[Path] = (), *, include_bundled: bool = True) -> None:
        """Initialize the library.

        Args:
            search_dirs: Directories holding ``<name>.toml`` theme files, in priority order.
            include_bundled: Whether bundled themes are part of the library.
        """
        self._search_dirs = tuple(Path(directory).expanduser() for directory in search_dirs)
        self._bundled: Mapping[str, Mapping[str, object]] = BUNDLED_THEMES if include_bundled else {}
        self._loaded: dict[str, Mapping[str, object]] = {}

    def _path_for(self, name: str) -> Path | None:
        if not name or "/" in name or "\\" in name:
            return None
        for directory in self._search_dirs:
            candidate = directory / f"{name}{THEME_FILE_SUFFIX}"
            if candidate.is_file():
                return candidate
        return None

    def __getitem__(self, name: str) -> Mapping[str, object]:
        if name in self._loaded:
            return self._loaded[name]
        path = self._path_for(name)
        if path is not None:
            logger.debug(f"Loading theme {name!r} from {path}")
            description = load_theme_file(path)
            self._loaded[name] = description
            return description
        if name in self._bundled:
            return self._bundled[name]
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name in self._loaded or self._path_for(name) is not None or name in self._bundled

    def __iter__(self) -> Iterator[str]:
        names = set(self._bundled)
        for directory in self._search_dirs:
            if directory.is_dir():
                names.update(path.stem for path in directory.glob(f"*{THEME_FILE_SUFFIX}"))
        return iter(sorted(names))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def load(self, name_or_path: str | Path, *, class_prefix: str = DEFAULT_CLASS_PREFIX) -> Theme:
        """Build a Theme from a library name or a path to a TOML file.

        Args:
            name_or_path: Theme name, or path to a ``.toml`` theme file.
            class_prefix: Prefix for allocated CSS class names.

        Returns:
            The resolved Theme; ``inherits`` references resolve through this library.

        Raises:
            ThemeError: If the theme is unknown or invalid.
        """
        path = Path(name_or_path)
        if path.suffix == THEME_FILE_SUFFIX and path.is_file():
            logger.info(f"Loading theme file {path}")
            return build_theme(load_theme_file(path), library=self, class_prefix=class_prefix)
        return load_theme(str(name_or_path), self, class_prefix=class_prefix)
