"""Theme resolution and capture rendering."""

from treepaint.highlight.captures import Capture, normalize_captures
from treepaint.highlight.errors import HighlightError, InputError, ThemeError
from treepaint.highlight.renderer import Renderer, render
from treepaint.highlight.style import Modifier, Style
from treepaint.highlight.stylesheet import stylesheet
from treepaint.highlight.theme import ScopeRule, Theme, build_theme, load_theme

__all__ = [
    "Capture",
    "HighlightError",
    "InputError",
    "Modifier",
    "Renderer",
    "ScopeRule",
    "Style",
    "Theme",
    "ThemeError",
    "build_theme",
    "load_theme",
    "normalize_captures",
    "render",
    "stylesheet",
]
