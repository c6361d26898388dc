"""Shared test fixtures for treepaint."""

from collections.abc import Mapping

import pytest
from treepaint.highlight.theme import Theme, build_theme


@pytest.fixture
def base_description() -> dict[str, object]:
    """Theme description used as the base of inheritance tests."""
    return {
        "palette": {
            "blue": "#0000ff",
            "red": "#ff0000",
            "grey": "#808080",
            "accent": "blue",
        },
        "string": "blue",
        "keyword": {"fg": "red", "modifiers": ["bold"]},
        "comment": {"fg": "grey", "modifiers": ["italic"]},
        "ui.text": "grey",
        "ui.background": {"bg": "#101010"},
    }


@pytest.fixture
def child_description() -> dict[str, object]:
    """Theme description inheriting ``base``."""
    return {
        "inherits": "base",
        "palette": {"green": "#00ff00"},
        "string": "green",
        "keyword": {"modifiers": ["italic"]},
    }


@pytest.fixture
def library(
    base_description: dict[str, object], child_description: dict[str, object]
) -> Mapping[str, Mapping[str, object]]:
    """In-memory theme library with a base and a child theme."""
    return {"base": base_description, "child": child_description}


@pytest.fixture
def keyword_theme() -> Theme:
    """Small theme with general and specific keyword rules."""
    return build_theme(
        {
            "keyword": "#ff0000",
            "keyword.control": {"fg": "#00ff00", "modifiers": ["bold"]},
            "string": "#0000ff",
            "function.builtin": "#ffff00",
        },
        name="keywords",
    )


@pytest.fixture
def sample_source() -> str:
    """Small source buffer with a string and a comment."""
    return 'if x < 1:\n    print("a&b")  # done\n'
