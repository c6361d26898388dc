"""Persistent settings for the treepaint command-line tool."""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from treepaint.highlight.theme import DEFAULT_CLASS_PREFIX
from treepaint.logger import get_logger
from treepaint.themes import DEFAULT_THEME_NAME

logger = get_logger(__name__)

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_TITLE = "treepaint highlighting"

# CSS class names must start with a letter or underscore
CLASS_PREFIX_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class Settings:
    """User-configurable settings stored on disk."""

    theme: str = DEFAULT_THEME_NAME
    log_level: str = DEFAULT_LOG_LEVEL
    class_prefix: str = DEFAULT_CLASS_PREFIX
    # Extra directories searched for <name>.toml theme files, highest priority first
    theme_dirs: tuple[str, ...] = ()
    title: str = DEFAULT_TITLE

    @property
    def theme_paths(self) -> tuple[Path, ...]:
        """Theme directories as paths, the user theme directory last."""
        return (*(Path(directory).expanduser() for directory in self.theme_dirs), get_config_dir() / "themes")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> Settings:
        """Create settings from a mapping, applying defaults for invalid values.

        Args:
            data: Mapping containing raw settings values.

        Returns:
            A Settings instance with validated values.
        """
        theme_value = _coerce_str(data.get("theme"))
        theme = theme_value if theme_value else DEFAULT_THEME_NAME

        log_level_value = _coerce_str(data.get("log_level"))
        if log_level_value is not None:
            log_level_value = log_level_value.upper()
        log_level = log_level_value if log_level_value in LOG_LEVELS else DEFAULT_LOG_LEVEL

        prefix_value = _coerce_str(data.get("class_prefix"))
        class_prefix = (
            prefix_value
            if prefix_value is not None and CLASS_PREFIX_PATTERN.fullmatch(prefix_value)
            else DEFAULT_CLASS_PREFIX
        )

        theme_dirs = _parse_theme_dirs(data.get("theme_dirs"))

        title_value = _coerce_str(data.get("title"))
        title = title_value if title_value else DEFAULT_TITLE

        return cls(
            theme=theme,
            log_level=log_level,
            class_prefix=class_prefix,
            theme_dirs=theme_dirs,
            title=title,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize settings to a dictionary.

        Returns:
            Dictionary representation of settings.
        """
        return {
            "theme": self.theme,
            "log_level": self.log_level,
            "class_prefix": self.class_prefix,
            "theme_dirs": list(self.theme_dirs),
            "title": self.title,
        }


def get_config_dir() -> Path:
    """Get the directory used for persistent configuration.

    Returns:
        Path to the configuration directory.
    """
    override_dir = os.environ.get("TREEPAINT_CONFIG_DIR")
    if override_dir:
        return Path(override_dir).expanduser()

    base_dir = os.environ.get("XDG_CONFIG_HOME")
    if base_dir:
        return Path(base_dir).expanduser() / "treepaint"

    return Path.home() / ".config" / "treepaint"


def get_settings_path() -> Path:
    """Get the full path to the settings file.

    Returns:
        Path to the settings JSON file.
    """
    return get_config_dir() / "settings.json"


def load_settings() -> Settings:
    """Load settings from disk.

    Returns:
        Loaded settings, or defaults if none exist.
    """
    settings_path = get_settings_path()
    if not settings_path.exists():
        return Settings()

    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning(f"Failed to parse settings file {settings_path}: {exc}")
        return Settings()
    except OSError as exc:
        logger.warning(f"Failed to read settings file {settings_path}: {exc}")
        return Settings()

    if not isinstance(raw, dict):
        logger.warning(f"Settings file {settings_path} contains invalid data")
        return Settings()

    return Settings.from_mapping(raw)


def save_settings(settings: Settings) -> None:
    """Persist settings to disk.

    Args:
        settings: Settings to persist.
    """
    settings_path = get_settings_path()
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning(f"Failed to save settings to {settings_path}: {exc}")


def _coerce_str(value: object) -> str | None:
    """Coerce a value into a string if possible.

    Args:
        value: Raw value to coerce.

    Returns:
        String value or None.
    """
    if isinstance(value, str):
        return value
    return None


def _parse_theme_dirs(raw_dirs: object) -> tuple[str, ...]:
    """Parse theme directories from raw settings data.

    Accepts a list of strings or a single string; anything else is dropped.

    Args:
        raw_dirs: Raw theme directory data from settings.

    Returns:
        Tuple of directory strings.
    """
    if isinstance(raw_dirs, str):
        return (raw_dirs,) if raw_dirs else ()
    if not isinstance(raw_dirs, list):
        return ()
    return tuple(item for item in raw_dirs if isinstance(item, str) and item)
