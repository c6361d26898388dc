"""Entry point for treepaint.

Renders a source file to a standalone HTML page from a theme and a JSON file
of captures produced by a grammar/query layer.
"""

import argparse
import json
import sys
import traceback
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from treepaint.highlight.errors import HighlightError, InputError
from treepaint.highlight.renderer import Renderer
from treepaint.highlight.scopes import HIGHLIGHT_NAMES
from treepaint.logger import add_stderr_sink, get_logger
from treepaint.page import render_page
from treepaint.settings import load_settings
from treepaint.themes import THEME_LABELS, ThemeLibrary

logger = get_logger(__name__)


def get_version() -> str:
    """Return the installed package version, or 'unknown'."""
    try:
        return version("treepaint")
    except PackageNotFoundError:
        return "unknown"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(prog="treepaint", description="Render highlighted source code as HTML.")
    parser.add_argument("--theme", help="Theme name or path to a TOML theme file")
    parser.add_argument("--source", type=Path, help="Path to the source file")
    parser.add_argument("--captures", type=Path, help="Path to a JSON list of captures for the source")
    parser.add_argument("--output", type=Path, help="Write the page here instead of stdout")
    parser.add_argument("--title", help="Page title")
    parser.add_argument("--css-only", action="store_true", help="Print the theme stylesheet and exit")
    parser.add_argument("--list-themes", action="store_true", help="List available themes and exit")
    parser.add_argument(
        "--show-scopes", action="store_true", help="Show the class each well-known scope resolves to and exit"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output on stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    args = parser.parse_args(argv)
    renders_page = not (args.css_only or args.list_themes or args.show_scopes)
    if renders_page and (args.source is None or args.captures is None):
        parser.error("--source and --captures are required to render a page")
    return args


def load_captures(path: Path) -> list[object]:
    """Read captures from a JSON file.

    The file holds a list of ``[start, end, scope, priority, order]`` arrays
    (priority and order optional) or objects with those keys.

    Raises:
        InputError: If the file is not a JSON list.
        OSError: If the file cannot be read.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InputError(f"Failed to parse captures file {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise InputError(f"Captures file {path} must contain a JSON list")
    return raw


def main(args: argparse.Namespace) -> int:
    """Run the command described by ``args``.

    Returns:
        Process exit status.
    """
    settings = load_settings()
    add_stderr_sink("DEBUG" if args.verbose else settings.log_level)
    library = ThemeLibrary(settings.theme_paths)

    if args.list_themes:
        for name in library:
            label = THEME_LABELS.get(name, name)
            print(f"{name}\t{label}")
        return 0

    theme_name = args.theme or settings.theme
    theme = library.load(theme_name, class_prefix=settings.class_prefix)
    renderer = Renderer(theme)

    if args.show_scopes:
        for name in HIGHLIGHT_NAMES:
            print(f"{name}\t{theme.class_name(name) or '-'}")
        return 0

    if args.css_only:
        output = renderer.css()
    else:
        logger.info(f"Rendering {args.source} with theme {theme_name!r}")
        source = args.source.read_bytes()
        lines = renderer.render(source, load_captures(args.captures))
        output = render_page(lines, renderer.css(), title=args.title or settings.title)

    if args.output is not None:
        args.output.write_text(output, encoding="utf-8")
        logger.info(f"Wrote {args.output}")
    else:
        sys.stdout.write(output)
    return 0


def run(argv: list[str] | None = None) -> None:
    """Run the tool, turning expected failures into a one-line message and exit status 1."""
    args = parse_args(argv)
    try:
        status = main(args)
    except (HighlightError, OSError) as exc:
        logger.error(f"treepaint failed: {exc}")
        print(f"treepaint: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        # Print standard Python traceback for unexpected failures
        traceback.print_exc()
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    run()
