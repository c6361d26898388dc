"""HTML rendering of source text from normalized captures.

Captures become open/close boundary events that are replayed in byte order
against a stack of open spans. Whenever the text crosses a newline every open
span is closed and then reopened on the next line, so each rendered line is a
self-contained fragment of well-nested markup.
"""

import html
from collections import defaultdict
from collections.abc import Iterable

from treepaint.highlight.captures import normalize_captures
from treepaint.highlight.errors import InputError
from treepaint.highlight.stylesheet import stylesheet
from treepaint.highlight.theme import Theme
from treepaint.logger import get_logger

logger = get_logger(__name__)

SPAN_CLOSE = "</span>"


def _span_open(class_name: str) -> str:
    return f'<span class="{html.escape(class_name)}">'


class _LineWriter:
    """Accumulates markup line by line while tracking open spans.

    At every newline the open spans are closed, the line is ended, and the
    same spans are reopened at the start of the next line.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._parts: list[str] = []
        self._stack: list[str] = []

    def open(self, class_name: str) -> None:
        self._stack.append(class_name)
        self._parts.append(_span_open(class_name))

    def close(self) -> None:
        self._stack.pop()
        self._parts.append(SPAN_CLOSE)

    def write(self, text: str) -> None:
        for index, piece in enumerate(text.split("\n")):
            if index:
                self._end_line()
            if piece:
                self._parts.append(html.escape(piece))

    def finish(self) -> list[str]:
        self._parts.append(SPAN_CLOSE * len(self._stack))
        self._stack.clear()
        self.lines.append("".join(self._parts))
        self._parts = []
        return self.lines

    def _end_line(self) -> None:
        self._parts.append(SPAN_CLOSE * len(self._stack))
        self._parts.append("\n")
        self.lines.append("".join(self._parts))
        self._parts = [_span_open(class_name) for class_name in self._stack]


def _decode(segment: bytes, offset: int) -> str:
    try:
        return segment.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InputError(
            f"Source is not valid UTF-8 between capture boundaries at byte {offset + exc.start}"
        ) from exc


def render(source: str | bytes, captures: Iterable[object], theme: Theme) -> list[str]:
    """Render source text as HTML lines.

    Args:
        source: Source text; ``str`` is encoded as UTF-8 since capture ranges
            are byte offsets.
        captures: Raw captures ``(start, end, scope[, priority[, order]])`` or
            Capture instances.
        theme: Theme resolving scopes to CSS classes.

    Returns:
        One markup string per source line. Every line but the last ends with
        ``"\\n"``; a source ending in a newline yields a trailing empty line.

    Raises:
        InputError: If the captures are invalid for this source. No lines are
            returned in that case.
    """
    data = source.encode("utf-8") if isinstance(source, str) else bytes(source)
    normalized = normalize_captures(captures, len(data))

    opens: dict[int, list[str]] = defaultdict(list)
    closes: dict[int, int] = defaultdict(int)
    unstyled = 0
    for capture in normalized:
        class_name = theme.class_name(capture.scope)
        if class_name is None:
            unstyled += 1
            continue
        opens[capture.start].append(class_name)
        closes[capture.end] += 1

    offsets = sorted({0, len(data), *opens, *closes})
    writer = _LineWriter()
    for index, offset in enumerate(offsets):
        for _ in range(closes.get(offset, 0)):
            writer.close()
        for class_name in opens.get(offset, ()):
            writer.open(class_name)
        next_offset = offsets[index + 1] if index + 1 < len(offsets) else len(data)
        if next_offset > offset:
            writer.write(_decode(data[offset:next_offset], offset))
    lines = writer.finish()

    logger.debug(
        f"Rendered {len(lines)} lines from {len(normalized)} captures ({unstyled} without a matching style)"
    )
    return lines


class Renderer:
    """Renders sources against one theme.

    Holds nothing but the theme, so a single instance may be used from
    several threads at once.
    """

    def __init__(self, theme: Theme) -> None:
        """Create a renderer for ``theme``."""
        self._theme = theme

    @property
    def theme(self) -> Theme:
        return self._theme

    def render(self, source: str | bytes, captures: Iterable[object]) -> list[str]:
        """Render ``source`` into HTML lines. See :func:`render`."""
        return render(source, captures, self._theme)

    def css(self) -> str:
        """Stylesheet for every class this renderer can emit."""
        return stylesheet(self._theme)
