"""Standalone HTML page holding rendered lines and their stylesheet."""

import html
from collections.abc import Iterable

from treepaint.highlight.stylesheet import BACKGROUND_VARIABLE, FOREGROUND_VARIABLE, LINE_CLASS

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ color: var({fg_var}); background-color: var({bg_var}); }}
{css}</style>
</head>
<body>
<pre><table><tbody>
{rows}
</tbody></table></pre>
</body>
</html>
"""


def table_rows(lines: Iterable[str], *, line_class: str = LINE_CLASS) -> list[str]:
    """Wrap each rendered line in its own table row.

    The row ends the line, so the trailing newline of each line is dropped.
    """
    rows: list[str] = []
    for line in lines:
        content = line.removesuffix("\n")
        rows.append(f'<tr><td class="{line_class}">{content}</td></tr>')
    return rows


def render_page(lines: Iterable[str], css: str, *, title: str, line_class: str = LINE_CLASS) -> str:
    """Assemble a complete HTML document.

    Args:
        lines: Rendered markup lines.
        css: Stylesheet for the theme the lines were rendered with.
        title: Document title (escaped here).
        line_class: Class of the cells holding each line.

    Returns:
        The HTML document.
    """
    return PAGE_TEMPLATE.format(
        title=html.escape(title),
        fg_var=FOREGROUND_VARIABLE,
        bg_var=BACKGROUND_VARIABLE,
        css=css,
        rows="\n".join(table_rows(lines, line_class=line_class)),
    )
