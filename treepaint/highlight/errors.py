"""Error kinds raised while building themes and rendering captures."""


class HighlightError(Exception):
    """Base class for all highlighting errors."""


class ThemeError(HighlightError):
    """Raised when a theme description cannot be turned into a Theme.

    Covers malformed descriptions, undefined palette references, unknown
    ``inherits`` targets and inheritance cycles.
    """


class InputError(HighlightError):
    """Raised when a capture list cannot be rendered against a source buffer.

    Covers partially overlapping ranges, ranges outside the source and
    malformed capture entries.
    """
