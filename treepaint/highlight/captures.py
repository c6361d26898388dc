"""Capture values and their normalization before rendering.

Captures come from an external grammar/query layer as byte ranges tagged with
a dotted scope. Before rendering they are sorted outer-first, same-range
duplicates are collapsed to the highest priority capture, and the
containment invariant (intersecting ranges must nest) is checked.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from treepaint.highlight.errors import InputError
from treepaint.highlight.scopes import Scope, format_scope, parse_scope
from treepaint.logger import get_logger

logger = get_logger(__name__)

# Positional layout of a raw capture tuple
_CAPTURE_START = 0
_CAPTURE_END = 1
_CAPTURE_SCOPE = 2
_CAPTURE_PRIORITY = 3
_CAPTURE_ORDER = 4
_CAPTURE_MIN_FIELDS = 3
_CAPTURE_MAX_FIELDS = 5


@dataclass(frozen=True)
class Capture:
    """A byte range of source tagged with a scope.

    Attributes:
        start: First byte of the range.
        end: Byte after the last byte of the range.
        scope: Scope components.
        priority: Higher priority wins among captures of the same range.
        order: Declaration order of the query pattern; breaks priority ties.
    """

    start: int
    end: int
    scope: Scope
    priority: int = 0
    order: int = 0

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def scope_name(self) -> str:
        return format_scope(self.scope)

    def contains(self, other: "Capture") -> bool:
        """Check if ``other`` lies entirely inside this capture."""
        return self.start <= other.start and other.end <= self.end

    @classmethod
    def from_raw(cls, raw: object) -> "Capture":
        """Build a capture from a ``(start, end, scope[, priority[, order]])`` sequence or mapping.

        Args:
            raw: Raw capture as handed over by the query layer.

        Returns:
            A Capture instance.

        Raises:
            InputError: If the raw capture is malformed.
        """
        if isinstance(raw, Capture):
            return raw
        if isinstance(raw, Mapping):
            fields = [raw.get("start"), raw.get("end"), raw.get("scope"), raw.get("priority", 0), raw.get("order", 0)]
        elif isinstance(raw, Sequence) and not isinstance(raw, str | bytes):
            if not _CAPTURE_MIN_FIELDS <= len(raw) <= _CAPTURE_MAX_FIELDS:
                raise InputError(f"Capture {raw!r} must have between 3 and 5 fields")
            fields = [*raw, *([0] * (_CAPTURE_MAX_FIELDS - len(raw)))]
        else:
            raise InputError(f"Capture {raw!r} must be a sequence or a mapping")

        for index in (_CAPTURE_START, _CAPTURE_END, _CAPTURE_PRIORITY, _CAPTURE_ORDER):
            value = fields[index]
            if not isinstance(value, int) or isinstance(value, bool):
                raise InputError(f"Capture {raw!r} has a non-integer field {value!r}")

        scope = parse_scope(fields[_CAPTURE_SCOPE])
        if scope is None:
            raise InputError(f"Capture {raw!r} has a malformed scope {fields[_CAPTURE_SCOPE]!r}")

        return cls(
            start=fields[_CAPTURE_START],
            end=fields[_CAPTURE_END],
            scope=scope,
            priority=fields[_CAPTURE_PRIORITY],
            order=fields[_CAPTURE_ORDER],
        )


def _wins_over(candidate: Capture, current: Capture) -> bool:
    """Check if ``candidate`` replaces ``current`` for the same range.

    Higher priority wins, then later declaration order; on a full tie the
    capture seen later in the input wins.
    """
    return (candidate.priority, candidate.order) >= (current.priority, current.order)


def normalize_captures(captures: Iterable[object], source_length: int) -> list[Capture]:
    """Validate, deduplicate and sort captures for rendering.

    Args:
        captures: Raw captures or Capture instances.
        source_length: Length of the source buffer in bytes.

    Returns:
        Captures sorted by start ascending, then length descending, with one
        capture per distinct range.

    Raises:
        InputError: If a capture is malformed, lies outside the source, or
            partially overlaps another capture.
    """
    by_range: dict[tuple[int, int], Capture] = {}
    dropped = 0
    for raw in captures:
        capture = Capture.from_raw(raw)
        if capture.start < 0 or capture.end > source_length or capture.start > capture.end:
            raise InputError(
                f"Capture {capture.scope_name!r} range [{capture.start}, {capture.end}) "
                f"is outside the source of {source_length} bytes"
            )
        if capture.start == capture.end:
            dropped += 1
            continue
        key = (capture.start, capture.end)
        current = by_range.get(key)
        if current is None or _wins_over(capture, current):
            if current is not None:
                dropped += 1
            by_range[key] = capture
        else:
            dropped += 1

    ordered = sorted(by_range.values(), key=lambda capture: (capture.start, -capture.length))

    # Every capture must sit inside the innermost open capture or after it
    open_captures: list[Capture] = []
    for capture in ordered:
        while open_captures and open_captures[-1].end <= capture.start:
            open_captures.pop()
        if open_captures and not open_captures[-1].contains(capture):
            outer = open_captures[-1]
            raise InputError(
                f"Capture {capture.scope_name!r} [{capture.start}, {capture.end}) partially overlaps "
                f"{outer.scope_name!r} [{outer.start}, {outer.end})"
            )
        open_captures.append(capture)

    if dropped:
        logger.debug(f"Dropped {dropped} empty or duplicate captures")
    return ordered
