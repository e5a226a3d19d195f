"""
Entry and field boundary detection for Roxygen comment blocks.

An entry is a maximal run of lines starting with the marker (``##'`` by
default). Fields are the paragraphs of an entry: a field ends at a blank
marked line, at the next ``@tag`` line or at the entry boundary.

Every function here is a pure function of the lines it is given. Nothing
is cached between calls.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import re
from typing import Iterator, Optional, Sequence

DEFAULT_MARKER = "##'"

TAG_RE = re.compile(r"^@(?P<tag>[A-Za-z0-9_.]+)\s?(?P<rest>.*)$")


@lru_cache(maxsize=16)
def _marker_re(marker: str) -> re.Pattern[str]:
    return re.compile(r"^(?P<indent>[ \t]*)" + re.escape(marker) + r"(?P<content>.*)$")


# ========================================
# Data models
# ========================================

@dataclass(frozen=True)
class LineRange:
    """Inclusive range of line indexes."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __contains__(self, pos: object) -> bool:
        return isinstance(pos, int) and self.start <= pos <= self.end

    def slice(self, lines: Sequence[str]) -> list[str]:
        return list(lines[self.start:self.end + 1])


@dataclass(frozen=True)
class Field:
    bounds: LineRange
    tag: Optional[str]
    text: list[str]

    @property
    def body(self) -> str:
        """Field text after the ``@tag`` token, or the whole text for prose."""
        if not self.text:
            return ""
        first = self.text[0].lstrip()
        if self.tag is not None:
            m = TAG_RE.match(first)
            first = m.group("rest") if m else first
        return "\n".join([first] + self.text[1:])


# ========================================
# Line classification
# ========================================

def is_marked(line: str, marker: str = DEFAULT_MARKER) -> bool:
    return _marker_re(marker).match(line) is not None


def strip_marker(line: str, marker: str = DEFAULT_MARKER) -> str:
    """Return the content after the marker, without the separating space.

    Lines that do not carry the marker are returned unchanged.
    """
    m = _marker_re(marker).match(line)
    if not m:
        return line
    content = m.group("content")
    return content[1:] if content.startswith(" ") else content


def is_blank_marked(line: str, marker: str = DEFAULT_MARKER) -> bool:
    m = _marker_re(marker).match(line)
    return m is not None and not m.group("content").strip()


def line_tag(line: str, marker: str = DEFAULT_MARKER) -> Optional[str]:
    """Return the ``@tag`` name that opens this marked line, if any."""
    m = _marker_re(marker).match(line)
    if not m:
        return None
    t = TAG_RE.match(m.group("content").lstrip())
    return t.group("tag") if t else None


def _is_field_break(line: str, marker: str) -> bool:
    return is_blank_marked(line, marker) or line_tag(line, marker) is not None


# ========================================
# Boundaries
# ========================================

def entry_bounds(lines: Sequence[str], pos: int, marker: str = DEFAULT_MARKER) -> Optional[LineRange]:
    """Return the entry containing line ``pos``, or ``None`` if it is not marked."""
    if pos < 0 or pos >= len(lines) or not is_marked(lines[pos], marker):
        return None

    start = pos
    while start > 0 and is_marked(lines[start - 1], marker):
        start -= 1

    end = pos
    while end + 1 < len(lines) and is_marked(lines[end + 1], marker):
        end += 1

    return LineRange(start, end)


def field_bounds(lines: Sequence[str], pos: int, marker: str = DEFAULT_MARKER) -> Optional[LineRange]:
    """Return the field containing line ``pos``.

    A tag line belongs to the field it opens. A blank marked line is a
    field of its own, which callers can tell apart by its lack of content.
    """
    entry = entry_bounds(lines, pos, marker)
    if entry is None:
        return None

    if is_blank_marked(lines[pos], marker):
        return LineRange(pos, pos)

    start = pos
    while start > entry.start and line_tag(lines[start], marker) is None:
        if is_blank_marked(lines[start - 1], marker):
            break
        start -= 1

    end = pos
    while end < entry.end and not _is_field_break(lines[end + 1], marker):
        end += 1

    return LineRange(start, end)


def iter_entries(lines: Sequence[str], marker: str = DEFAULT_MARKER) -> Iterator[LineRange]:
    i = 0
    while i < len(lines):
        entry = entry_bounds(lines, i, marker)
        if entry is None:
            i += 1
            continue
        yield entry
        i = entry.end + 1


def iter_fields(lines: Sequence[str], entry: LineRange, marker: str = DEFAULT_MARKER) -> Iterator[Field]:
    """Split an entry into fields; blank marked lines separate them."""
    i = entry.start
    while i <= entry.end:
        if is_blank_marked(lines[i], marker):
            i += 1
            continue
        bounds = field_bounds(lines, i, marker)
        if bounds is None:
            break
        yield Field(
            bounds=bounds,
            tag=line_tag(lines[bounds.start], marker),
            text=[strip_marker(ln, marker) for ln in bounds.slice(lines)],
        )
        i = bounds.end + 1


def next_entry(lines: Sequence[str], pos: int, marker: str = DEFAULT_MARKER) -> Optional[int]:
    """Return the first line of the next entry starting after ``pos``."""
    current = entry_bounds(lines, pos, marker)
    i = current.end + 1 if current else pos + 1
    while i < len(lines):
        if is_marked(lines[i], marker):
            return i
        i += 1
    return None


def previous_entry(lines: Sequence[str], pos: int, marker: str = DEFAULT_MARKER) -> Optional[int]:
    """Return the first line of the closest entry starting before ``pos``."""
    current = entry_bounds(lines, pos, marker)
    i = (current.start if current else min(pos, len(lines))) - 1
    while i >= 0:
        if is_marked(lines[i], marker):
            return entry_bounds(lines, i, marker).start  # type: ignore[union-attr]
        i -= 1
    return None
