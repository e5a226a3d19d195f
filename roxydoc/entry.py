"""
Edits on Roxygen entries: new templates, ``@param`` updates, region
toggling, line continuation, tag completion and field filling.

Functions take a sequence of lines and return a new list; the input is
never modified.
"""
from __future__ import annotations

import re
import textwrap
from typing import Sequence

from .arguments import (
    FunctionSignature,
    ParamDescriptor,
    find_function_signature,
    merge_args,
    parse_param_fields,
)
from .config import RoxyConfig
from .errors import NoFunctionError
from .scanner import (
    DEFAULT_MARKER,
    LineRange,
    entry_bounds,
    field_bounds,
    is_blank_marked,
    is_marked,
    iter_fields,
    line_tag,
    strip_marker,
)

PROSE_TAGS = {"description", "details"}
NO_FILL_TAGS = {"example", "examples", "usage"}
# Tags that may come before the @param block when an entry has none yet.
LEADING_TAGS = {"title", "description", "details"}

INDENT_RE = re.compile(r"^[ \t]*")


def _indent_of(line: str) -> str:
    return INDENT_RE.match(line).group(0)  # type: ignore[union-attr]


# ========================================
# Rendering
# ========================================

def render_params(params: Sequence[ParamDescriptor], marker: str = DEFAULT_MARKER) -> list[str]:
    lines: list[str] = []
    for p in params:
        first, *rest = p.description.split("\n")
        lines.append(f"{marker} @param {p.name} {first}".rstrip())
        for ln in rest:
            lines.append(f"{marker} {ln}".rstrip())
    return lines


def render_template(signature: FunctionSignature, config: RoxyConfig) -> list[str]:
    """Render a fresh entry for ``signature`` from ``config.template``.

    ``description`` and ``details`` are written as prose paragraphs, with a
    blank marked line between consecutive paragraphs. ``param`` expands to
    one line per argument.
    """
    marker = config.marker
    lines: list[str] = []
    last_was_prose = False

    for tag, default in config.template:
        if tag in PROSE_TAGS:
            if last_was_prose:
                lines.append(marker)
            lines.append(f"{marker} {default}".rstrip())
            last_was_prose = True
            continue

        last_was_prose = False
        if tag == "param":
            lines.extend(render_params(merge_args(signature.args, []), marker))
        elif tag == "author":
            lines.append(f"{marker} @author {default or config.author}".rstrip())
        else:
            lines.append(f"{marker} @{tag} {default}".rstrip())

    return lines


# ========================================
# Entry update
# ========================================

def _replace_params(
    lines: Sequence[str], entry: LineRange, signature: FunctionSignature, marker: str
) -> list[str]:
    params = merge_args(signature.args, parse_param_fields(lines, entry, marker))
    fields = list(iter_fields(lines, entry, marker))
    param_fields = [f for f in fields if f.tag == "param"]

    if param_fields:
        insert_at = param_fields[0].bounds.start
    else:
        insert_at = next(
            (f.bounds.start for f in fields if f.tag is not None and f.tag not in LEADING_TAGS),
            entry.end + 1,
        )

    removed: set[int] = set()
    for f in param_fields:
        removed.update(range(f.bounds.start, f.bounds.end + 1))

    # Blank marked lines between two @param fields travel with the field
    # they followed.
    separators: dict[str, list[str]] = {}
    for cur, nxt in zip(param_fields, param_fields[1:]):
        gap = range(cur.bounds.end + 1, nxt.bounds.start)
        if gap and all(is_blank_marked(lines[i], marker) for i in gap):
            removed.update(gap)
            name = cur.body.split(None, 1)[0] if cur.body.strip() else ""
            if name:
                separators.setdefault(name, [lines[i] for i in gap])

    indent = _indent_of(lines[entry.start])
    rendered: list[str] = []
    for n, p in enumerate(params):
        rendered.extend(indent + ln for ln in render_params([p], marker))
        if n < len(params) - 1:
            rendered.extend(separators.get(p.name, []))

    out: list[str] = []
    for i, ln in enumerate(lines):
        if i == insert_at:
            out.extend(rendered)
        if i in removed:
            continue
        out.append(ln)
    if insert_at >= len(lines):
        out.extend(rendered)
    return out


def update_entry(lines: Sequence[str], pos: int, config: RoxyConfig) -> list[str]:
    """Create or refresh the entry documenting the function at ``pos``.

    Inside an entry, the ``@param`` fields are rebuilt against the function
    that follows it. On a function definition without an entry, a new
    entry is rendered from the template above it.
    """
    marker = config.marker
    entry = entry_bounds(lines, pos, marker)
    if entry is not None:
        signature = find_function_signature(lines, entry.end + 1)
        if signature is None:
            raise NoFunctionError(f"no function definition follows the entry at line {entry.start + 1}")
        return _replace_params(lines, entry, signature, marker)

    signature = find_function_signature(lines, pos)
    if signature is None:
        raise NoFunctionError(f"line {pos + 1} is not in an entry or on a function definition")

    above = signature.line - 1
    while above >= 0 and not lines[above].strip():
        above -= 1
    existing = entry_bounds(lines, above, marker) if above >= 0 else None
    if existing is not None:
        return _replace_params(lines, existing, signature, marker)

    indent = _indent_of(lines[signature.line])
    template = [indent + ln for ln in render_template(signature, config)]
    return list(lines[:signature.line]) + template + list(lines[signature.line:])


# ========================================
# Small editing commands
# ========================================

def toggle_region(lines: Sequence[str], start: int, end: int, marker: str = DEFAULT_MARKER) -> list[str]:
    """Add or remove the marker on lines ``start`` to ``end`` (inclusive).

    The first line decides the direction: a marked first line means the
    marker is removed from every marked line of the range.
    """
    out = list(lines)
    end = min(end, len(lines) - 1)
    if start > end:
        return out

    if is_marked(lines[start], marker):
        for i in range(start, end + 1):
            if is_marked(lines[i], marker):
                out[i] = _indent_of(lines[i]) + strip_marker(lines[i], marker)
    else:
        for i in range(start, end + 1):
            out[i] = f"{marker} {lines[i]}" if lines[i].strip() else marker
    return out


def continue_line(
    lines: Sequence[str], line: int, column: int, marker: str = DEFAULT_MARKER
) -> tuple[list[str], int]:
    """Break ``line`` at ``column``; inside an entry the new line keeps the marker.

    Returns the new lines and the index of the line the cursor moves to.
    """
    text = lines[line]
    head, tail = text[:column], text[column:]
    prefix_end = len(_indent_of(text)) + len(marker)
    if is_marked(text, marker) and column >= prefix_end:
        new = f"{_indent_of(text)}{marker} {tail.lstrip()}"
    else:
        new = tail
    out = list(lines[:line]) + [head, new] + list(lines[line + 1:])
    return out, line + 1


def complete_tag(prefix: str, config: RoxyConfig) -> list[str]:
    p = prefix.lstrip("@")
    return sorted((t for t in config.tags if t.startswith(p)), key=str.lower)


def fill_field(lines: Sequence[str], pos: int, config: RoxyConfig) -> list[str]:
    """Re-wrap the field at ``pos`` to ``config.fill_column``."""
    marker = config.marker
    bounds = field_bounds(lines, pos, marker)
    if bounds is None or is_blank_marked(lines[pos], marker):
        return list(lines)

    tag = line_tag(lines[bounds.start], marker)
    if tag in NO_FILL_TAGS or (tag == "param" and not config.fill_param):
        return list(lines)

    words = " ".join(
        t for t in (strip_marker(ln, marker).strip() for ln in bounds.slice(lines)) if t
    )
    prefix = f"{_indent_of(lines[bounds.start])}{marker} "
    wrapped = textwrap.wrap(
        words,
        width=config.fill_column,
        initial_indent=prefix,
        subsequent_indent=prefix,
        break_long_words=False,
        break_on_hyphens=False,
    )
    if not wrapped:
        return list(lines)
    return list(lines[:bounds.start]) + wrapped + list(lines[bounds.end + 1:])
