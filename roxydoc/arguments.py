"""
Function-argument extraction and ``@param`` merging.

The signature side parses an R function header that follows an entry;
the entry side reads the existing ``@param`` fields. ``merge_args`` joins
the two, keeping signature order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterable, Optional, Sequence, Tuple, Union

from .errors import UnbalancedDelimiterError
from .scanner import DEFAULT_MARKER, LineRange, iter_fields

OPEN_TO_CLOSE = {"(": ")", "[": "]", "{": "}"}
CLOSE_TO_OPEN = {v: k for k, v in OPEN_TO_CLOSE.items()}
QUOTES = {'"', "'", "`"}

# Regular expressions - R syntax
FUNCTION_DEF_RE = re.compile(
    r"^\s*(?P<name>`[^`]+`|[A-Za-z.][\w.]*)\s*(?:<<-|<-|=)\s*(?:function|\\)\s*\("
)
STRING_LITERAL_RE = re.compile(r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'", re.DOTALL)
COMMENT_RE = re.compile(r"#[^\n]*")
NESTED_GROUP_RE = re.compile(r"\([^()]*\)|\[[^\[\]]*\]|\{[^{}]*\}")
DEFAULT_VALUE_RE = re.compile(r"=[^,]*")
WHITESPACE_RE = re.compile(r"\s+")


# ========================================
# Data models
# ========================================

@dataclass(frozen=True)
class ParamDescriptor:
    name: str
    description: str = ""


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    args: list[str] = field(default_factory=list)
    line: int = 0
    header: str = ""


ArgLike = Union[str, ParamDescriptor, Tuple[str, str]]


# ========================================
# Delimiter matching
# ========================================

def find_matching_delimiter(text: str, open_index: int) -> int:
    """Return the index of the delimiter that closes ``text[open_index]``.

    Nesting of ``()``, ``[]`` and ``{}`` is tracked; quoted strings and
    ``#`` comments are skipped. Raises ``UnbalancedDelimiterError`` when
    the text runs out (or a closer of the wrong kind shows up) first.
    """
    opener = text[open_index:open_index + 1]
    if opener not in OPEN_TO_CLOSE:
        raise ValueError(f"no opening delimiter at offset {open_index}: {opener!r}")

    stack: list[str] = []
    i = open_index
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            i += 1
            while i < n and text[i] != ch:
                if text[i] == "\\":
                    i += 1
                i += 1
        elif ch == "#":
            while i < n and text[i] != "\n":
                i += 1
        elif ch in OPEN_TO_CLOSE:
            stack.append(ch)
        elif ch in CLOSE_TO_OPEN:
            if not stack or stack[-1] != CLOSE_TO_OPEN[ch]:
                raise UnbalancedDelimiterError(open_index, opener)
            stack.pop()
            if not stack:
                return i
        i += 1

    raise UnbalancedDelimiterError(open_index, opener)


# ========================================
# Argument extraction
# ========================================

def extract_args(param_text: str) -> list[str]:
    """Return the parameter names of a raw parameter list.

    ``param_text`` may include the enclosing parentheses. Default values,
    including nested calls such as ``b = foo(1, 2)``, never produce extra
    names. Duplicates are kept in the order given.
    """
    s = param_text.strip()
    if s.startswith("("):
        close = find_matching_delimiter(s, 0)
        s = s[1:close]

    s = STRING_LITERAL_RE.sub('""', s)
    s = COMMENT_RE.sub("", s)

    while True:
        reduced = NESTED_GROUP_RE.sub("", s)
        if reduced == s:
            break
        s = reduced

    s = DEFAULT_VALUE_RE.sub("", s)
    s = WHITESPACE_RE.sub("", s)
    return [a for a in s.split(",") if a]


def find_function_signature(lines: Sequence[str], start: int) -> Optional[FunctionSignature]:
    """Parse the function defined at the first non-blank line from ``start``.

    Returns ``None`` when that line is not a function definition. The
    parameter list may continue over several lines.
    """
    i = start
    while i < len(lines) and not lines[i].strip():
        i += 1
    if i >= len(lines):
        return None

    m = FUNCTION_DEF_RE.match(lines[i])
    if not m:
        return None

    text = "\n".join(lines[i:])
    open_index = m.end() - 1
    close_index = find_matching_delimiter(text, open_index)
    header = WHITESPACE_RE.sub(" ", text[:close_index + 1]).strip()

    return FunctionSignature(
        name=m.group("name").strip("`"),
        args=extract_args(text[open_index:close_index + 1]),
        line=i,
        header=header,
    )


# ========================================
# @param fields
# ========================================

def parse_param_fields(
    lines: Sequence[str], entry: LineRange, marker: str = DEFAULT_MARKER
) -> list[ParamDescriptor]:
    """Read the ``@param`` fields of an entry in the order they appear."""
    params: list[ParamDescriptor] = []
    for fld in iter_fields(lines, entry, marker):
        if fld.tag != "param":
            continue
        first, *rest = fld.body.split("\n")
        parts = first.strip().split(None, 1)
        if not parts:
            # "@param" with no name: nothing to merge against.
            continue
        desc = parts[1] if len(parts) > 1 else ""
        params.append(ParamDescriptor(parts[0], "\n".join([desc] + rest).lstrip()))
    return params


def _as_pair(arg: ArgLike) -> tuple[str, str]:
    if isinstance(arg, ParamDescriptor):
        return arg.name, arg.description
    if isinstance(arg, str):
        return arg, ""
    name, desc = arg
    return name, desc or ""


def merge_args(
    signature_args: Iterable[ArgLike], entry_args: Iterable[ArgLike]
) -> list[ParamDescriptor]:
    """Merge documented parameters into the current signature.

    The result has one descriptor per signature name, in signature order.
    Descriptions documented in the entry win over the signature's empty
    placeholder. Documented names missing from the signature are dropped.
    """
    documented: dict[str, str] = {}
    for arg in entry_args:
        name, desc = _as_pair(arg)
        documented.setdefault(name, desc)

    merged: list[ParamDescriptor] = []
    seen: set[str] = set()
    for arg in signature_args:
        name, placeholder = _as_pair(arg)
        if name in seen:
            continue
        seen.add(name)
        merged.append(ParamDescriptor(name, documented.get(name, placeholder)))
    return merged
