from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence


@dataclass(frozen=True)
class TextBuffer:
    """Snapshot of a host text buffer: its lines and a cursor line.

    Edits return a new buffer; the host decides when to write it back.
    """

    lines: tuple[str, ...] = field(default_factory=tuple)
    cursor: int = 0
    trailing_newline: bool = True

    @classmethod
    def from_text(cls, text: str, cursor: int = 0) -> "TextBuffer":
        # Only "\n" ends a line; form feeds and other separators stay in the text.
        lines = text.split("\n") if text else []
        if text.endswith("\n"):
            lines.pop()
        return cls(
            lines=tuple(lines),
            cursor=cursor,
            trailing_newline=text.endswith("\n") or not text,
        )

    def to_text(self) -> str:
        text = "\n".join(self.lines)
        if self.lines and self.trailing_newline:
            text += "\n"
        return text

    def with_lines(self, lines: Iterable[str], cursor: int | None = None) -> "TextBuffer":
        return TextBuffer(
            lines=tuple(lines),
            cursor=self.cursor if cursor is None else cursor,
            trailing_newline=self.trailing_newline,
        )

    def replace_lines(self, start: int, end: int, new_lines: Sequence[str]) -> "TextBuffer":
        """Return a buffer with ``[start:end]`` replaced by ``new_lines``.

        A cursor after the edited range moves with the text below it.
        """
        lines: List[str] = list(self.lines)
        lines[start:end] = list(new_lines)
        cursor = self.cursor
        if cursor >= end:
            cursor += len(new_lines) - (end - start)
        elif cursor >= start:
            cursor = start
        return self.with_lines(lines, cursor=max(0, min(cursor, max(len(lines) - 1, 0))))

    def __len__(self) -> int:
        return len(self.lines)


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")
