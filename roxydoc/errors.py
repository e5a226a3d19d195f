"""Exceptions raised by roxydoc.

Positions outside an entry are not errors: scanner functions return
``None`` for those and callers branch on it.
"""


class RoxyError(Exception):
    """Base class for roxydoc errors."""


class UnbalancedDelimiterError(RoxyError, ValueError):
    """An opening delimiter has no matching close before the end of the text."""

    def __init__(self, open_index: int, delimiter: str):
        super().__init__(f"unbalanced {delimiter!r} opened at offset {open_index}")
        self.open_index = open_index
        self.delimiter = delimiter


class NoFunctionError(RoxyError):
    """The cursor is neither in an entry nor on a function definition."""


class ConfigError(RoxyError):
    """A config file could not be read or has the wrong shape."""
