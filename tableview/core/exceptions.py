from __future__ import annotations

from typing import Any


class TableViewError(Exception):
    """Base exception for all tableview errors"""
    pass


class ConfigError(TableViewError):
    """Invalid or inconsistent table config or column definition"""
    pass


class IndexOutOfRange(TableViewError, IndexError):
    """
    A target identity/position does not resolve to a live row, or a
    column index does not name a configured column
    """

    def __init__(self, kind: str, target: Any):
        self.kind = kind
        self.target = target
        super().__init__(f"{kind} {target!r} does not resolve to a live {kind}")


class InvalidSearchPattern(TableViewError):
    """
    Regex search term that fails to compile.

    Never raised past the filter pass: the affected scope matches nothing and
    the error is handed back to the caller in the filter result.
    """

    def __init__(self, pattern: str, reason: str, column: int | None = None):
        self.pattern = pattern
        self.reason = reason
        self.column = column
        scope = "global search" if column is None else f"column {column} search"
        super().__init__(f"Invalid pattern {pattern!r} in {scope}: {reason}")
