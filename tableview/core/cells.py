from __future__ import annotations

from typing import Any

from .columns import ColumnDefinition
from .row_store import Row


def get_cell_data(row: Row, column: ColumnDefinition) -> Any:
    """Raw payload value of a cell."""
    value = column.cell_data(row.payload)
    return column.default_content if value is None else value


def get_display_data(row: Row, column: ColumnDefinition) -> str:
    """
    Display string for a cell, cached in the row's render cache.
    """
    cached = row.render_cache.get(column.index)
    if cached is not None:
        return cached
    if column.render is not None:
        display = column.render(row.payload, column)
        display = "" if display is None else str(display)
    else:
        display = to_text(get_cell_data(row, column))
    row.render_cache[column.index] = display
    return display


def get_source_data(row: Row, column: ColumnDefinition) -> Any:
    """Value consulted by the filter and sort passes."""
    if column.render is not None and column.use_rendered:
        return get_display_data(row, column)
    return get_cell_data(row, column)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)
