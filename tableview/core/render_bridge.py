from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from .columns import ColumnDefinition
from .row_store import Row


@dataclass
class OpenRow:
    """
    An "open" detail row shown directly beneath its parent row.

    - parent: master index of the parent row
    - content: opaque content handed to the render bridge
    - css_class: class name for the detail cell
    - span: number of visible columns the detail cell spans
    - handle: bridge handle of the rendered detail row, if any
    """

    parent: int
    content: Any
    css_class: str = ""
    span: int = 0
    handle: Any = None


class RenderBridge(ABC):
    """
    Abstract presentation layer driven by the view coordinator.

    Defines the contract that every bridge must follow
    - 'render_window' - draw the rows of the current page, assigning
      `row.visual_handle` for rows it creates
    - 'detach_row' - throw away the visual element of a deleted row
    - 'reinsert_cell' - put back a cell detached when its column was hidden
    - 'recalculate_sizing' - dependent column sizing pass

    Bridges may read rows and columns but never reorder the coordinator's
    indices; every change flows back through the coordinator.
    """

    @abstractmethod
    def render_window(self, rows: Sequence[Row], columns: Sequence[ColumnDefinition]) -> None:
        raise NotImplementedError()

    @abstractmethod
    def detach_row(self, handle: Any) -> None:
        raise NotImplementedError()

    @abstractmethod
    def reinsert_cell(self, row_handle: Any, column: ColumnDefinition, cell_payload: Any) -> None:
        raise NotImplementedError()

    @abstractmethod
    def recalculate_sizing(self, columns: Sequence[ColumnDefinition]) -> None:
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Optional hooks, no-ops by default
    # ------------------------------------------------------------------
    def detach_cell(self, row_handle: Any, column: ColumnDefinition) -> Any:
        """Remove a cell from a rendered row and return its exact payload."""
        return None

    def update_cell(self, row_handle: Any, column: ColumnDefinition, display: str) -> None:
        """Refresh the content of a rendered, visible cell."""
        return None

    def render_sub_row(self, parent_handle: Any, open_row: OpenRow) -> Any:
        """Insert a detail row after `parent_handle` and return its handle."""
        return None

    def remove_sub_row(self, open_row: OpenRow) -> None:
        return None


class NullRenderBridge(RenderBridge):
    """Bridge that renders nothing. Used when the table has no surface."""

    def render_window(self, rows, columns) -> None:
        return None

    def detach_row(self, handle) -> None:
        return None

    def reinsert_cell(self, row_handle, column, cell_payload) -> None:
        return None

    def recalculate_sizing(self, columns) -> None:
        return None
