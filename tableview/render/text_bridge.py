from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from tableview.core.cells import get_display_data
from tableview.core.columns import ColumnDefinition
from tableview.core.render_bridge import OpenRow, RenderBridge
from tableview.core.row_store import Row


@dataclass(eq=False)
class TextRow:
    """Visual handle of a rendered text row: column index -> cell text."""
    identity: int
    cells: Dict[int, Any] = field(default_factory=dict)
    sub_row: Optional[OpenRow] = None


class TextRenderBridge(RenderBridge):
    """
    Plain-text rendering surface.

    Rows keep their handle (and therefore their cell content) across draws,
    the same way DOM rows are reused, so hidden cells can be detached and put
    back untouched.
    """

    def __init__(self, min_width: int = 3, max_width: int = 40) -> None:
        self.min_width = min_width
        self.max_width = max_width
        self.rows: List[TextRow] = []
        self.columns: List[ColumnDefinition] = []
        self.widths: Dict[int, int] = {}
        self.sizing_passes = 0

    # ------------------------------------------------------------------
    # RenderBridge contract
    # ------------------------------------------------------------------
    def render_window(self, rows: Sequence[Row], columns: Sequence[ColumnDefinition]) -> None:
        self.columns = list(columns)
        window = []
        for row in rows:
            handle = row.visual_handle
            if handle is None:
                handle = TextRow(identity=row.master_index)
                row.visual_handle = handle
            for column in columns:
                if column.visible and column.index not in handle.cells:
                    handle.cells[column.index] = get_display_data(row, column)
            window.append(handle)
        self.rows = window

    def detach_row(self, handle: TextRow) -> None:
        self.rows = [r for r in self.rows if r is not handle]
        handle.cells.clear()
        handle.sub_row = None

    def detach_cell(self, row_handle: TextRow, column: ColumnDefinition) -> Any:
        return row_handle.cells.pop(column.index, None)

    def reinsert_cell(self, row_handle: TextRow, column: ColumnDefinition, cell_payload: Any) -> None:
        row_handle.cells[column.index] = cell_payload

    def update_cell(self, row_handle: TextRow, column: ColumnDefinition, display: str) -> None:
        row_handle.cells[column.index] = display

    def recalculate_sizing(self, columns: Sequence[ColumnDefinition]) -> None:
        self.sizing_passes += 1
        widths = {}
        for column in columns:
            if not column.visible:
                continue
            longest = max(
                [len(column.title)] + [len(str(r.cells.get(column.index, ""))) for r in self.rows]
            )
            widths[column.index] = max(self.min_width, min(self.max_width, longest))
        self.widths = widths

    def render_sub_row(self, parent_handle: TextRow, open_row: OpenRow) -> Any:
        parent_handle.sub_row = open_row
        return parent_handle

    def remove_sub_row(self, open_row: OpenRow) -> None:
        for handle in self.rows:
            if handle.sub_row is open_row:
                handle.sub_row = None

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def _width(self, column: ColumnDefinition) -> int:
        return self.widths.get(column.index, max(self.min_width, min(self.max_width, len(column.title))))

    def lines(self) -> List[str]:
        visible = [c for c in self.columns if c.visible]
        lines = [" | ".join(c.title[:self._width(c)].ljust(self._width(c)) for c in visible)]
        lines.append("-+-".join("-" * self._width(c) for c in visible))
        for handle in self.rows:
            cells = [str(handle.cells.get(c.index, ""))[:self._width(c)].ljust(self._width(c)) for c in visible]
            lines.append(" | ".join(cells))
            if handle.sub_row is not None:
                lines.append(f"  > {handle.sub_row.content}")
        return lines

    def render(self) -> str:
        return "\n".join(self.lines())
