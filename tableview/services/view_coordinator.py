from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from tableview.config.model import TableConfig
from tableview.core.cells import get_cell_data, get_display_data
from tableview.core.columns import (
    ColumnDefinition,
    SearchCriteria,
    resolve_column,
    visible_column_count,
)
from tableview.core.exceptions import IndexOutOfRange, InvalidSearchPattern
from tableview.core.render_bridge import NullRenderBridge, OpenRow, RenderBridge
from tableview.core.row_store import Row, RowStore
from tableview.core.updates import CellUpdate, RowMappingUpdate, RowUpdate, Update, UpdateMode
from tableview.core.view_state import ViewState
from tableview.engine.filtering import (
    DEFAULT_NORMALISER,
    FilterEngine,
    TextNormaliser,
    get_normaliser,
    narrows,
)
from tableview.engine.pagination import Navigation, PageInfo, Paginator
from tableview.engine.sorting import SortEngine, SortKey

logger = logging.getLogger(__name__)

DeleteCallback = Callable[["ViewCoordinator", Row], None]


class DrawPhase(Enum):
    IDLE = "idle"
    FILTERING = "filtering"
    SORTING = "sorting"
    PAGINATING = "paginating"
    RENDERING = "rendering"


def _position(sequence: Sequence[int], value: int) -> Optional[int]:
    try:
        return sequence.index(value)
    except ValueError:
        return None


class ViewCoordinator:
    """
    Owner of the row indices and orchestrator of the draw cycle.

    Index tiers:
    - master_order: every live identity, in insertion order
    - display_order: filtered and sorted subsequence of master_order
    - search_cache: search text of display_order[i], always index-aligned
    - paginator: page_start/page_length window into display_order

    Every public operation runs to completion synchronously. A draw request
    that arrives while a draw is in flight (e.g. from a bridge callback) is
    rejected rather than queued.
    """

    def __init__(
        self,
        columns: Sequence[ColumnDefinition],
        bridge: Optional[RenderBridge] = None,
        config: Optional[TableConfig] = None,
        normaliser: Optional[TextNormaliser] = None,
    ) -> None:
        config = config or TableConfig()
        if normaliser is None:
            normaliser = get_normaliser(config.normaliser) if config.normaliser else DEFAULT_NORMALISER

        self.columns: List[ColumnDefinition] = list(columns)
        self.bridge: RenderBridge = bridge or NullRenderBridge()
        self.store = RowStore()
        self.filter_engine = FilterEngine(normaliser)
        self.sort_engine = SortEngine(normaliser, config.blank_policy)
        self.paginator = Paginator(page_length=config.page_length)

        # Index tiers
        self.master_order: List[int] = []
        self.display_order: List[int] = []
        self.search_cache: List[str] = []

        # Criteria
        self.search: SearchCriteria = SearchCriteria(config.search.term, config.search.regex, config.search.smart)
        self.column_searches: List[SearchCriteria] = [
            SearchCriteria(c.search.term, c.search.regex, c.search.smart) for c in self.columns
        ]
        self.sort_keys: List[SortKey] = list(config.sort)
        self.sort_fixed_pre: List[SortKey] = list(config.sort_fixed_pre)
        self.sort_fixed_post: List[SortKey] = list(config.sort_fixed_post)

        self.open_rows: Dict[int, OpenRow] = {}
        self.last_filter_errors: List[InvalidSearchPattern] = []
        self.phase = DrawPhase.IDLE

        # Criteria applied by the last full filter pass; None once rows changed
        self._filtered_search: Optional[SearchCriteria] = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def column(self, column: int) -> ColumnDefinition:
        return resolve_column(self.columns, column)

    def _search_text(self, row: Row) -> str:
        return self.filter_engine.search_text(row, self.columns)

    def _patch_search_cache(self, row: Row) -> None:
        """Refresh the search cache entry of `row` at its current display position."""
        position = _position(self.display_order, row.master_index)
        if position is not None:
            self.search_cache[position] = self._search_text(row)

    @property
    def visible_span(self) -> int:
        return visible_column_count(self.columns)

    def window(self) -> List[int]:
        """Identities on the current page."""
        return self.display_order[self.paginator.page_start:self.paginator.visible_end(len(self.display_order))]

    def page_info(self) -> PageInfo:
        return self.paginator.page_info(len(self.display_order))

    # ------------------------------------------------------------------
    # Draw cycle
    # ------------------------------------------------------------------
    def draw(self, complete: bool = True, *, incremental: bool = False) -> bool:
        """
        Run a draw cycle.

        :param complete: full redraw (filter -> sort -> paginate -> render) when
                         True, positional redraw (paginate -> render) otherwise
        :param incremental: narrow the current display order instead of
                            re-filtering master_order (caller guarantees validity)
        :return: False if the request was rejected because a draw was running
        """
        if self.phase is not DrawPhase.IDLE:
            logger.warning("Draw requested during %s phase; ignoring", self.phase.value)
            return False

        try:
            if complete:
                self.phase = DrawPhase.FILTERING
                self._filter_pass(incremental)
                self.phase = DrawPhase.SORTING
                self._sort_pass()
            self.phase = DrawPhase.PAGINATING
            self.paginator.clamp(len(self.display_order))
            self.phase = DrawPhase.RENDERING
            self._render()
        finally:
            self.phase = DrawPhase.IDLE

        logger.debug(
            "Draw complete",
            extra={
                "complete": complete,
                "rows": len(self.master_order),
                "displayed": len(self.display_order),
                "page_start": self.paginator.page_start,
            },
        )
        return True

    def _filter_pass(self, incremental: bool) -> None:
        if incremental:
            result = self.filter_engine.refilter(self.display_order, self.search_cache, self.search)
        else:
            result = self.filter_engine.filter(
                self.store, self.master_order, self.columns, self.search, self.column_searches
            )
        self.display_order = result.display_order
        self.search_cache = result.search_cache
        self.last_filter_errors = result.errors
        self._filtered_search = SearchCriteria(self.search.term, self.search.regex, self.search.smart)

    def _sort_pass(self) -> None:
        self.display_order, self.search_cache = self.sort_engine.sort(
            self.store,
            self.display_order,
            self.search_cache,
            self.columns,
            self.sort_keys,
            pre=self.sort_fixed_pre,
            post=self.sort_fixed_post,
        )

    def _render(self) -> None:
        rows = [self.store.get(i) for i in self.window()]
        self.bridge.render_window(rows, self.columns)
        for row in rows:
            open_row = self.open_rows.get(row.master_index)
            if open_row is not None and row.visual_handle is not None:
                open_row.handle = self.bridge.render_sub_row(row.visual_handle, open_row)

    # ------------------------------------------------------------------
    # Add / clear
    # ------------------------------------------------------------------
    def add(self, payloads: Sequence[Any], redraw: bool = True) -> List[int]:
        """
        Add rows and return their identities. An empty batch is a no-op.

        Without a redraw the new rows only join master_order; they stay out
        of the display order until the next full draw.
        """
        if len(payloads) == 0:
            logger.debug("Empty batch passed to add; nothing to do")
            return []

        added = []
        for payload in payloads:
            master_index = self.store.insert(payload)
            self.master_order.append(master_index)
            added.append(master_index)

        self._filtered_search = None
        if redraw:
            self.draw(complete=True)
        return added

    def clear(self, redraw: bool = True) -> None:
        for row in self.store.clear():
            if row.visual_handle is not None:
                self.bridge.detach_row(row.visual_handle)
        for open_row in self.open_rows.values():
            self.bridge.remove_sub_row(open_row)
        self.open_rows.clear()
        self.master_order = []
        self.display_order = []
        self.search_cache = []
        self.paginator.page_start = 0
        self._filtered_search = None
        if redraw:
            self.draw(complete=True)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------
    def delete(self, target: int, callback: Optional[DeleteCallback] = None, redraw: bool = True) -> Any:
        """
        Remove a row and return its payload.

        The identity is removed from master_order and display_order at its
        own position in each, and the search cache entry at the display
        position goes with it.

        Raises:
            IndexOutOfRange: `target` is not a live row
        """
        row = self.store.remove(target)

        master_position = _position(self.master_order, target)
        if master_position is not None:
            del self.master_order[master_position]

        display_position = _position(self.display_order, target)
        if display_position is not None:
            del self.display_order[display_position]
            del self.search_cache[display_position]

        self._drop_open_row(target)
        if row.visual_handle is not None:
            self.bridge.detach_row(row.visual_handle)
            row.visual_handle = None

        if callback is not None:
            callback(self, row)

        self.paginator.clamp(len(self.display_order))

        if redraw:
            self.draw(complete=False)
        return row.payload

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def update(
        self,
        change: Update,
        target: int,
        redraw: bool = True,
        action: bool = True,
        mode: UpdateMode = UpdateMode.ROOT,
    ) -> int:
        """
        Apply a tagged update to a row and return 0.

        Whole-row updates replace the payload once, then rewrite every column
        through the single-cell path in NESTED mode. NESTED calls never
        redraw, never run the sizing pass and never treat their value as a
        whole row.

        Raises:
            IndexOutOfRange: `target` is not a live row, or the column is unknown
        """
        row = self.store.get(target)

        if mode is UpdateMode.NESTED or isinstance(change, CellUpdate):
            if not isinstance(change, CellUpdate):
                raise TypeError("Nested updates must target a single cell")
            self._update_cell(row, self.column(change.column), change.value)
        else:
            self.store.replace(target, self._merged_payload(row.payload, change))
            for column in self.columns:
                self.update(
                    CellUpdate(column.cell_data(row.payload), column.index),
                    target,
                    redraw=False,
                    action=False,
                    mode=UpdateMode.NESTED,
                )

        if mode is UpdateMode.NESTED:
            return 0

        self._patch_search_cache(row)
        self._filtered_search = None

        if action:
            self.bridge.recalculate_sizing(self.columns)
        if redraw:
            self.draw(complete=True)
        return 0

    def _merged_payload(self, payload: Any, change: Union[RowUpdate, RowMappingUpdate]) -> Any:
        if isinstance(change, RowUpdate):
            if isinstance(payload, (list, tuple)):
                return list(change.values)
            updated = payload
            for column, value in zip(self.columns, change.values):
                updated = column.set_cell_data(updated, value)
            return updated

        updated = payload
        for column in self.columns:
            if column.key in change.values:
                updated = column.set_cell_data(updated, change.values[column.key])
        return updated

    def _update_cell(self, row: Row, column: ColumnDefinition, value: Any) -> None:
        if column.cell_data(row.payload) is value:
            # Value already in place (whole-row pass); only derived data changes
            row.invalidate()
        else:
            self.store.replace(row.master_index, column.set_cell_data(row.payload, value))
        display = get_display_data(row, column)

        if row.visual_handle is None:
            return
        if column.index in row.hidden_cells:
            # Reinserted on show with the fresh content
            row.hidden_cells[column.index] = display
        elif column.visible:
            self.bridge.update_cell(row.visual_handle, column, display)

    # ------------------------------------------------------------------
    # Filter / sort / paginate
    # ------------------------------------------------------------------
    def filter(
        self,
        term: str,
        column: Optional[int] = None,
        *,
        regex: bool = False,
        smart: bool = True,
        redraw: bool = True,
    ) -> List[InvalidSearchPattern]:
        """
        Set the global (or one column's) search and re-derive the view.

        Returns the invalid patterns found; an invalid scope matches nothing.
        """
        criteria = SearchCriteria(term=str(term), regex=regex, smart=smart)
        incremental = False
        if column is None:
            incremental = (
                self._filtered_search is not None
                and self._filtered_search == self.search
                and narrows(self.search, criteria)
            )
            self.search = criteria
        else:
            self.column(column)
            self.column_searches[column] = criteria

        errors = self.filter_engine.check(criteria, column=column)
        self.paginator.page_start = 0
        if redraw:
            self.draw(complete=True, incremental=incremental)
        else:
            self._filtered_search = None
        return errors

    def sort(self, keys: Sequence[Union[SortKey, Tuple[int, str]]], redraw: bool = True) -> None:
        """
        Replace the user sort keys.

        Raises:
            IndexOutOfRange: a key names an unknown or unsortable column
        """
        resolved = [SortKey.coerce(k) for k in keys]
        for key in resolved:
            if not self.column(key.column).sortable:
                raise IndexOutOfRange("column", key.column)
        self.sort_keys = resolved
        # The display order carries the old keys, so the next filter must start from master_order
        self._filtered_search = None
        if redraw:
            self.draw(complete=True)

    def paginate(self, action: Union[Navigation, str, int], redraw: bool = True) -> bool:
        changed = self.paginator.page_change(action, len(self.display_order))
        if redraw:
            self.draw(complete=False)
        return changed

    def set_page_length(self, page_length: int, redraw: bool = True) -> None:
        self.paginator.set_length(page_length, len(self.display_order))
        if redraw:
            self.draw(complete=False)

    # ------------------------------------------------------------------
    # Column visibility and sizing
    # ------------------------------------------------------------------
    def set_column_visible(self, column: int, visible: bool, redraw: bool = True) -> None:
        """
        Show or hide a column. Indices are untouched; rendered rows hand
        their cell to (or get it back from) `hidden_cells` so content
        survives a hide/show cycle exactly.
        """
        definition = self.column(column)
        if definition.visible == visible:
            return

        for row in self.store:
            if row.visual_handle is None:
                continue
            if visible:
                cell = row.hidden_cells.pop(definition.index, None)
                if cell is None:
                    # Rendered while the column was hidden: nothing was detached
                    cell = get_display_data(row, definition)
                self.bridge.reinsert_cell(row.visual_handle, definition, cell)
            else:
                cell = self.bridge.detach_cell(row.visual_handle, definition)
                if cell is not None:
                    row.hidden_cells[definition.index] = cell

        definition.visible = visible

        span = self.visible_span
        for open_row in self.open_rows.values():
            open_row.span = span

        if redraw:
            self.adjust_column_sizing(redraw=True)

    def adjust_column_sizing(self, redraw: bool = True) -> None:
        self.bridge.recalculate_sizing(self.columns)
        if redraw:
            self.draw(complete=False)

    # ------------------------------------------------------------------
    # Open / close detail rows
    # ------------------------------------------------------------------
    def open_row(self, target: int, content: Any, css_class: str = "") -> OpenRow:
        """Attach a detail row beneath `target`, replacing any already open."""
        row = self.store.get(target)
        self.close_row(target)
        open_row = OpenRow(parent=target, content=content, css_class=css_class, span=self.visible_span)
        if row.visual_handle is not None and target in self.window():
            open_row.handle = self.bridge.render_sub_row(row.visual_handle, open_row)
        self.open_rows[target] = open_row
        return open_row

    def close_row(self, target: int) -> bool:
        """Close the detail row of `target`. False if none was open."""
        return self._drop_open_row(target)

    def _drop_open_row(self, target: int) -> bool:
        open_row = self.open_rows.pop(target, None)
        if open_row is None:
            return False
        self.bridge.remove_sub_row(open_row)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_data(self, target: Optional[int] = None, column: Optional[int] = None) -> Any:
        """
        All payloads (master order) when `target` is None, else one row's
        payload, else a single cell's raw value.
        """
        if target is None:
            return [self.store.get(i).payload for i in self.master_order]
        row = self.store.get(target)
        if column is None:
            return row.payload
        return get_cell_data(row, self.column(column))

    def get_row_identity(self, handle: Any) -> Optional[int]:
        return self.store.find_by_handle(handle)

    def get_nodes(self, target: Optional[int] = None) -> Any:
        if target is not None:
            return self.store.get(target).visual_handle
        handles = []
        for i in self.master_order:
            handle = self.store.get(i).visual_handle
            if handle is not None:
                handles.append(handle)
        return handles

    def get_position(self, handle: Any, column: Optional[int] = None) -> Optional[Union[int, Tuple[int, int, int]]]:
        """
        Identity of the row behind `handle`, or for a cell
        `(identity, visible column index, column index)`.
        """
        identity = self.get_row_identity(handle)
        if identity is None or column is None:
            return identity
        definition = self.column(column)
        if not definition.visible:
            return None
        visible_index = sum(1 for c in self.columns[:definition.index] if c.visible)
        return identity, visible_index, definition.index

    # ------------------------------------------------------------------
    # State snapshot
    # ------------------------------------------------------------------
    def snapshot(self) -> ViewState:
        return ViewState(
            sort_keys=[k.as_tuple() for k in self.sort_keys],
            search=SearchCriteria(self.search.term, self.search.regex, self.search.smart),
            column_searches=[SearchCriteria(s.term, s.regex, s.smart) for s in self.column_searches],
            page_start=self.paginator.page_start,
            page_length=self.paginator.page_length,
            column_visibility=[c.visible for c in self.columns],
        )

    def restore(self, state: ViewState, redraw: bool = True) -> None:
        """
        Apply a snapshot. Entries for columns that no longer exist are ignored.
        """
        self.sort_keys = [SortKey.coerce(k) for k in state.sort_keys if 0 <= k[0] < len(self.columns)]
        self.search = SearchCriteria(state.search.term, state.search.regex, state.search.smart)
        for i, criteria in enumerate(state.column_searches[:len(self.columns)]):
            self.column_searches[i] = SearchCriteria(criteria.term, criteria.regex, criteria.smart)
        for i, visible in enumerate(state.column_visibility[:len(self.columns)]):
            self.set_column_visible(i, visible, redraw=False)
        self.paginator.set_length(state.page_length, len(self.display_order))
        self.paginator.page_start = max(0, state.page_start)
        self._filtered_search = None
        if redraw:
            self.draw(complete=True)
        else:
            self.paginator.clamp(len(self.display_order))
