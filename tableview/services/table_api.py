from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from tableview.config.model import TableConfig
from tableview.core.columns import ColumnDefinition, make_columns
from tableview.core.exceptions import IndexOutOfRange, InvalidSearchPattern
from tableview.core.render_bridge import OpenRow, RenderBridge
from tableview.core.updates import as_update
from tableview.core.view_state import ViewState
from tableview.engine.pagination import Navigation, PageInfo
from tableview.engine.sorting import SortKey
from tableview.services.view_coordinator import DeleteCallback, ViewCoordinator

logger = logging.getLogger(__name__)

RowTarget = Any


class DataTable:
    """
    Caller-facing table API.

    Resolves loosely-shaped arguments (row handles vs identities, sequence vs
    mapping vs scalar update payloads, string paging actions) once, then
    delegates to the ViewCoordinator which only sees tagged values.
    """

    def __init__(
        self,
        columns: Sequence[Union[ColumnDefinition, Mapping[str, Any], int, str]],
        bridge: Optional[RenderBridge] = None,
        config: Optional[TableConfig] = None,
    ) -> None:
        self.coordinator = ViewCoordinator(make_columns(columns), bridge=bridge, config=config)

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------
    @classmethod
    def from_config(
        cls,
        config: TableConfig,
        bridge: Optional[RenderBridge] = None,
        renderers: Optional[Mapping[str, Callable[..., str]]] = None,
        comparators: Optional[Mapping[str, Callable[[Any, Any], int]]] = None,
    ) -> DataTable:
        return cls(config.build_columns(renderers, comparators), bridge=bridge, config=config)

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        bridge: Optional[RenderBridge] = None,
        config: Optional[TableConfig] = None,
        redraw: bool = True,
    ) -> DataTable:
        """
        Build a table with one column per DataFrame column and one mapping
        row per DataFrame row. Missing values (NaN/NaT/None) become None.
        """
        if config is not None and config.columns:
            columns: List[Any] = config.build_columns()
        else:
            columns = [{"data": str(name), "title": str(name)} for name in df.columns]

        table = cls(columns, bridge=bridge, config=config)
        clean = df.astype(object).where(pd.notna(df), None)
        clean.columns = [str(c) for c in clean.columns]
        table.add_rows(clean.to_dict(orient="records"), redraw=redraw)
        logger.info("Loaded table from DataFrame", extra={"rows": len(df), "columns": len(df.columns)})
        return table

    def to_dataframe(self, displayed_only: bool = False) -> pd.DataFrame:
        """
        Export payloads as a DataFrame, in master order or (if
        `displayed_only`) in the current filtered and sorted order.
        """
        c = self.coordinator
        order = c.display_order if displayed_only else c.master_order
        titles = [col.title for col in c.columns]
        records = [
            [col.cell_data(c.store.get(i).payload) for col in c.columns]
            for i in order
        ]
        return pd.DataFrame(records, columns=titles, index=pd.Index(order, name="row_id"))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def columns(self) -> List[ColumnDefinition]:
        return self.coordinator.columns

    @property
    def master_order(self) -> List[int]:
        return list(self.coordinator.master_order)

    @property
    def display_order(self) -> List[int]:
        return list(self.coordinator.display_order)

    @property
    def page_start(self) -> int:
        return self.coordinator.paginator.page_start

    def window(self) -> List[int]:
        return self.coordinator.window()

    def page_info(self) -> PageInfo:
        return self.coordinator.page_info()

    # -------------------------------------------------------------------------
    # Target resolution
    # -------------------------------------------------------------------------
    def _identity(self, target: RowTarget) -> int:
        if isinstance(target, int) and not isinstance(target, bool):
            return target
        identity = self.coordinator.get_row_identity(target)
        if identity is None:
            raise IndexOutOfRange("row", target)
        return identity

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------
    def add(self, payload: Any, redraw: bool = True) -> int:
        return self.coordinator.add([payload], redraw=redraw)[0]

    def add_rows(self, payloads: Sequence[Any], redraw: bool = True) -> List[int]:
        return self.coordinator.add(list(payloads), redraw=redraw)

    def delete(self, target: RowTarget, callback: Optional[DeleteCallback] = None, redraw: bool = True) -> Any:
        return self.coordinator.delete(self._identity(target), callback=callback, redraw=redraw)

    def update(
        self,
        payload: Any,
        target: RowTarget,
        column: Optional[int] = None,
        redraw: bool = True,
        action: bool = True,
    ) -> int:
        change = as_update(payload, column, column_count=len(self.columns))
        return self.coordinator.update(change, self._identity(target), redraw=redraw, action=action)

    def clear(self, redraw: bool = True) -> None:
        self.coordinator.clear(redraw=redraw)

    # -------------------------------------------------------------------------
    # View criteria
    # -------------------------------------------------------------------------
    def filter(
        self,
        term: str,
        column: Optional[int] = None,
        regex: bool = False,
        smart: bool = True,
        redraw: bool = True,
    ) -> List[InvalidSearchPattern]:
        return self.coordinator.filter(term, column, regex=regex, smart=smart, redraw=redraw)

    def sort(self, keys: Sequence[Union[SortKey, Tuple[int, str]]], redraw: bool = True) -> None:
        self.coordinator.sort(keys, redraw=redraw)

    def paginate(self, action: Union[Navigation, str, int], redraw: bool = True) -> bool:
        return self.coordinator.paginate(action, redraw=redraw)

    def set_page_length(self, page_length: int, redraw: bool = True) -> None:
        self.coordinator.set_page_length(page_length, redraw=redraw)

    def set_column_visible(self, column: int, visible: bool, redraw: bool = True) -> None:
        self.coordinator.set_column_visible(column, visible, redraw=redraw)

    def adjust_column_sizing(self, redraw: bool = True) -> None:
        self.coordinator.adjust_column_sizing(redraw=redraw)

    def draw(self, complete: bool = True) -> bool:
        return self.coordinator.draw(complete=complete)

    # -------------------------------------------------------------------------
    # Detail rows
    # -------------------------------------------------------------------------
    def open_row(self, target: RowTarget, content: Any, css_class: str = "") -> OpenRow:
        return self.coordinator.open_row(self._identity(target), content, css_class)

    def close_row(self, target: RowTarget) -> bool:
        return self.coordinator.close_row(self._identity(target))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get_data(self, target: Optional[RowTarget] = None, column: Optional[int] = None) -> Any:
        identity = None if target is None else self._identity(target)
        return self.coordinator.get_data(identity, column)

    def get_row_identity(self, handle: Any) -> Optional[int]:
        return self.coordinator.get_row_identity(handle)

    def get_position(self, handle: Any, column: Optional[int] = None) -> Any:
        return self.coordinator.get_position(handle, column)

    def get_nodes(self, target: Optional[int] = None) -> Any:
        return self.coordinator.get_nodes(target)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------
    def state(self) -> ViewState:
        return self.coordinator.snapshot()

    def load_state(self, state: Union[ViewState, Mapping[str, Any]], redraw: bool = True) -> None:
        if not isinstance(state, ViewState):
            state = ViewState.from_dict(dict(state))
        self.coordinator.restore(state, redraw=redraw)
