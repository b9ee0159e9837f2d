"""
Core domain layer: row store, column definitions, update variants,
view state snapshot and the render bridge contract
"""

from .columns import ColumnDefinition, SearchCriteria, SortType
from .exceptions import ConfigError, IndexOutOfRange, InvalidSearchPattern, TableViewError
from .render_bridge import NullRenderBridge, OpenRow, RenderBridge
from .row_store import Row, RowStore
from .updates import CellUpdate, RowMappingUpdate, RowUpdate, UpdateMode
from .view_state import ViewState

__all__ = [
    "ColumnDefinition",
    "SearchCriteria",
    "SortType",
    "TableViewError",
    "ConfigError",
    "IndexOutOfRange",
    "InvalidSearchPattern",
    "RenderBridge",
    "NullRenderBridge",
    "OpenRow",
    "Row",
    "RowStore",
    "CellUpdate",
    "RowUpdate",
    "RowMappingUpdate",
    "UpdateMode",
    "ViewState",
]
