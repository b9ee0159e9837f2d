from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .exceptions import ConfigError, IndexOutOfRange

ColumnKey = Union[int, str]


class SortType(str, Enum):
    """Comparator selector for a column."""

    AUTO = "auto"
    NUMERIC = "numeric"
    STRING = "string"
    DATE = "date"
    CUSTOM = "custom"


@dataclass
class SearchCriteria:
    """
    A search request, used both for the global search and per column.

    Fields:

    - term: raw search input. Blank (after trimming) means "match all".
    - regex: treat the term (or each smart token) as a regular expression
    - smart: split the term on whitespace and AND the tokens together.
             Double-quoted phrases stay a single token.
    """

    term: str = ""
    regex: bool = False
    smart: bool = True

    def is_empty(self) -> bool:
        return not self.term.strip()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchCriteria:
        return cls(
            term=str(data.get("term", "") or ""),
            regex=bool(data.get("regex", False)),
            smart=bool(data.get("smart", True)),
        )


@dataclass
class ColumnDefinition:
    """
    Definition of a single table column.

    Fields:

    - index: stable column identity (position in the column set, survives hide/show)
    - data: key into a row payload. An int for sequence rows, a str for mapping
            rows. Defaults to `index`. Ignored for scalar rows.
    - title: human-readable header
    - visible: whether the column is currently displayed
    - render: optional `(row_payload, column) -> str` display formatter
    - use_rendered: if True, the rendered string is the filter/sort source
                    instead of the raw payload value
    - searchable: include this column in the global search text
    - sortable: allow user sort keys on this column
    - search: default per-column search criteria
    - sort_type: comparator selector
    - comparator: `(a, b) -> int` total order, required for SortType.CUSTOM
    - default_content: value reported for a missing cell
    """

    index: int
    data: Optional[ColumnKey] = None
    title: str = ""
    visible: bool = True
    render: Optional[Callable[[Any, "ColumnDefinition"], str]] = None
    use_rendered: bool = False
    searchable: bool = True
    sortable: bool = True
    search: SearchCriteria = field(default_factory=SearchCriteria)
    sort_type: SortType = SortType.AUTO
    comparator: Optional[Callable[[Any, Any], int]] = None
    default_content: Any = ""

    def __post_init__(self) -> None:
        self.sort_type = SortType(self.sort_type)
        if self.sort_type is SortType.CUSTOM and self.comparator is None:
            raise ConfigError(f"Column {self.index} uses a custom sort but has no comparator")
        if not self.title:
            self.title = str(self.key)

    @property
    def key(self) -> ColumnKey:
        return self.index if self.data is None else self.data

    # ------------------------------------------------------------------
    # Payload access
    # ------------------------------------------------------------------
    def cell_data(self, payload: Any) -> Any:
        """Read this column's raw value out of a row payload."""
        if isinstance(payload, Mapping):
            return payload.get(self.key, self.default_content)
        if isinstance(payload, (list, tuple)):
            key = self.key
            if isinstance(key, int) and -len(payload) <= key < len(payload):
                return payload[key]
            return self.default_content
        # Scalar rows carry a single value for every column
        return payload

    def set_cell_data(self, payload: Any, value: Any) -> Any:
        """
        Write `value` into a copy of `payload` and return the new payload.

        Scalar rows are replaced wholesale.
        """
        if isinstance(payload, Mapping):
            updated = dict(payload)
            updated[self.key] = value
            return updated
        if isinstance(payload, (list, tuple)):
            key = self.key
            if not isinstance(key, int):
                raise ConfigError(f"Column {self.index} has key {key!r} but rows are sequences")
            updated = list(payload)
            if key >= len(updated):
                updated.extend([self.default_content] * (key + 1 - len(updated)))
            updated[key] = value
            return updated
        return value


def make_columns(specs: Sequence[Union[ColumnKey, Mapping[str, Any], ColumnDefinition]]) -> List[ColumnDefinition]:
    """
    Build a column set from a mix of keys, keyword mappings and definitions.

    The resulting definitions are re-indexed so that `columns[i].index == i`.
    """
    columns: List[ColumnDefinition] = []
    for i, spec in enumerate(specs):
        if isinstance(spec, ColumnDefinition):
            column = copy.copy(spec)
            column.index = i
        elif isinstance(spec, Mapping):
            kwargs = dict(spec)
            kwargs.pop("index", None)
            column = ColumnDefinition(index=i, **kwargs)
        else:
            column = ColumnDefinition(index=i, data=spec)
        columns.append(column)
    return columns


def resolve_column(columns: Sequence[ColumnDefinition], column: int) -> ColumnDefinition:
    if not isinstance(column, int) or not 0 <= column < len(columns):
        raise IndexOutOfRange("column", column)
    return columns[column]


def visible_column_count(columns: Sequence[ColumnDefinition]) -> int:
    return sum(1 for c in columns if c.visible)
