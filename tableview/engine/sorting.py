"""Multi-key, stable sorting of the filtered display order.

Each sort key resolves to a comparator through its column's sort type. Keys
are compared left to right; rows that compare equal under every key keep the
relative position they had in the input sequence.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, List, Sequence, Tuple, Union

import pandas as pd

from tableview.core.cells import get_source_data, to_text
from tableview.core.columns import ColumnDefinition, SortType, resolve_column
from tableview.core.row_store import RowStore
from tableview.engine.filtering import DEFAULT_NORMALISER, TextNormaliser

logger = logging.getLogger(__name__)

_DIGIT_RE = re.compile(r"\d")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class BlankPolicy(str, Enum):
    """
    Placement of blank values for numeric and date columns.

    - LOWEST: blanks compare below every value (first asc, last desc)
    - FIRST: blanks always first
    - LAST: blanks always last
    """

    LOWEST = "lowest"
    FIRST = "first"
    LAST = "last"


@dataclass(frozen=True)
class SortKey:
    column: int
    direction: Direction = Direction.ASC

    @classmethod
    def coerce(cls, value: Union["SortKey", Tuple[int, str], Sequence[Any]]) -> SortKey:
        """Accept a SortKey or a `(column, "asc"|"desc")` pair."""
        if isinstance(value, SortKey):
            return value
        column, direction = value
        if isinstance(direction, str):
            direction = direction.lower()
        return cls(column=int(column), direction=Direction(direction))

    def as_tuple(self) -> Tuple[int, str]:
        return self.column, self.direction.value


# (is_blank, comparable value)
Prepared = Tuple[bool, Any]
Comparator = Callable[[Any, Any], int]


def _compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _clean_numeric(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        return value.strip().replace(",", "")
    return value


def _to_numeric(values: Sequence[Any]) -> pd.Series:
    series = pd.Series(list(values), dtype=object).map(_clean_numeric)
    return pd.to_numeric(series, errors="coerce")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_timestamp(value: Any) -> Any:
    if _blank(value):
        return pd.NaT
    try:
        return pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return pd.NaT


def _looks_like_dates(values: Sequence[Any]) -> bool:
    """
    True when every value is a date object or a string with a digit that
    pandas parses as a date. Bare month or day names stay strings.
    """
    for value in values:
        if isinstance(value, date):
            continue
        if not isinstance(value, str) or not _DIGIT_RE.search(value):
            return False
    try:
        parsed = pd.to_datetime(pd.Series(list(values), dtype=object), errors="coerce", format="mixed")
    except (TypeError, ValueError, OverflowError):
        return False
    return bool(parsed.notna().all())


def _timestamp_ns(value: Any) -> Any:
    ts = _to_timestamp(value)
    if pd.isna(ts):
        return None
    return ts.value


class SortEngine:
    """
    Stable multi-key sort over an identity sequence and its aligned search cache.
    """

    def __init__(
        self,
        normaliser: TextNormaliser = DEFAULT_NORMALISER,
        blank_policy: BlankPolicy = BlankPolicy.LOWEST,
    ) -> None:
        self.normaliser = normaliser
        self.blank_policy = BlankPolicy(blank_policy)

    # ------------------------------------------------------------------
    # Type detection and value preparation
    # ------------------------------------------------------------------
    def detect_type(self, values: Sequence[Any]) -> SortType:
        """Pick numeric, then date, falling back to string, from the non-blank values."""
        present = [v for v in values if not _blank(v)]
        if not present:
            return SortType.STRING
        if _to_numeric(present).notna().all():
            return SortType.NUMERIC
        if _looks_like_dates(present):
            return SortType.DATE
        return SortType.STRING

    def prepare(self, sort_type: SortType, values: Sequence[Any]) -> List[Prepared]:
        if sort_type is SortType.NUMERIC:
            numeric = _to_numeric(values)
            return [(bool(pd.isna(v)), None if pd.isna(v) else float(v)) for v in numeric]
        if sort_type is SortType.DATE:
            stamps = [_timestamp_ns(v) for v in values]
            return [(ns is None, ns) for ns in stamps]
        if sort_type is SortType.CUSTOM:
            return [(False, v) for v in values]
        return [(False, self.normaliser(to_text(v))) for v in values]

    def _key_comparator(self, column: ColumnDefinition, sort_type: SortType, direction: Direction) -> Comparator:
        descending = direction is Direction.DESC
        policy = self.blank_policy
        base: Comparator = column.comparator if sort_type is SortType.CUSTOM else _compare

        def compare(a: Prepared, b: Prepared) -> int:
            a_blank, a_value = a
            b_blank, b_value = b
            if a_blank or b_blank:
                if a_blank and b_blank:
                    return 0
                # -1 when a is the blank one
                blank_first = -1 if a_blank else 1
                if policy is BlankPolicy.FIRST:
                    return blank_first
                if policy is BlankPolicy.LAST:
                    return -blank_first
                return -blank_first if descending else blank_first
            result = base(a_value, b_value)
            return -result if descending else result

        return compare

    # ------------------------------------------------------------------
    # Sort pass
    # ------------------------------------------------------------------
    def sort(
        self,
        store: RowStore,
        display_order: Sequence[int],
        search_cache: Sequence[str],
        columns: Sequence[ColumnDefinition],
        keys: Sequence[SortKey],
        pre: Sequence[SortKey] = (),
        post: Sequence[SortKey] = (),
    ) -> Tuple[List[int], List[str]]:
        """
        Sort `display_order` and `search_cache` in lockstep.

        Raises:
            IndexOutOfRange: a key names a column that does not exist
        """
        active = [*pre, *keys, *post]
        if not active or len(display_order) < 2:
            return list(display_order), list(search_cache)

        rows = [store.get(i) for i in display_order]
        resolved = []
        for key in active:
            column = resolve_column(columns, key.column)
            values = [get_source_data(row, column) for row in rows]
            sort_type = column.sort_type
            if sort_type is SortType.AUTO:
                sort_type = self.detect_type(values)
            resolved.append(
                (self._key_comparator(column, sort_type, key.direction), self.prepare(sort_type, values))
            )

        def compare_positions(a: int, b: int) -> int:
            for comparator, prepared in resolved:
                result = comparator(prepared[a], prepared[b])
                if result:
                    return result
            return a - b

        positions = sorted(range(len(display_order)), key=cmp_to_key(compare_positions))
        logger.debug("Sort pass complete", extra={"rows": len(positions), "keys": len(active)})
        return [display_order[p] for p in positions], [search_cache[p] for p in positions]
