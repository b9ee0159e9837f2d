from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union


class UpdateMode(Enum):
    """
    Recursion mode for updates.

    ROOT updates may replace a whole row; NESTED updates are the per-column
    cell writes issued while a whole-row update is being applied.
    """

    ROOT = "root"
    NESTED = "nested"


@dataclass(frozen=True)
class CellUpdate:
    """Replace a single cell."""
    value: Any
    column: int


@dataclass(frozen=True)
class RowUpdate:
    """Replace a whole row from a sequence, one value per column."""
    values: Sequence[Any]


@dataclass(frozen=True)
class RowMappingUpdate:
    """
    Replace the columns named by a keyed object. Keys that are not a
    configured column key are ignored and absent columns keep their value.
    """
    values: Mapping[Any, Any]


Update = Union[CellUpdate, RowUpdate, RowMappingUpdate]


def as_update(payload: Any, column: Optional[int] = None, *, column_count: int = 0) -> Update:
    """
    Resolve a loosely-shaped update payload into a tagged update.

    - column given -> CellUpdate
    - mapping -> RowMappingUpdate
    - list / tuple -> RowUpdate
    - scalar on a single-column table -> CellUpdate on column 0

    Raises:
        ValueError: scalar payload without a column on a multi-column table
    """
    if column is not None:
        return CellUpdate(value=payload, column=column)
    if isinstance(payload, Mapping):
        return RowMappingUpdate(values=payload)
    if isinstance(payload, (list, tuple)):
        return RowUpdate(values=payload)
    if column_count == 1:
        return CellUpdate(value=payload, column=0)
    raise ValueError("A column index is required to update a single cell")
