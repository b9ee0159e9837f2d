from __future__ import annotations

import pytest

from tableview.core.columns import ColumnDefinition, SortType, make_columns, resolve_column
from tableview.core.exceptions import ConfigError, IndexOutOfRange
from tableview.core.updates import CellUpdate, RowMappingUpdate, RowUpdate, as_update


def test_make_columns_reindexes_mixed_specs():
    columns = make_columns(["name", {"data": "age", "sort_type": "numeric"}, ColumnDefinition(index=99, data="city")])

    assert [c.index for c in columns] == [0, 1, 2]
    assert [c.key for c in columns] == ["name", "age", "city"]
    assert columns[1].sort_type is SortType.NUMERIC
    assert columns[0].title == "name"


def test_cell_data_for_each_payload_shape():
    by_position = ColumnDefinition(index=1)
    by_key = ColumnDefinition(index=0, data="v", default_content="-")

    assert by_position.cell_data(["a", "b"]) == "b"
    assert by_position.cell_data(["a"]) == ""
    assert by_key.cell_data({"v": 3}) == 3
    assert by_key.cell_data({}) == "-"
    assert by_key.cell_data(7) == 7


def test_set_cell_data_returns_a_new_payload():
    column = ColumnDefinition(index=1)
    original = ["a", "b"]

    updated = column.set_cell_data(original, "z")

    assert updated == ["a", "z"]
    assert original == ["a", "b"]
    assert ColumnDefinition(index=0, data="v").set_cell_data({"v": 1, "w": 2}, 5) == {"v": 5, "w": 2}
    assert ColumnDefinition(index=0).set_cell_data("old", "new") == "new"


def test_custom_sort_requires_comparator():
    with pytest.raises(ConfigError):
        ColumnDefinition(index=0, sort_type=SortType.CUSTOM)


def test_resolve_column_out_of_range():
    columns = make_columns(["a"])
    with pytest.raises(IndexOutOfRange):
        resolve_column(columns, 3)


def test_as_update_resolves_payload_shapes():
    assert as_update("x", 2) == CellUpdate(value="x", column=2)
    assert as_update({"a": 1}) == RowMappingUpdate(values={"a": 1})
    assert as_update(["a", "b"]) == RowUpdate(values=["a", "b"])
    assert as_update("x", column_count=1) == CellUpdate(value="x", column=0)
    # A list written into one cell stays a cell update
    assert as_update([1, 2], 0) == CellUpdate(value=[1, 2], column=0)

    with pytest.raises(ValueError):
        as_update("x", column_count=3)
