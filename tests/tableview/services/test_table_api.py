from __future__ import annotations

import pandas as pd
import pytest

from tableview.core.exceptions import IndexOutOfRange
from tableview.render.text_bridge import TextRenderBridge
from tableview.services.table_api import DataTable


def _make_table() -> tuple[DataTable, TextRenderBridge]:
    df = pd.DataFrame(
        {
            "name": ["apple", "banana", "cherry"],
            "price": [1.5, None, 3.0],
        }
    )
    bridge = TextRenderBridge()
    return DataTable.from_dataframe(df, bridge=bridge), bridge


def test_from_dataframe_builds_columns_and_rows():
    table, bridge = _make_table()

    assert [c.title for c in table.columns] == ["name", "price"]
    assert table.master_order == [0, 1, 2]
    assert table.get_data(0, 1) == 1.5
    # Missing values come through as None
    assert table.get_data(1) == {"name": "banana", "price": None}
    assert len(bridge.rows) == 3


def test_to_dataframe_in_display_order():
    table, _ = _make_table()
    table.sort([(1, "desc")])

    df = table.to_dataframe(displayed_only=True)

    assert df.index.name == "row_id"
    assert list(df.index) == [2, 0, 1]
    assert df["name"].tolist() == ["cherry", "apple", "banana"]

    everything = table.to_dataframe()
    assert list(everything.index) == [0, 1, 2]


def test_update_with_mapping_and_cell():
    table, _ = _make_table()

    table.update({"price": 2.0}, 1)
    assert table.get_data(1) == {"name": "banana", "price": 2.0}

    table.update("blueberry", 1, column=0)
    assert table.get_data(1, 0) == "blueberry"


def test_scalar_update_needs_a_column():
    table, _ = _make_table()

    with pytest.raises(ValueError):
        table.update("pear", 0)


def test_scalar_rows_on_single_column_table():
    table = DataTable(["fruit"])
    identity = table.add("apple")

    table.update("pear", identity)

    assert table.get_data(identity) == "pear"
    assert table.get_data(identity, 0) == "pear"


def test_delete_by_handle():
    table, bridge = _make_table()
    handle = table.get_nodes(0)

    removed = table.delete(handle)

    assert removed == {"name": "apple", "price": 1.5}
    assert table.master_order == [1, 2]
    assert table.get_row_identity(handle) is None
    with pytest.raises(IndexOutOfRange):
        table.delete(handle)


def test_filter_and_page_info():
    table, _ = _make_table()

    table.filter("an")

    assert table.display_order == [1]
    info = table.page_info()
    assert (info.start, info.end, info.total) == (0, 1, 1)


def test_open_row_by_handle():
    table, bridge = _make_table()
    handle = table.get_nodes(2)

    table.open_row(handle, "stone fruit")
    assert "  > stone fruit" in bridge.lines()

    assert table.close_row(2) is True


def test_load_state_from_dict():
    table, _ = _make_table()
    table.add_rows([{"name": f"extra {i}", "price": i} for i in range(5)])

    table.load_state({"search_term": "extra", "page_length": 2, "page_start": 2, "sort_keys": [[1, "desc"]]})

    assert table.display_order == [7, 6, 5, 4, 3]
    assert table.window() == [5, 4]
    assert table.state().search_term == "extra"
