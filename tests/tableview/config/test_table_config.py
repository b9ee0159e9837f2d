import json
from pathlib import Path

import pytest

from tableview.config.io import load_table_config, save_table_config
from tableview.config.model import TableConfig
from tableview.core.columns import SortType
from tableview.core.exceptions import ConfigError
from tableview.engine.sorting import BlankPolicy, Direction, SortKey
from tableview.services.table_api import DataTable


def _write_config(tmp_path: Path, raw) -> Path:
    path = tmp_path / "table.json"
    path.write_text(json.dumps(raw))
    return path


def test_load_table_config(tmp_path):
    # Arrange
    raw = {
        "page_length": 25,
        "columns": [
            "name",
            {"data": "price", "title": "Price", "sort_type": "numeric", "render": "money"},
        ],
        "sort": [[1, "desc"]],
        "search": {"term": "apple"},
        "blank_policy": "last",
    }
    path = _write_config(tmp_path, raw)

    # Act
    config = load_table_config(path)

    # Assert
    assert config.page_length == 25
    assert [c.data for c in config.columns] == ["name", "price"]
    assert config.columns[1].sort_type is SortType.NUMERIC
    assert config.columns[1].render == "money"
    assert config.sort == [SortKey(1, Direction.DESC)]
    assert config.search.term == "apple"
    assert config.blank_policy is BlankPolicy.LAST


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_table_config(tmp_path / "nope.json")


def test_invalid_json_raises_config_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(ConfigError):
        load_table_config(path)


@pytest.mark.parametrize(
    "raw",
    [
        {"columns": [{"data": "x", "sort_type": "alphabetical"}]},
        {"columns": [3.5]},
        {"page_length": 0},
        {"page_length": "many"},
        {"blank_policy": "middle"},
        {"normaliser": "shouting"},
        {"sort": [[0, "sideways"]]},
    ],
)
def test_structural_errors_raise_config_error(raw):
    with pytest.raises(ConfigError):
        TableConfig.from_dict(raw)


def test_renderers_are_resolved_by_name():
    config = TableConfig.from_dict(
        {"columns": ["name", {"data": "price", "render": "money"}]}
    )
    money = lambda payload, column: f"${payload['price']:.2f}"

    table = DataTable.from_config(config, renderers={"money": money})
    table.add({"name": "apple", "price": 1.5})

    assert table.columns[1].render is money
    assert table.get_data(0, 1) == 1.5


def test_unregistered_renderer_raises():
    config = TableConfig.from_dict({"columns": [{"data": "price", "render": "money"}]})

    with pytest.raises(ConfigError):
        config.build_columns()


def test_save_and_reload(tmp_path):
    config = TableConfig.from_dict(
        {
            "columns": ["name", {"data": "born", "sort_type": "date", "visible": False}],
            "page_length": -1,
            "sort_fixed_pre": [[0, "asc"]],
            "normaliser": "exact",
        }
    )

    path = save_table_config(config, tmp_path / "out" / "table.json")
    reloaded = load_table_config(path)

    assert reloaded == config
    assert reloaded.columns[1].visible is False
