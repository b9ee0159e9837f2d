from __future__ import annotations

import json
import logging
from pathlib import Path

from tableview.config.model import TableConfig
from tableview.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_table_config(path: str | Path) -> TableConfig:
    """
    Load a table configuration from a JSON file.

    Expected structure:

        {
            "page_length": 25,
            "columns": ["name", {"data": "age", "sort_type": "numeric"}],
            "sort": [[1, "desc"]],
            "search": {"term": "", "smart": true}
        }

    :param path: path to the JSON file
    :return: a TableConfig instance
    :raises FileNotFoundError: if the file does not exist
    :raises ConfigError: if the file is not valid JSON or is structurally invalid
    """
    path = Path(path)
    logger.info("Loading table config", extra={"config_path": str(path)})

    if not path.is_file():
        raise FileNotFoundError(f"File not found at {path}")

    try:
        with path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as err:
        logger.error("Table config is not valid JSON", extra={"config_path": str(path)})
        raise ConfigError(f"Invalid JSON in {path}: {err}") from err

    return TableConfig.from_dict(raw)


def save_table_config(config: TableConfig, path: str | Path) -> Path:
    """Write `config` as pretty-printed JSON and return the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2))
    logger.info("Saved table config", extra={"config_path": str(path)})
    return path
