from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

# Names understood by the TABLEVIEW_LOG_LEVEL env var and the `level` argument
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv("TABLEVIEW_LOG_LEVEL", "info")
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'. Expected one of {sorted(_LEVELS)}") from None


def configure_logging(
        level: Union[int, str, None] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure logging for applications embedding tableview.

    The package installs a NullHandler on the "tableview" logger, so nothing
    is emitted until this is called. Handlers go on the root logger; the
    level is applied to the "tableview" logger only, so embedding
    applications keep control of their own loggers.

    Modes:
    - JSON (default), one object per record with the `extra` fields
      (rows, displayed, page_start, pattern, config_path, ...) as keys
    - plain text (dev mode)

    Selection order:
        format: force_format ("json" or "plain"), then TABLEVIEW_LOG_FORMAT, then "json"
        level: level argument, then TABLEVIEW_LOG_LEVEL, then "info"
    """
    resolved_level = _resolve_level(level)

    if force_format is not None:
        format_mode = force_format.lower()
    else:
        format_mode = os.getenv("TABLEVIEW_LOG_FORMAT", "json").lower()

    handler = logging.StreamHandler()

    if format_mode == "plain":
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
    else:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("tableview").setLevel(resolved_level)
