"""
Config package for tableview.

Responsible for:
- config models (TableConfig, ColumnConfig)
- config I/O helpers (load_table_config / save_table_config)
"""

from .model import ColumnConfig, TableConfig
from .io import load_table_config, save_table_config
