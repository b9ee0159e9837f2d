import os
import sys

import pandas as pd

from tableview.config.io import load_table_config
from tableview.logging_config import configure_logging
from tableview.render.text_bridge import TextRenderBridge
from tableview.services.table_api import DataTable

configure_logging()


def build_table(csv_path: str) -> tuple[DataTable, TextRenderBridge]:
    """Load a CSV into a text-rendered table, using TABLEVIEW_CONFIG if set."""
    config_path = os.getenv("TABLEVIEW_CONFIG")
    config = load_table_config(config_path) if config_path else None

    bridge = TextRenderBridge()
    table = DataTable.from_dataframe(pd.read_csv(csv_path), bridge=bridge, config=config)
    return table, bridge


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python app.py <file.csv> [page]")
        sys.exit(2)

    table, bridge = build_table(sys.argv[1])

    search = os.getenv("TABLEVIEW_SEARCH")
    if search:
        for err in table.filter(search, regex=os.getenv("TABLEVIEW_REGEX", "0") == "1"):
            print(f"Warning: {err}")

    sort_spec = os.getenv("TABLEVIEW_SORT")  # e.g. "1:desc,0:asc"
    if sort_spec:
        table.sort([tuple(part.split(":")) for part in sort_spec.split(",")])

    if len(sys.argv) > 2:
        table.paginate(int(sys.argv[2]))

    table.adjust_column_sizing()
    info = table.page_info()
    print(bridge.render())
    print(f"\nShowing {info.start + 1 if info.total else 0} to {info.end} of {info.total} rows "
          f"(page {info.page + 1}/{info.pages})")
