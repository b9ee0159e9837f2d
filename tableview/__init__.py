"""
Top-level package for the table view engine.

This package exposes the view-derivation pipeline (row store, filter, sort,
pagination) and the coordinator that keeps a render bridge in sync.
Most code should import from submodules such as:
    tableview.core
    tableview.engine
    tableview.services

The library only logs through `logging.getLogger("tableview.*")` and stays
silent until the embedding application calls
`tableview.logging_config.configure_logging` (or configures logging itself).
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__: list[str] = []
