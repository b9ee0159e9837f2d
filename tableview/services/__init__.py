"""
Services: the view coordinator and the caller-facing table API
"""

from .table_api import DataTable
from .view_coordinator import DrawPhase, ViewCoordinator

__all__ = ["DataTable", "DrawPhase", "ViewCoordinator"]
