"""
View-derivation engines: filtering, sorting and pagination
"""

from .filtering import FilterEngine, FilterResult, TextNormaliser
from .pagination import PageAction, PageInfo, Paginator, absolute
from .sorting import BlankPolicy, Direction, SortEngine, SortKey

__all__ = [
    "FilterEngine",
    "FilterResult",
    "TextNormaliser",
    "PageAction",
    "PageInfo",
    "Paginator",
    "absolute",
    "BlankPolicy",
    "Direction",
    "SortEngine",
    "SortKey",
]
