from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .columns import SearchCriteria


@dataclass
class ViewState:
    """
    Plain snapshot of the user-facing view criteria, for persistence
    collaborators.

    Fields:

    - sort_keys: list of (column index, "asc" | "desc")
    - search: global search criteria
    - column_searches: per-column search criteria, one per column
    - page_start: first row offset of the current page
    - page_length: rows per page, -1 for "show all"
    - column_visibility: visible flag per column
    """

    sort_keys: List[Tuple[int, str]] = field(default_factory=list)
    search: SearchCriteria = field(default_factory=SearchCriteria)
    column_searches: List[SearchCriteria] = field(default_factory=list)
    page_start: int = 0
    page_length: int = 10
    column_visibility: List[bool] = field(default_factory=list)

    @property
    def search_term(self) -> str:
        return self.search.term

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sort_keys": [[col, direction] for col, direction in self.sort_keys],
            "search_term": self.search.term,
            "search": self.search.to_dict(),
            "column_searches": [s.to_dict() for s in self.column_searches],
            "page_start": self.page_start,
            "page_length": self.page_length,
            "column_visibility": list(self.column_visibility),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ViewState:
        search_raw = data.get("search")
        if search_raw is None:
            search = SearchCriteria(term=str(data.get("search_term", "") or ""))
        else:
            search = SearchCriteria.from_dict(search_raw)
        return cls(
            sort_keys=[(int(col), str(direction)) for col, direction in data.get("sort_keys", [])],
            search=search,
            column_searches=[SearchCriteria.from_dict(s) for s in data.get("column_searches", [])],
            page_start=int(data.get("page_start", 0)),
            page_length=int(data.get("page_length", 10)),
            column_visibility=[bool(v) for v in data.get("column_visibility", [])],
        )
