from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .exceptions import IndexOutOfRange

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Row:
    """
    A live row record.

    - master_index: stable identity, assigned at insertion and never reused
    - payload: the row data (sequence, mapping or scalar)
    - render_cache: column index -> display string, filled lazily
    - search_text: normalised global-search text, filled lazily
    - visual_handle: opaque reference owned by the render bridge
    - hidden_cells: column index -> detached cell payload for hidden columns
    """

    master_index: int
    payload: Any
    render_cache: Dict[int, str] = field(default_factory=dict)
    search_text: Optional[str] = None
    visual_handle: Any = None
    hidden_cells: Dict[int, Any] = field(default_factory=dict)

    def invalidate(self) -> None:
        """Drop every derived cache for this row."""
        self.render_cache.clear()
        self.search_text = None


class RowStore:
    """
    Owner of the canonical row records, addressed by master index.

    Identities come from a monotonically increasing counter, so a removed
    row's index is never handed out again (not even after `clear`).
    """

    def __init__(self) -> None:
        self._rows: Dict[int, Row] = {}
        self._next_index = 0

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, master_index: object) -> bool:
        return master_index in self._rows

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows.values())

    def insert(self, payload: Any) -> int:
        master_index = self._next_index
        self._next_index += 1
        self._rows[master_index] = Row(master_index=master_index, payload=payload)
        return master_index

    def get(self, master_index: int) -> Row:
        try:
            return self._rows[master_index]
        except (KeyError, TypeError):
            raise IndexOutOfRange("row", master_index) from None

    def remove(self, master_index: int) -> Row:
        row = self.get(master_index)
        del self._rows[master_index]
        return row

    def replace(self, master_index: int, payload: Any) -> Row:
        row = self.get(master_index)
        row.payload = payload
        row.invalidate()
        return row

    def clear(self) -> List[Row]:
        removed = list(self._rows.values())
        self._rows.clear()
        logger.debug("Row store cleared", extra={"removed": len(removed)})
        return removed

    def live_indices(self) -> List[int]:
        return list(self._rows)

    def find_by_handle(self, handle: Any) -> Optional[int]:
        """Reverse lookup from a render-bridge handle to a row identity."""
        if handle is None:
            return None
        for row in self._rows.values():
            if row.visual_handle is handle:
                return row.master_index
        return None
