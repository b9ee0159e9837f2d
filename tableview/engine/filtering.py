from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tableview.core.cells import get_source_data, to_text
from tableview.core.columns import ColumnDefinition, SearchCriteria
from tableview.core.exceptions import ConfigError, InvalidSearchPattern
from tableview.core.row_store import Row, RowStore

logger = logging.getLogger(__name__)

Matcher = Callable[[str], bool]

# Separator between columns in the global search text
COLUMN_SEPARATOR = "  "

_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')


# -------------------------------------------------------------------------
# Normalisation policies
# -------------------------------------------------------------------------

def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@dataclass(frozen=True)
class TextNormaliser:
    """
    Pluggable text normalisation applied to both search text and search terms.

    - fold_case: compare case-insensitively (str.casefold)
    - fold_accents: compare with diacritics removed (NFKD + drop combining marks)
    """

    fold_case: bool = True
    fold_accents: bool = True

    def __call__(self, text: str) -> str:
        if self.fold_accents:
            text = strip_accents(text)
        if self.fold_case:
            text = text.casefold()
        return text

    def pattern(self, pattern: str) -> str:
        # Regex syntax is case-sensitive (\d vs \D), so only accents are folded
        return strip_accents(pattern) if self.fold_accents else pattern

    @property
    def regex_flags(self) -> int:
        return re.IGNORECASE if self.fold_case else 0


DEFAULT_NORMALISER = TextNormaliser()

NORMALISERS: Dict[str, TextNormaliser] = {
    "default": DEFAULT_NORMALISER,
    "case": TextNormaliser(fold_case=True, fold_accents=False),
    "exact": TextNormaliser(fold_case=False, fold_accents=False),
}


def get_normaliser(name: str) -> TextNormaliser:
    try:
        return NORMALISERS[name]
    except KeyError:
        raise ConfigError(f"Unknown normaliser '{name}'. Expected one of {sorted(NORMALISERS)}") from None


# -------------------------------------------------------------------------
# Matchers
# -------------------------------------------------------------------------

def tokenize(term: str) -> List[str]:
    """
    Split a smart-search term on whitespace. "Quoted phrases" stay whole.
    """
    tokens = []
    for phrase, word in _TOKEN_RE.findall(term):
        token = phrase if phrase else word
        if token:
            tokens.append(token)
    return tokens


def compile_matcher(
    criteria: SearchCriteria,
    normaliser: TextNormaliser = DEFAULT_NORMALISER,
    column: Optional[int] = None,
) -> Optional[Matcher]:
    """
    Build a predicate over normalised text for the given criteria.

    Returns None when the term is blank ("match all").

    Raises:
        InvalidSearchPattern: regex mode with a pattern that fails to compile
    """
    term = criteria.term.strip()
    if not term:
        return None

    pieces = tokenize(term) if criteria.smart else [term]
    if not pieces:
        return None

    if criteria.regex:
        compiled = []
        for piece in pieces:
            try:
                compiled.append(re.compile(normaliser.pattern(piece), normaliser.regex_flags))
            except re.error as err:
                raise InvalidSearchPattern(piece, str(err), column=column) from err
        return lambda text: all(p.search(text) for p in compiled)

    needles = [normaliser(piece) for piece in pieces]
    return lambda text: all(needle in text for needle in needles)


def _match_none(text: str) -> bool:
    return False


@dataclass
class FilterResult:
    """
    Output of one filter pass.

    - display_order: surviving identities, in input order
    - search_cache: search text of each survivor, aligned with display_order
    - errors: invalid patterns encountered (their scope matched nothing)
    """

    display_order: List[int]
    search_cache: List[str]
    errors: List[InvalidSearchPattern] = field(default_factory=list)


class FilterEngine:
    """
    Derives the filtered identity sequence from a candidate sequence.

    Global search runs over each row's cached search text (the searchable
    columns joined together); per-column searches run over that column's
    normalised source value. Every scope is ANDed.
    """

    def __init__(self, normaliser: TextNormaliser = DEFAULT_NORMALISER) -> None:
        self.normaliser = normaliser

    # ------------------------------------------------------------------
    # Search text
    # ------------------------------------------------------------------
    def column_text(self, row: Row, column: ColumnDefinition) -> str:
        return self.normaliser(to_text(get_source_data(row, column)))

    def search_text(self, row: Row, columns: Sequence[ColumnDefinition]) -> str:
        """Return (and cache) the row's normalised global search text."""
        if row.search_text is None:
            row.search_text = COLUMN_SEPARATOR.join(
                self.column_text(row, column) for column in columns if column.searchable
            )
        return row.search_text

    def build_search_cache(
        self,
        store: RowStore,
        order: Sequence[int],
        columns: Sequence[ColumnDefinition],
    ) -> List[str]:
        return [self.search_text(store.get(i), columns) for i in order]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def check(self, criteria: SearchCriteria, column: Optional[int] = None) -> List[InvalidSearchPattern]:
        try:
            compile_matcher(criteria, self.normaliser, column=column)
        except InvalidSearchPattern as err:
            return [err]
        return []

    def _safe_matcher(
        self,
        criteria: SearchCriteria,
        errors: List[InvalidSearchPattern],
        column: Optional[int] = None,
    ) -> Optional[Matcher]:
        try:
            return compile_matcher(criteria, self.normaliser, column=column)
        except InvalidSearchPattern as err:
            logger.warning("%s", err, extra={"pattern": err.pattern, "column": column})
            errors.append(err)
            return _match_none

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------
    def filter(
        self,
        store: RowStore,
        candidates: Sequence[int],
        columns: Sequence[ColumnDefinition],
        search: SearchCriteria,
        column_searches: Optional[Sequence[SearchCriteria]] = None,
    ) -> FilterResult:
        """
        Full filter pass over `candidates` (normally the master order).

        :param column_searches: per-column criteria, defaults to each column's `search`
        """
        errors: List[InvalidSearchPattern] = []
        global_match = self._safe_matcher(search, errors)

        if column_searches is None:
            column_searches = [c.search for c in columns]

        column_matchers: List[Tuple[ColumnDefinition, Matcher]] = []
        for column, criteria in zip(columns, column_searches):
            matcher = self._safe_matcher(criteria, errors, column=column.index)
            if matcher is not None:
                column_matchers.append((column, matcher))

        display_order: List[int] = []
        search_cache: List[str] = []
        for master_index in candidates:
            row = store.get(master_index)
            text = self.search_text(row, columns)
            if global_match is not None and not global_match(text):
                continue
            if any(not match(self.column_text(row, column)) for column, match in column_matchers):
                continue
            display_order.append(master_index)
            search_cache.append(text)

        logger.debug(
            "Filter pass complete",
            extra={"candidates": len(candidates), "matched": len(display_order), "errors": len(errors)},
        )
        return FilterResult(display_order=display_order, search_cache=search_cache, errors=errors)

    def refilter(
        self,
        display_order: Sequence[int],
        search_cache: Sequence[str],
        search: SearchCriteria,
    ) -> FilterResult:
        """
        Incremental global pass over the current display order, using the
        aligned search cache only. Valid when the new criteria can only
        narrow the previous result.
        """
        errors: List[InvalidSearchPattern] = []
        global_match = self._safe_matcher(search, errors)
        if global_match is None:
            return FilterResult(list(display_order), list(search_cache), errors)

        kept = [(i, text) for i, text in zip(display_order, search_cache) if global_match(text)]
        return FilterResult(
            display_order=[i for i, _ in kept],
            search_cache=[text for _, text in kept],
            errors=errors,
        )


def narrows(previous: SearchCriteria, current: SearchCriteria) -> bool:
    """
    True when every row matching `current` also matches `previous`, so the
    current result can be derived from the previous one.
    """
    if previous.regex or current.regex or previous.smart != current.smart:
        return False
    if '"' in previous.term or '"' in current.term:
        return False
    old = previous.term.strip()
    new = current.term.strip()
    if not old:
        return True
    return new.startswith(old)
