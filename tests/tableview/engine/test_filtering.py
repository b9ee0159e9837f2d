from __future__ import annotations

from tableview.core.columns import SearchCriteria, make_columns
from tableview.core.row_store import RowStore
from tableview.engine.filtering import (
    FilterEngine,
    TextNormaliser,
    compile_matcher,
    narrows,
    tokenize,
)


def _make_rows(payloads, columns=("name", "kind")):
    store = RowStore()
    ids = [store.insert(p) for p in payloads]
    return store, ids, make_columns(list(columns))


FRUIT = [
    {"name": "apple pie", "kind": "dessert"},
    {"name": "banana split", "kind": "dessert"},
    {"name": "apple tart", "kind": "pastry"},
    {"name": "Café crème", "kind": "drink"},
]


def test_empty_term_matches_all():
    store, ids, columns = _make_rows(FRUIT)
    result = FilterEngine().filter(store, ids, columns, SearchCriteria(term="   "))

    assert result.display_order == ids
    assert result.errors == []


def test_smart_tokens_are_anded_in_any_order():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine()

    assert engine.filter(store, ids, columns, SearchCriteria("tart apple")).display_order == [2]
    assert engine.filter(store, ids, columns, SearchCriteria("apple dessert")).display_order == [0]


def test_non_smart_term_is_a_single_literal():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine()

    assert engine.filter(store, ids, columns, SearchCriteria("tart apple", smart=False)).display_order == []
    assert engine.filter(store, ids, columns, SearchCriteria("e t", smart=False)).display_order == [2]


def test_quoted_phrase_stays_one_token():
    assert tokenize('"apple pie" dessert') == ["apple pie", "dessert"]

    store, ids, columns = _make_rows(FRUIT)
    result = FilterEngine().filter(store, ids, columns, SearchCriteria('"apple tart"'))
    assert result.display_order == [2]


def test_default_normaliser_folds_case_and_accents():
    store, ids, columns = _make_rows(FRUIT)
    result = FilterEngine().filter(store, ids, columns, SearchCriteria("CAFE creme"))

    assert result.display_order == [3]


def test_exact_normaliser_keeps_case_and_accents():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine(TextNormaliser(fold_case=False, fold_accents=False))

    assert engine.filter(store, ids, columns, SearchCriteria("cafe")).display_order == []
    assert engine.filter(store, ids, columns, SearchCriteria("Café")).display_order == [3]


def test_regex_mode():
    store, ids, columns = _make_rows(FRUIT)
    result = FilterEngine().filter(store, ids, columns, SearchCriteria(r"^ban\w+", regex=True, smart=False))

    assert result.display_order == [1]


def test_invalid_regex_matches_none_and_is_reported():
    store, ids, columns = _make_rows(FRUIT)
    result = FilterEngine().filter(store, ids, columns, SearchCriteria("(apple", regex=True))

    assert result.display_order == []
    assert result.search_cache == []
    assert len(result.errors) == 1
    assert result.errors[0].pattern == "(apple"
    assert result.errors[0].column is None


def test_column_filters_are_anded_with_global():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine()

    result = engine.filter(
        store,
        ids,
        columns,
        SearchCriteria("apple"),
        [SearchCriteria(), SearchCriteria("dessert")],
    )
    assert result.display_order == [0]


def test_search_cache_is_aligned_with_survivors():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine()
    result = engine.filter(store, ids, columns, SearchCriteria("apple"))

    assert result.display_order == [0, 2]
    assert result.search_cache == [engine.search_text(store.get(i), columns) for i in result.display_order]
    assert result.search_cache[0] == "apple pie  dessert"


def test_unsearchable_column_is_left_out_of_global_text():
    store, ids, _ = _make_rows(FRUIT)
    columns = make_columns(["name", {"data": "kind", "searchable": False}])

    result = FilterEngine().filter(store, ids, columns, SearchCriteria("dessert"))
    assert result.display_order == []


def test_rendered_text_only_used_when_use_rendered():
    store, ids, _ = _make_rows(FRUIT)
    shout = lambda payload, column: f"#{payload['kind'].upper()}"
    engine = FilterEngine()

    raw_columns = make_columns(["name", {"data": "kind", "render": shout}])
    assert engine.filter(store, ids, raw_columns, SearchCriteria("#drink")).display_order == []

    for row in store:
        row.invalidate()
    rendered_columns = make_columns(["name", {"data": "kind", "render": shout, "use_rendered": True}])
    assert engine.filter(store, ids, rendered_columns, SearchCriteria("#drink")).display_order == [3]


def test_filter_is_idempotent():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine()
    criteria = SearchCriteria("apple")

    first = engine.filter(store, ids, columns, criteria)
    second = engine.filter(store, ids, columns, criteria)
    assert first.display_order == second.display_order


def test_refilter_narrows_from_search_cache():
    store, ids, columns = _make_rows(FRUIT)
    engine = FilterEngine()
    first = engine.filter(store, ids, columns, SearchCriteria("ap"))

    narrowed = engine.refilter(first.display_order, first.search_cache, SearchCriteria("apple ta"))
    assert narrowed.display_order == [2]
    assert narrowed.search_cache == [first.search_cache[first.display_order.index(2)]]


def test_narrows():
    assert narrows(SearchCriteria("ap"), SearchCriteria("app"))
    assert narrows(SearchCriteria(""), SearchCriteria("x"))
    assert not narrows(SearchCriteria("app"), SearchCriteria("ap"))
    assert not narrows(SearchCriteria("ap", regex=True), SearchCriteria("app", regex=True))
    assert not narrows(SearchCriteria("ap"), SearchCriteria("app", smart=False))


def test_compile_matcher_blank_is_none():
    assert compile_matcher(SearchCriteria("")) is None
    assert compile_matcher(SearchCriteria('""')) is None
