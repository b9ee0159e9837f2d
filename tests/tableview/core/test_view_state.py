from __future__ import annotations

from tableview.core.columns import SearchCriteria
from tableview.core.view_state import ViewState


def test_view_state_to_from_dict_roundtrip():
    st = ViewState(
        sort_keys=[(1, "desc"), (0, "asc")],
        search=SearchCriteria(term="apple", regex=False, smart=True),
        column_searches=[SearchCriteria(), SearchCriteria(term="^b", regex=True, smart=False)],
        page_start=20,
        page_length=10,
        column_visibility=[True, False],
    )

    raw = st.to_dict()
    rebuilt = ViewState.from_dict(raw)

    assert rebuilt == st
    assert raw["search_term"] == "apple"


def test_view_state_from_minimal_dict():
    st = ViewState.from_dict({"search_term": "x", "page_length": -1})

    assert st.search_term == "x"
    assert st.page_length == -1
    assert st.sort_keys == []
    assert st.page_start == 0
