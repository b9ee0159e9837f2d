from __future__ import annotations

import pytest

from tableview.engine.pagination import PageAction, Paginator, absolute


def test_next_on_last_page_is_unchanged():
    pager = Paginator(page_length=10, page_start=20)

    changed = pager.page_change(PageAction.NEXT, total=25)

    assert changed is False
    assert pager.page_start == 20


@pytest.mark.parametrize("start", [0, 10, 20])
def test_last_goes_to_final_boundary(start):
    pager = Paginator(page_length=10, page_start=start)
    pager.page_change(PageAction.LAST, total=25)
    assert pager.page_start == 20


def test_last_with_exact_multiple():
    pager = Paginator(page_length=10)
    pager.page_change("last", total=30)
    assert pager.page_start == 20


def test_first_previous_next():
    pager = Paginator(page_length=10, page_start=20)

    pager.page_change("previous", total=25)
    assert pager.page_start == 10
    pager.page_change(PageAction.PREVIOUS, total=25)
    pager.page_change(PageAction.PREVIOUS, total=25)
    assert pager.page_start == 0
    pager.page_change(PageAction.NEXT, total=25)
    assert pager.page_start == 10
    pager.page_change(PageAction.FIRST, total=25)
    assert pager.page_start == 0


def test_absolute_is_clamped():
    pager = Paginator(page_length=10)

    pager.page_change(absolute(1), total=25)
    assert pager.page_start == 10
    pager.page_change(absolute(7), total=25)
    assert pager.page_start == 20
    pager.page_change(-3, total=25)
    assert pager.page_start == 0


def test_visible_end():
    pager = Paginator(page_length=10, page_start=20)
    assert pager.visible_end(25) == 25
    pager.page_start = 0
    assert pager.visible_end(25) == 10


def test_clamp_after_shrink():
    pager = Paginator(page_length=10, page_start=20)

    pager.clamp(15)
    assert pager.page_start == 10

    pager.clamp(0)
    assert pager.page_start == 0


def test_show_all():
    pager = Paginator(page_length=-1)

    pager.page_change(PageAction.NEXT, total=25)
    assert pager.page_start == 0
    assert pager.visible_end(25) == 25
    assert pager.page_info(25).pages == 1


def test_page_info():
    pager = Paginator(page_length=10, page_start=10)
    info = pager.page_info(25)

    assert (info.start, info.end, info.page, info.pages, info.total) == (10, 20, 1, 3, 25)


def test_set_length_keeps_first_row_on_page():
    pager = Paginator(page_length=10, page_start=20)

    pager.set_length(25, total=60)
    assert pager.page_start == 0

    pager.page_start = 50
    pager.set_length(20, total=60)
    assert pager.page_start == 40


def test_invalid_length():
    with pytest.raises(ValueError):
        Paginator(page_length=0)
    with pytest.raises(ValueError):
        Paginator().page_change("sideways", total=10)
