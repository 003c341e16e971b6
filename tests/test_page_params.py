import pytest

from catalog_browser.page_params import PageState, parse_page, total_pages_for


@pytest.mark.parametrize(
    "total_count, page_size, expected",
    [(0, 30, 1), ("61", 30, 3), (60, 30, 2), (1, 30, 1), ("0", 10, 1)],
)
def test_total_pages_for(total_count, page_size, expected):
    assert total_pages_for(total_count, page_size) == expected


@pytest.mark.parametrize("page, expected", [(1, 0), (3, 60), (10, 270)])
def test_offset(page, expected):
    assert PageState(page_size=30, current_page=page, total_pages=10).offset == expected


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        PageState(page_size=0)


@pytest.mark.parametrize("target, expected", [(99, 5), (0, 1), (-3, 1), (4, 4)])
def test_at_page_clamps(target, expected):
    state = PageState(page_size=30, current_page=2, total_pages=5)
    assert state.at_page(target).current_page == expected


@pytest.mark.parametrize(
    "raw, expected", [("99", 99), (" 4 ", 4), ("abc", 1), ("", 1), (None, 1), (7, 7)]
)
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


def test_with_total_count_clamps_current_page():
    state = PageState(page_size=30, current_page=4, total_pages=4)
    updated = state.with_total_count(61)
    assert updated.total_pages == 3
    assert updated.current_page == 3


def test_empty_listing_is_one_page():
    state = PageState(page_size=30, current_page=2, total_pages=2).with_total_count(0)
    assert (state.current_page, state.total_pages) == (1, 1)
    assert not state.has_next
    assert not state.has_prev
