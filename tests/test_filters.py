from decimal import Decimal

import pytest

from catalog_browser.filters import (
    CategoryLevel,
    FilterSelection,
    category_filter_labels,
    parse_bound,
)


def test_toggle_adds_and_removes():
    selection = FilterSelection().toggled(CategoryLevel.TOP, "Laptops")
    assert selection.categories == ("Laptops",)
    selection = selection.toggled(CategoryLevel.TOP, "Phones")
    assert selection.categories == ("Laptops", "Phones")
    selection = selection.toggled(CategoryLevel.TOP, "Laptops")
    assert selection.categories == ("Phones",)


def test_without_absent_label_is_noop():
    selection = FilterSelection(stores=("TechStore",))
    assert selection.without(CategoryLevel.STORE, "MegaShop") == selection


def test_selection_is_not_pruned_by_toggle():
    selection = FilterSelection(categories=("Laptops",), sub_categories=("Gaming",))
    selection = selection.toggled(CategoryLevel.TOP, "Laptops")
    assert selection.sub_categories == ("Gaming",)


@pytest.mark.parametrize(
    "selection, expected",
    [
        (FilterSelection(), (None, ())),
        (FilterSelection(categories=("A",)), (CategoryLevel.TOP, ("A",))),
        (
            FilterSelection(categories=("A",), sub_categories=("B",)),
            (CategoryLevel.SUB, ("B",)),
        ),
        (
            FilterSelection(categories=("A",), sub_categories=("B",), end_categories=("C",)),
            (CategoryLevel.END, ("C",)),
        ),
        (FilterSelection(end_categories=("C",)), (CategoryLevel.END, ("C",))),
    ],
)
def test_category_precedence(selection, expected):
    assert category_filter_labels(selection) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("", None),
        ("-", None),
        ("100", Decimal("100")),
        ("12,5", Decimal("12.5")),
        ("1,000", Decimal("1000")),
        ("12,345.50", Decimal("12345.50")),
    ],
)
def test_parse_bound(raw, expected):
    assert parse_bound(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "NaN", "inf", "1,2,3", "1,000,5"])
def test_parse_bound_rejects(raw):
    with pytest.raises(ValueError):
        parse_bound(raw)
