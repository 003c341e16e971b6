import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional


# "1,000" or "12,345.50": commas separate thousands.
_GROUPED = re.compile(r"^-?\d{1,3}(,\d{3})+(\.\d+)?$")


class CategoryLevel(Enum):
    """Selection levels of the filter panel. STORE never cascades."""

    TOP = "category"
    SUB = "sub"
    END = "end"
    STORE = "store"


_SELECTION_FIELDS: dict[CategoryLevel, str] = {
    CategoryLevel.TOP: "categories",
    CategoryLevel.SUB: "sub_categories",
    CategoryLevel.END: "end_categories",
    CategoryLevel.STORE: "stores",
}


@dataclass(frozen=True)
class FilterSelection:
    """Filter values chosen in the panel.

    Label collections keep insertion order and never hold duplicates.
    """

    categories: tuple[str, ...] = ()
    sub_categories: tuple[str, ...] = ()
    end_categories: tuple[str, ...] = ()
    stores: tuple[str, ...] = ()
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_discount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None

    def selected(self, level: CategoryLevel) -> tuple[str, ...]:
        return getattr(self, _SELECTION_FIELDS[level])

    def with_selected(
        self, level: CategoryLevel, labels: tuple[str, ...]
    ) -> "FilterSelection":
        return replace(self, **{_SELECTION_FIELDS[level]: labels})

    def toggled(self, level: CategoryLevel, label: str) -> "FilterSelection":
        current = self.selected(level)
        if label in current:
            return self.with_selected(level, tuple(x for x in current if x != label))
        return self.with_selected(level, current + (label,))

    def without(self, level: CategoryLevel, label: str) -> "FilterSelection":
        return self.with_selected(
            level, tuple(x for x in self.selected(level) if x != label)
        )


def category_filter_labels(
    selection: FilterSelection,
) -> tuple[Optional[CategoryLevel], tuple[str, ...]]:
    """Returns the one category level the listing is filtered by.

    The most specific non-empty level wins: end categories, then
    subcategories, then top categories. ``(None, ())`` means no category
    restriction.
    """
    if selection.end_categories:
        return CategoryLevel.END, selection.end_categories
    if selection.sub_categories:
        return CategoryLevel.SUB, selection.sub_categories
    if selection.categories:
        return CategoryLevel.TOP, selection.categories
    return None, ()


def parse_bound(raw: Optional[str]) -> Optional[Decimal]:
    """Turns user input into an optional numeric bound; blank means unset."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw or raw == "-":
        return None
    if _GROUPED.match(raw):
        raw = raw.replace(",", "")
    elif raw.count(",") == 1 and "." not in raw:
        raw = raw.replace(",", ".")
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {raw!r}") from e
    if not value.is_finite():
        raise ValueError(f"Bound must be a finite number: {raw!r}")
    return value
