"""Filter panel and pagination state of one browsing session.

:class:`BrowserState` is an immutable snapshot; the module-level functions
are pure transitions over it. :class:`CatalogController` runs the
transitions and the catalog requests they trigger.
"""
import asyncio
from collections import defaultdict
from dataclasses import dataclass, field, replace
from decimal import Decimal
from logging import Logger, getLogger
from typing import Awaitable, Callable, Iterable, Optional

from .catalog_api import CatalogApi, ProductRow
from .config import Messages, PaginationSettings
from .filters import CategoryLevel, FilterSelection
from .page_params import PageState, parse_page
from .query_builder import format_number
from .sparql_client import SparqlQueryError

logger: Logger = getLogger(__name__)

LISTING = "listing"

_OPTION_FIELDS: dict[CategoryLevel, str] = {
    CategoryLevel.TOP: "categories",
    CategoryLevel.SUB: "sub_categories",
    CategoryLevel.END: "end_categories",
    CategoryLevel.STORE: "stores",
}

# Levels whose options and selections are wiped when the key level changes.
_DOWNSTREAM: dict[CategoryLevel, tuple[CategoryLevel, ...]] = {
    CategoryLevel.TOP: (CategoryLevel.SUB, CategoryLevel.END),
    CategoryLevel.SUB: (CategoryLevel.END,),
    CategoryLevel.END: (),
    CategoryLevel.STORE: (),
}


@dataclass(frozen=True)
class BrowserState:
    categories: tuple[str, ...] = ()
    sub_categories: tuple[str, ...] = ()
    end_categories: tuple[str, ...] = ()
    stores: tuple[str, ...] = ()
    selection: FilterSelection = field(default_factory=FilterSelection)
    page: PageState = field(default_factory=PageState)
    rows: tuple[ProductRow, ...] = ()
    total_count: int = 0
    is_loading: bool = False
    error: Optional[str] = None

    def options(self, level: CategoryLevel) -> tuple[str, ...]:
        return getattr(self, _OPTION_FIELDS[level])

    def with_options(
        self, level: CategoryLevel, options: Iterable[str]
    ) -> "BrowserState":
        return replace(self, **{_OPTION_FIELDS[level]: tuple(options)})

    @property
    def has_results(self) -> bool:
        return bool(self.rows)


def merge_options(results: Iterable[Iterable[str]]) -> tuple[str, ...]:
    """Unions lookup results, keeping first-seen order."""
    return tuple(dict.fromkeys(label for result in results for label in result))


def reset_downstream(state: BrowserState, level: CategoryLevel) -> BrowserState:
    selection = state.selection
    for dependent in _DOWNSTREAM[level]:
        state = state.with_options(dependent, ())
        selection = selection.with_selected(dependent, ())
    return replace(state, selection=selection)


def toggle(state: BrowserState, level: CategoryLevel, label: str) -> BrowserState:
    state = replace(state, selection=state.selection.toggled(level, label))
    return reset_downstream(state, level)


def remove_chip(state: BrowserState, level: CategoryLevel, label: str) -> BrowserState:
    state = replace(state, selection=state.selection.without(level, label))
    return reset_downstream(state, level)


def chips(state: BrowserState) -> list[tuple[CategoryLevel, str]]:
    return [
        (level, label)
        for level in CategoryLevel
        for label in state.selection.selected(level)
    ]


def _checked_range(
    low: Optional[Decimal], high: Optional[Decimal]
) -> tuple[Optional[Decimal], Optional[Decimal]]:
    for bound in (low, high):
        if bound is not None:
            format_number(bound)
    return low, high


def set_price_range(
    state: BrowserState, low: Optional[Decimal], high: Optional[Decimal]
) -> BrowserState:
    low, high = _checked_range(low, high)
    return replace(
        state, selection=replace(state.selection, min_price=low, max_price=high)
    )


def set_discount_range(
    state: BrowserState, low: Optional[Decimal], high: Optional[Decimal]
) -> BrowserState:
    low, high = _checked_range(low, high)
    return replace(
        state, selection=replace(state.selection, min_discount=low, max_discount=high)
    )


def clear_filters(state: BrowserState) -> BrowserState:
    """Drops every selection and bound; top categories and stores stay loaded."""
    state = reset_downstream(state, CategoryLevel.TOP)
    return replace(state, selection=FilterSelection())


def apply_filters(state: BrowserState) -> BrowserState:
    return replace(state, page=state.page.first())


def go_to(state: BrowserState, page: int) -> BrowserState:
    return replace(state, page=state.page.at_page(page))


def begin_loading(state: BrowserState) -> BrowserState:
    return replace(state, is_loading=True, error=None)


def listing_loaded(
    state: BrowserState, rows: Iterable[ProductRow], total_count: int
) -> BrowserState:
    return replace(
        state,
        rows=tuple(rows),
        total_count=total_count,
        page=state.page.with_total_count(total_count),
        is_loading=False,
    )


def listing_failed(state: BrowserState, message: str) -> BrowserState:
    # Rows of the previous page stay on screen.
    return replace(state, is_loading=False, error=message)


class CatalogController:
    """Drives a :class:`BrowserState` from user actions.

    Cascades and listing fetches are tagged with a generation number; a
    response that arrives after a newer request of the same kind was issued
    is dropped. No method raises on request failure.
    """

    def __init__(
        self, api: CatalogApi, page_size: int = PaginationSettings.PAGE_SIZE
    ) -> None:
        self.api: CatalogApi = api
        self.state: BrowserState = BrowserState(page=PageState(page_size=page_size))
        self._generations: defaultdict[str, int] = defaultdict(int)

    def _issue(self, key: str) -> int:
        self._generations[key] += 1
        return self._generations[key]

    def _is_current(self, key: str, generation: int) -> bool:
        return self._generations[key] == generation

    async def initial_load(self) -> None:
        await asyncio.gather(self.load_categories(), self.load_stores(), self.fetch_data())

    async def load_categories(self) -> None:
        try:
            categories = await self.api.get_categories()
        except SparqlQueryError as e:
            logger.error("Failed to fetch top-level categories: %s", e)
            self.state = replace(self.state, error=Messages.CATEGORIES_FAILED)
            return
        self.state = self.state.with_options(CategoryLevel.TOP, categories)
        logger.info("Loaded %d top-level categories", len(categories))

    async def load_stores(self) -> None:
        try:
            stores = await self.api.get_stores()
        except SparqlQueryError as e:
            logger.error("Failed to fetch stores: %s", e)
            self.state = replace(self.state, error=Messages.STORES_FAILED)
            return
        self.state = self.state.with_options(CategoryLevel.STORE, stores)
        logger.info("Loaded %d stores", len(stores))

    async def toggle(self, level: CategoryLevel, label: str) -> None:
        self.state = toggle(self.state, level, label)
        await self._cascade(level)

    async def remove_chip(self, level: CategoryLevel, label: str) -> None:
        self.state = remove_chip(self.state, level, label)
        await self._cascade(level)

    def set_price_range(self, low: Optional[Decimal], high: Optional[Decimal]) -> None:
        self.state = set_price_range(self.state, low, high)

    def set_discount_range(
        self, low: Optional[Decimal], high: Optional[Decimal]
    ) -> None:
        self.state = set_discount_range(self.state, low, high)

    def clear_filters(self) -> None:
        for level in (CategoryLevel.SUB, CategoryLevel.END):
            self._issue(level.value)
        self.state = clear_filters(self.state)

    async def _cascade(self, level: CategoryLevel) -> None:
        if level is CategoryLevel.TOP:
            # End options were just wiped; a pending end cascade is obsolete.
            self._issue(CategoryLevel.END.value)
            await self._derive(
                CategoryLevel.SUB,
                self.api.get_sub_categories,
                self.state.selection.categories,
            )
        elif level is CategoryLevel.SUB:
            await self._derive(
                CategoryLevel.END,
                self.api.get_end_categories,
                self.state.selection.sub_categories,
            )

    async def _derive(
        self,
        level: CategoryLevel,
        lookup: Callable[[str], Awaitable[list[str]]],
        parents: tuple[str, ...],
    ) -> None:
        generation = self._issue(level.value)
        if not parents:
            return
        results = await asyncio.gather(
            *(self._lookup_or_empty(lookup, parent) for parent in parents)
        )
        if not self._is_current(level.value, generation):
            logger.debug("Dropping stale %s options (generation %d)", level.value, generation)
            return
        self.state = self.state.with_options(level, merge_options(results))

    @staticmethod
    async def _lookup_or_empty(
        lookup: Callable[[str], Awaitable[list[str]]], parent: str
    ) -> list[str]:
        try:
            return await lookup(parent)
        except SparqlQueryError as e:
            logger.warning("Lookup of children of %r failed: %s", parent, e)
            return []

    async def apply_filters(self) -> None:
        self.state = apply_filters(self.state)
        await self.fetch_data()

    async def next_page(self) -> None:
        if not self.state.page.has_next:
            return
        self.state = go_to(self.state, self.state.page.current_page + 1)
        await self.fetch_data()

    async def prev_page(self) -> None:
        if not self.state.page.has_prev:
            return
        self.state = go_to(self.state, self.state.page.current_page - 1)
        await self.fetch_data()

    async def goto_page(self, raw: str | int) -> None:
        self.state = go_to(self.state, parse_page(raw))
        await self.fetch_data()

    async def fetch_data(self) -> None:
        generation = self._issue(LISTING)
        self.state = begin_loading(self.state)
        selection, page = self.state.selection, self.state.page

        rows, total = await asyncio.gather(
            self.api.get_products(selection, page.page_size, page.offset),
            self.api.get_total_count(selection),
            return_exceptions=True,
        )
        if not self._is_current(LISTING, generation):
            logger.debug("Dropping stale listing (generation %d)", generation)
            return

        for result in (rows, total):
            if isinstance(result, SparqlQueryError):
                logger.error("Failed to fetch listing: %s", result)
                self.state = listing_failed(self.state, Messages.DATA_FAILED)
                return
            if isinstance(result, BaseException):
                raise result

        self.state = listing_loaded(self.state, rows, total)
        logger.info(
            "Page %d of %d: %d rows, %d products in total",
            self.state.page.current_page,
            self.state.page.total_pages,
            len(self.state.rows),
            total,
        )
