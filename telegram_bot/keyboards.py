from decimal import Decimal
from html import escape
from typing import Optional

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from catalog_browser.config import Messages
from catalog_browser.controller import BrowserState, chips
from catalog_browser.filters import CategoryLevel

LEVEL_CODES: dict[CategoryLevel, str] = {
    CategoryLevel.TOP: "c",
    CategoryLevel.SUB: "s",
    CategoryLevel.END: "e",
    CategoryLevel.STORE: "t",
}
CODE_LEVELS: dict[str, CategoryLevel] = {code: level for level, code in LEVEL_CODES.items()}

TOGGLE = "t"
REMOVE = "r"

LEVEL_TITLES: dict[CategoryLevel, str] = {
    CategoryLevel.TOP: "Categories",
    CategoryLevel.SUB: "Subcategories",
    CategoryLevel.END: "End categories",
    CategoryLevel.STORE: "Stores",
}


def level_data(prefix: str, level: CategoryLevel, index: int) -> str:
    # Labels can exceed the 64-byte callback limit, so only the index travels.
    return f"{prefix}:{LEVEL_CODES[level]}:{index}"


def parse_level_data(data: str, prefix: str) -> Optional[tuple[CategoryLevel, int]]:
    parts = data.split(":")
    if len(parts) != 3 or parts[0] != prefix or parts[1] not in CODE_LEVELS:
        return None
    if not parts[2].isdigit():
        return None
    return CODE_LEVELS[parts[1]], int(parts[2])


def options_keyboard(
    state: BrowserState, level: CategoryLevel, columns: int = 2
) -> InlineKeyboardMarkup:
    selected = set(state.selection.selected(level))
    buttons = [
        InlineKeyboardButton(
            text=f"✅ {label}" if label in selected else label,
            callback_data=level_data(TOGGLE, level, index),
        )
        for index, label in enumerate(state.options(level))
    ]
    rows = [buttons[i : i + columns] for i in range(0, len(buttons), columns)]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def pager_keyboard(state: BrowserState) -> InlineKeyboardMarkup:
    page = state.page
    row: list[InlineKeyboardButton] = []
    if page.has_prev:
        row.append(InlineKeyboardButton(text="« Prev", callback_data="p:prev"))
    row.append(
        InlineKeyboardButton(
            text=f"{page.current_page} / {page.total_pages}", callback_data="p:noop"
        )
    )
    if page.has_next:
        row.append(InlineKeyboardButton(text="Next »", callback_data="p:next"))
    return InlineKeyboardMarkup(inline_keyboard=[row])


def _bound(value: Optional[Decimal]) -> str:
    return "-" if value is None else str(value)


def format_filters(state: BrowserState) -> str:
    lines: list[str] = []
    for level, label in chips(state):
        lines.append(f"• {LEVEL_TITLES[level]}: {escape(label)}")
    selection = state.selection
    if selection.min_price is not None or selection.max_price is not None:
        lines.append(
            f"• Price: {_bound(selection.min_price)} … {_bound(selection.max_price)}"
        )
    if selection.min_discount is not None or selection.max_discount is not None:
        lines.append(
            f"• Discount: {_bound(selection.min_discount)} … {_bound(selection.max_discount)}%"
        )
    return "\n".join(lines) if lines else "No filters selected."


def format_page(state: BrowserState) -> str:
    if state.error:
        return f"⚠️ {escape(state.error)}"
    if not state.has_results:
        return Messages.NO_RESULTS
    start = state.page.offset
    lines = [f"<b>{state.total_count} products</b>\n"]
    for number, row in enumerate(state.rows, start=start + 1):
        title = escape(row.title or "Untitled")
        if row.url:
            title = f"<a href='{escape(row.url)}'>{title}</a>"
        price = escape(row.discounted_price or row.regular_price or "?")
        discount = f" (-{escape(row.discount_percent)}%)" if row.discount_percent else ""
        store = escape(row.store or "")
        lines.append(f"{number}. {title}\n    {price}{discount} · {store}")
    return "\n".join(lines)


def chips_keyboard(state: BrowserState) -> InlineKeyboardMarkup:
    rows = [
        [
            InlineKeyboardButton(
                text=f"✖ {label}",
                callback_data=level_data(
                    REMOVE, level, state.selection.selected(level).index(label)
                ),
            )
        ]
        for level, label in chips(state)
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows)
