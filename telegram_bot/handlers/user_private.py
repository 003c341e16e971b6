from logging import Logger, getLogger

from aiogram import F, types, Router
from aiogram.filters import Command, CommandObject, or_f

from catalog_browser.controller import CatalogController
from catalog_browser.filters import CategoryLevel, parse_bound
from telegram_bot.keyboards import (
    LEVEL_TITLES,
    REMOVE,
    TOGGLE,
    chips_keyboard,
    format_filters,
    format_page,
    options_keyboard,
    pager_keyboard,
    parse_level_data,
)
from telegram_bot.sessions import SessionRegistry

logger: Logger = getLogger(__name__)

user_private_router = Router()

HELP_TEXT = (
    "/categories, /subcategories, /endcategories, /stores: pick filters\n"
    "/price MIN MAX, /discount MIN MAX: ranges, '-' leaves a side open\n"
    "/apply: show the first page for the current filters\n"
    "/next, /prev, /page N: move through the listing\n"
    "/filters: selected filters, /reset: clear them"
)

_LEVEL_COMMANDS: dict[str, CategoryLevel] = {
    "categories": CategoryLevel.TOP,
    "subcategories": CategoryLevel.SUB,
    "endcategories": CategoryLevel.END,
    "stores": CategoryLevel.STORE,
}


async def send_page(message: types.Message, controller: CatalogController) -> None:
    await message.answer(
        format_page(controller.state),
        parse_mode="HTML",
        disable_web_page_preview=True,
        reply_markup=pager_keyboard(controller.state),
    )


@user_private_router.message(or_f(Command("start"), (F.text.lower() == "menu")))
async def start_cmd(message: types.Message, sessions: SessionRegistry):
    controller = await sessions.start(message.chat.id)
    await message.answer("Tech catalog browser.\n\n" + HELP_TEXT)
    await send_page(message, controller)


@user_private_router.message(Command("help"))
async def help_cmd(message: types.Message):
    await message.answer(HELP_TEXT)


@user_private_router.message(Command(*_LEVEL_COMMANDS))
async def options_cmd(
    message: types.Message, command: CommandObject, sessions: SessionRegistry
):
    controller = await sessions.get_or_start(message.chat.id)
    level = _LEVEL_COMMANDS[command.command]
    if not controller.state.options(level):
        await message.answer(f"No {LEVEL_TITLES[level].lower()} to choose from yet.")
        return
    await message.answer(
        LEVEL_TITLES[level] + ":",
        reply_markup=options_keyboard(controller.state, level),
    )


@user_private_router.callback_query(F.data.startswith(TOGGLE + ":"))
async def toggle_option(callback: types.CallbackQuery, sessions: SessionRegistry):
    parsed = parse_level_data(callback.data, TOGGLE)
    controller = await sessions.get_or_start(callback.message.chat.id)
    options = controller.state.options(parsed[0]) if parsed else ()
    if parsed is None or parsed[1] >= len(options):
        await callback.answer("This list is outdated, open it again.")
        return

    level, index = parsed
    logger.debug("Chat %d toggled %s %r", callback.message.chat.id, level.value, options[index])
    await controller.toggle(level, options[index])
    await callback.message.edit_reply_markup(
        reply_markup=options_keyboard(controller.state, level)
    )
    if level is CategoryLevel.TOP:
        count = len(controller.state.sub_categories)
        await callback.answer(f"{count} subcategories available")
    elif level is CategoryLevel.SUB:
        count = len(controller.state.end_categories)
        await callback.answer(f"{count} end categories available")
    else:
        await callback.answer()


@user_private_router.message(Command("filters"))
async def filters_cmd(message: types.Message, sessions: SessionRegistry):
    controller = await sessions.get_or_start(message.chat.id)
    await message.answer(
        format_filters(controller.state),
        parse_mode="HTML",
        reply_markup=chips_keyboard(controller.state),
    )


@user_private_router.callback_query(F.data.startswith(REMOVE + ":"))
async def remove_chip(callback: types.CallbackQuery, sessions: SessionRegistry):
    parsed = parse_level_data(callback.data, REMOVE)
    controller = await sessions.get_or_start(callback.message.chat.id)
    selected = controller.state.selection.selected(parsed[0]) if parsed else ()
    if parsed is None or parsed[1] >= len(selected):
        await callback.answer("This filter is already gone.")
        return

    await controller.remove_chip(parsed[0], selected[parsed[1]])
    await callback.message.edit_text(
        format_filters(controller.state),
        parse_mode="HTML",
        reply_markup=chips_keyboard(controller.state),
    )
    await callback.answer()


async def _set_range(
    message: types.Message, command: CommandObject, sessions: SessionRegistry
) -> None:
    args = (command.args or "").split()
    if len(args) != 2:
        await message.answer(f"Usage: /{command.command} MIN MAX")
        return
    try:
        low, high = parse_bound(args[0]), parse_bound(args[1])
    except ValueError as e:
        await message.answer(f"Could not read the range: {e}")
        return

    controller = await sessions.get_or_start(message.chat.id)
    if command.command == "price":
        controller.set_price_range(low, high)
    else:
        controller.set_discount_range(low, high)
    await message.answer("Saved. Send /apply to refresh the listing.")


@user_private_router.message(Command("price", "discount"))
async def range_cmd(
    message: types.Message, command: CommandObject, sessions: SessionRegistry
):
    await _set_range(message, command, sessions)


@user_private_router.message(Command("reset"))
async def reset_cmd(message: types.Message, sessions: SessionRegistry):
    controller = await sessions.get_or_start(message.chat.id)
    controller.clear_filters()
    await message.answer("Filters cleared. Send /apply to refresh the listing.")


@user_private_router.message(Command("apply"))
async def apply_cmd(message: types.Message, sessions: SessionRegistry):
    controller = await sessions.get_or_start(message.chat.id)
    await controller.apply_filters()
    await send_page(message, controller)


@user_private_router.message(Command("next", "prev"))
async def turn_cmd(
    message: types.Message, command: CommandObject, sessions: SessionRegistry
):
    controller = await sessions.get_or_start(message.chat.id)
    if command.command == "next":
        await controller.next_page()
    else:
        await controller.prev_page()
    await send_page(message, controller)


@user_private_router.message(Command("page"))
async def page_cmd(
    message: types.Message, command: CommandObject, sessions: SessionRegistry
):
    controller = await sessions.get_or_start(message.chat.id)
    await controller.goto_page(command.args or "")
    await send_page(message, controller)


@user_private_router.callback_query(F.data.in_({"p:next", "p:prev"}))
async def turn_callback(callback: types.CallbackQuery, sessions: SessionRegistry):
    controller = await sessions.get_or_start(callback.message.chat.id)
    before = controller.state.page.current_page
    if callback.data == "p:next":
        await controller.next_page()
    else:
        await controller.prev_page()

    if controller.state.page.current_page != before:
        await callback.message.edit_text(
            format_page(controller.state),
            parse_mode="HTML",
            disable_web_page_preview=True,
            reply_markup=pager_keyboard(controller.state),
        )
    await callback.answer()


@user_private_router.callback_query(F.data == "p:noop")
async def noop_callback(callback: types.CallbackQuery):
    await callback.answer()
