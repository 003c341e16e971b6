import asyncio
from logging import Logger

from aiogram import Bot, Dispatcher
from dotenv import find_dotenv, load_dotenv

from catalog_browser.catalog_api import CatalogApi
from catalog_browser.config import BotConfig, PaginationSettings, SparqlConfig
from catalog_browser.logging_config import LogConfig, LoggerSetup
from catalog_browser.sparql_client import SparqlClient
from telegram_bot.handlers.user_private import user_private_router
from telegram_bot.sessions import SessionRegistry

load_dotenv(find_dotenv())

logger: Logger = LoggerSetup(
    logger_name=__name__, log_config=LogConfig(filename="bot.log")
).logger

ALLOWED_UPDATES = ["message", "callback_query"]


async def main() -> None:
    if not BotConfig.TOKEN:
        logger.error("Bot token is not set; put token=... into .env")
        return

    bot = Bot(token=BotConfig.TOKEN)
    dp = Dispatcher()
    dp.include_router(user_private_router)

    async with SparqlClient(SparqlConfig.ENDPOINT_URL, SparqlConfig.TIMEOUT) as client:
        dp["sessions"] = SessionRegistry(CatalogApi(client), PaginationSettings.PAGE_SIZE)
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot, allowed_updates=ALLOWED_UPDATES)


if __name__ == "__main__":
    asyncio.run(main())
