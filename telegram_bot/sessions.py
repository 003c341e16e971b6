from logging import Logger, getLogger

from catalog_browser.catalog_api import CatalogApi
from catalog_browser.controller import CatalogController

logger: Logger = getLogger(__name__)


class SessionRegistry:
    """One controller per chat, all sharing the same catalog API."""

    def __init__(self, api: CatalogApi, page_size: int) -> None:
        self.api: CatalogApi = api
        self.page_size: int = page_size
        self._controllers: dict[int, CatalogController] = {}

    def get(self, chat_id: int) -> CatalogController | None:
        return self._controllers.get(chat_id)

    async def start(self, chat_id: int) -> CatalogController:
        """Opens a fresh session for the chat and runs its initial load."""
        controller = CatalogController(self.api, self.page_size)
        self._controllers[chat_id] = controller
        logger.info("New browsing session for chat %d", chat_id)
        await controller.initial_load()
        return controller

    async def get_or_start(self, chat_id: int) -> CatalogController:
        controller = self.get(chat_id)
        if controller is None:
            controller = await self.start(chat_id)
        return controller

    def __len__(self) -> int:
        return len(self._controllers)
