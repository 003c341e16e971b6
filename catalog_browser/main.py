import asyncio
import datetime
import os
from logging import Logger

from dotenv import load_dotenv

from .catalog_api import CatalogApi
from .config import ExportDirectories, Messages, PaginationSettings, SparqlConfig
from .controller import CatalogController
from .endpoint_probe import EndpointProbe
from .export import ListingExporter, collect_listing
from .logging_config import LogConfig, LoggerSetup, LogLevel
from .sparql_client import SparqlClient

load_dotenv()


def setup_logger() -> Logger:
    logger_setup = LoggerSetup(
        logger_name=__name__,
        log_config=LogConfig(
            level=LogLevel.from_name(os.getenv("log_level"), LogLevel.INFO),
            filename=None,
        ),
    )
    return logger_setup.logger


logger: Logger = setup_logger()


async def main() -> None:
    if not EndpointProbe(SparqlConfig.ENDPOINT_URL).ping():
        logger.error("SPARQL endpoint %s is not available.", SparqlConfig.ENDPOINT_URL)
        return

    start: datetime.datetime = datetime.datetime.now()

    async with SparqlClient(SparqlConfig.ENDPOINT_URL, SparqlConfig.TIMEOUT) as client:
        api = CatalogApi(client)
        controller = CatalogController(api, PaginationSettings.PAGE_SIZE)
        await controller.initial_load()
        state = controller.state

        if state.error:
            logger.error(state.error)
        logger.info(
            "%d categories, %d stores, %d products",
            len(state.categories),
            len(state.stores),
            state.total_count,
        )
        print(ListingExporter.render_table(state.rows) or Messages.NO_RESULTS)

        if os.getenv("export_all"):
            rows = await collect_listing(
                api, state.selection, PaginationSettings.PAGE_SIZE
            )
            exporter = ListingExporter(ExportDirectories.EXPORT_DIR)
            exporter.save_csv(rows, f"catalog_{start:%Y%m%d_%H%M%S}")

    logger.info("Elapsed: %s", str(datetime.datetime.now() - start))


if __name__ == "__main__":
    asyncio.run(main())
