import os
from dataclasses import asdict
from logging import Logger, getLogger
from typing import Iterable, Optional

import pandas as pd

from .catalog_api import CatalogApi, ProductRow
from .filters import FilterSelection
from .page_params import total_pages_for

logger: Logger = getLogger(__name__)

COLUMNS: list[str] = [
    "title",
    "store",
    "full_category",
    "regular_price",
    "discounted_price",
    "discount_percent",
    "url",
    "product",
]


class ListingExporter:
    def __init__(self, export_dir: str) -> None:
        self.export_dir: str = os.path.abspath(export_dir)
        os.makedirs(self.export_dir, exist_ok=True)
        logger.info("Export directory %s created or already exists", self.export_dir)

    @staticmethod
    def rows_to_frame(rows: Iterable[ProductRow]) -> pd.DataFrame:
        """Listing rows as a frame with prices converted to numbers."""
        df = pd.DataFrame([asdict(row) for row in rows], columns=COLUMNS)
        for column in ("regular_price", "discounted_price", "discount_percent"):
            df[column] = pd.to_numeric(df[column], errors="coerce")
        return df

    @classmethod
    def render_table(cls, rows: Iterable[ProductRow], max_title: int = 40) -> str:
        df = cls.rows_to_frame(rows)
        if df.empty:
            return ""
        df["title"] = df["title"].fillna("").str.slice(0, max_title)
        return df[
            ["title", "store", "regular_price", "discounted_price", "discount_percent"]
        ].to_string(index=False)

    def save_csv(self, rows: Iterable[ProductRow], filename: str) -> str:
        df = self.rows_to_frame(rows)
        file_path: str = os.path.join(self.export_dir, f"{filename}.csv")
        df.to_csv(file_path, index=False)
        logger.info("Saved %d rows to %s", len(df), file_path)
        return file_path


async def collect_listing(
    api: CatalogApi,
    selection: FilterSelection,
    page_size: int,
    max_pages: Optional[int] = None,
) -> list[ProductRow]:
    """Walks every page of the listing, reading the total from the first one."""
    rows, total = await api.get_listing(selection, page_size, 0)
    if total is None:
        logger.info("Listing is empty, nothing to collect")
        return rows

    pages = total_pages_for(total, page_size)
    if max_pages is not None:
        pages = min(pages, max_pages)
    for page in range(2, pages + 1):
        page_rows, _ = await api.get_listing(selection, page_size, (page - 1) * page_size)
        logger.info("Page %d of %d: %d rows", page, pages, len(page_rows))
        if not page_rows:
            break
        rows.extend(page_rows)
    logger.info("Collected %d of %d products", len(rows), total)
    return rows
