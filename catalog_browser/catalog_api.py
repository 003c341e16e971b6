from dataclasses import dataclass, fields
from logging import Logger, getLogger
from typing import Optional

from . import query_builder
from .filters import FilterSelection
from .sparql_client import Binding, SparqlClient, SparqlQueryError, check_bindings

logger: Logger = getLogger(__name__)


@dataclass(frozen=True)
class ProductRow:
    """One grouped product of the listing."""

    product: Optional[str] = None
    title: Optional[str] = None
    store: Optional[str] = None
    full_category: Optional[str] = None
    regular_price: Optional[str] = None
    discounted_price: Optional[str] = None
    discount_percent: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_binding(cls, binding: Binding) -> "ProductRow":
        return cls(
            **{
                field.name: binding_value(binding, _VARIABLES[field.name])
                for field in fields(cls)
            }
        )


_VARIABLES: dict[str, str] = {
    "product": "product",
    "title": "title",
    "store": "store",
    "full_category": "fullCategory",
    "regular_price": "regularPrice",
    "discounted_price": "discountedPrice",
    "discount_percent": "discountPercent",
    "url": "url",
}


def binding_value(binding: Binding, var: str) -> Optional[str]:
    cell = binding.get(var)
    if not cell:
        return None
    return cell.get("value")


def labels(bindings: list[Binding], var: str) -> list[str]:
    """Values of ``var`` in result order; rows without it are skipped."""
    return [
        value for value in (binding_value(b, var) for b in bindings) if value is not None
    ]


def parse_count(bindings: list[Binding]) -> int:
    if not bindings:
        raise SparqlQueryError("Count query returned no rows")
    raw = binding_value(bindings[0], "totalCount")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise SparqlQueryError(f"totalCount is not an integer: {raw!r}") from e


class CatalogApi:
    """Catalog operations of the filter panel and the listing."""

    def __init__(self, client: SparqlClient, ontology_ns: Optional[str] = None) -> None:
        self.client: SparqlClient = client
        self.ontology_ns: Optional[str] = ontology_ns

    async def _select(self, query: str) -> list[Binding]:
        return check_bindings(await self.client.select(query))

    async def get_categories(self) -> list[str]:
        bindings = await self._select(
            query_builder.build_categories_query(self.ontology_ns)
        )
        return labels(bindings, "categoryLabel")

    async def get_sub_categories(self, category: str) -> list[str]:
        bindings = await self._select(
            query_builder.build_subcategories_query(category, self.ontology_ns)
        )
        return labels(bindings, "subCategoryLabel")

    async def get_end_categories(self, sub_category: str) -> list[str]:
        bindings = await self._select(
            query_builder.build_end_categories_query(sub_category, self.ontology_ns)
        )
        return labels(bindings, "endCategoryLabel")

    async def get_stores(self) -> list[str]:
        bindings = await self._select(
            query_builder.build_stores_query(self.ontology_ns)
        )
        return labels(bindings, "storeLabel")

    async def get_products(
        self, selection: FilterSelection, limit: int, offset: int
    ) -> list[ProductRow]:
        bindings = await self._select(
            query_builder.build_products_query(
                selection, limit, offset, self.ontology_ns
            )
        )
        return [ProductRow.from_binding(b) for b in bindings]

    async def get_total_count(self, selection: FilterSelection) -> int:
        bindings = await self._select(
            query_builder.build_count_query(selection, self.ontology_ns)
        )
        return parse_count(bindings)

    async def get_listing(
        self, selection: FilterSelection, limit: int, offset: int
    ) -> tuple[list[ProductRow], Optional[int]]:
        """Rows and total count in a single round trip.

        The count travels on every row; an empty page carries none and
        yields ``None``.
        """
        bindings = await self._select(
            query_builder.build_listing_query(selection, limit, offset, self.ontology_ns)
        )
        rows = [ProductRow.from_binding(b) for b in bindings]
        if not bindings:
            logger.info("Empty page at offset %d, no total count available", offset)
            return rows, None
        return rows, parse_count(bindings)
