import pytest

from conftest import binding
from catalog_browser.catalog_api import CatalogApi, ProductRow, labels, parse_count
from catalog_browser.filters import FilterSelection
from catalog_browser.sparql_client import SparqlQueryError


class RecordingClient:
    def __init__(self, bindings):
        self.bindings = bindings
        self.queries = []

    async def select(self, query):
        self.queries.append(query)
        return self.bindings


def test_labels_skip_missing_variables():
    bindings = [binding(storeLabel="A"), binding(other="x"), binding(storeLabel="B")]
    assert labels(bindings, "storeLabel") == ["A", "B"]


def test_product_row_from_binding():
    row = ProductRow.from_binding(
        binding(
            product="http://example.org/p/1",
            title="ThinkPad X1",
            fullCategory="Laptops > Ultrabook",
            regularPrice="1999.00",
            totalCount="61",
        )
    )
    assert row.title == "ThinkPad X1"
    assert row.full_category == "Laptops > Ultrabook"
    assert row.regular_price == "1999.00"
    assert row.store is None


def test_parse_count():
    assert parse_count([binding(totalCount="61")]) == 61
    with pytest.raises(SparqlQueryError):
        parse_count([])
    with pytest.raises(SparqlQueryError):
        parse_count([binding(totalCount="many")])


@pytest.mark.asyncio
async def test_lookups_read_their_variable():
    client = RecordingClient([binding(subCategoryLabel="Gaming")])
    api = CatalogApi(client)
    assert await api.get_sub_categories("Laptops") == ["Gaming"]
    assert '"Laptops"' in client.queries[-1]

    client.bindings = [binding(endCategoryLabel="17 inch")]
    assert await api.get_end_categories("Gaming") == ["17 inch"]

    client.bindings = [binding(categoryLabel="Laptops"), binding(categoryLabel="Phones")]
    assert await api.get_categories() == ["Laptops", "Phones"]

    client.bindings = [binding(storeLabel="TechStore")]
    assert await api.get_stores() == ["TechStore"]


@pytest.mark.asyncio
async def test_products_and_count():
    client = RecordingClient([binding(title="A"), binding(title="B")])
    api = CatalogApi(client, ontology_ns="http://example.org/shop#")
    rows = await api.get_products(FilterSelection(), 30, 60)
    assert [row.title for row in rows] == ["A", "B"]
    assert "OFFSET 60" in client.queries[-1]
    assert "<http://example.org/shop#>" in client.queries[-1]

    client.bindings = [binding(totalCount="42")]
    assert await api.get_total_count(FilterSelection()) == 42


@pytest.mark.asyncio
async def test_listing_reads_count_from_first_row():
    client = RecordingClient(
        [binding(title="A", totalCount="61"), binding(title="B", totalCount="61")]
    )
    rows, total = await CatalogApi(client).get_listing(FilterSelection(), 30, 0)
    assert len(rows) == 2
    assert total == 61


@pytest.mark.asyncio
async def test_listing_empty_page_has_no_count():
    rows, total = await CatalogApi(RecordingClient([])).get_listing(
        FilterSelection(), 30, 900
    )
    assert rows == []
    assert total is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "bindings", [["oops"], [{"storeLabel": "TechStore"}], [binding(title="A"), None]]
)
async def test_malformed_bindings_become_query_errors(bindings):
    api = CatalogApi(RecordingClient(bindings))
    with pytest.raises(SparqlQueryError):
        await api.get_stores()
    with pytest.raises(SparqlQueryError):
        await api.get_products(FilterSelection(), 30, 0)
    with pytest.raises(SparqlQueryError):
        await api.get_listing(FilterSelection(), 30, 0)
