import pytest

from catalog_browser.catalog_api import ProductRow
from catalog_browser.sparql_client import SparqlQueryError


class FakeCatalogApi:
    """In-memory stand-in for CatalogApi; names in ``failing`` raise."""

    def __init__(
        self,
        categories=(),
        stores=(),
        children=None,
        products=(),
        total=0,
        failing=(),
    ):
        self.categories = list(categories)
        self.stores = list(stores)
        self.children = children or {}
        self.products = list(products)
        self.total = total
        self.failing = set(failing)
        self.calls = []

    def _check(self, name):
        if name in self.failing:
            raise SparqlQueryError(f"{name} failed")

    async def get_categories(self):
        self.calls.append(("categories",))
        self._check("categories")
        return list(self.categories)

    async def get_stores(self):
        self.calls.append(("stores",))
        self._check("stores")
        return list(self.stores)

    async def get_sub_categories(self, category):
        self.calls.append(("sub", category))
        self._check(category)
        return list(self.children.get(category, []))

    async def get_end_categories(self, sub_category):
        self.calls.append(("end", sub_category))
        self._check(sub_category)
        return list(self.children.get(sub_category, []))

    async def get_products(self, selection, limit, offset):
        self.calls.append(("products", selection, limit, offset))
        self._check("products")
        return list(self.products)

    async def get_total_count(self, selection):
        self.calls.append(("count", selection))
        self._check("count")
        return self.total


def binding(**values):
    return {name: {"type": "literal", "value": value} for name, value in values.items()}


@pytest.fixture
def laptop_row():
    return ProductRow(
        product="http://example.org/p/1",
        title="ThinkPad X1",
        store="TechStore",
        full_category="Laptops > Ultrabook",
        regular_price="1999.00",
        discounted_price="1799.00",
        discount_percent="10",
        url="https://shop.example/x1",
    )


@pytest.fixture
def fake_api():
    return FakeCatalogApi(
        categories=["Laptops", "Phones"],
        stores=["MegaShop", "TechStore"],
        children={
            "Laptops": ["Gaming", "Ultrabook"],
            "Phones": ["Android", "Gaming"],
            "Gaming": ["17 inch", "15 inch"],
            "Ultrabook": ["13 inch"],
        },
        total=61,
    )
