"""SPARQL text for the product listing and the filter-panel lookups.

Every label goes through :func:`escape_literal` and every numeric bound
through :func:`format_number` before it reaches the query text.
"""
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from .config import SparqlConfig
from .filters import FilterSelection, category_filter_labels

_LITERAL_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

PRODUCT_GROUP_VARS: str = (
    "?product ?title ?store ?regularPrice ?discountedPrice ?discountPercent ?url"
)


def prefixes(ontology_ns: Optional[str] = None) -> str:
    ns = ontology_ns or SparqlConfig.ONTOLOGY_NS
    return (
        f"PREFIX : <{ns}>\n"
        "PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>\n"
        "PREFIX xsd: <http://www.w3.org/2001/XMLSchema#>\n"
    )


def escape_literal(value: str) -> str:
    """Renders ``value`` as a double-quoted SPARQL string literal."""
    return '"' + "".join(_LITERAL_ESCAPES.get(ch, ch) for ch in value) + '"'


def format_number(value: Decimal | int | float) -> str:
    """Renders a bound as a plain decimal token, rejecting NaN and infinities."""
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not number.is_finite():
        raise ValueError(f"Bound must be finite: {value!r}")
    return format(number, "f")


def in_list(labels: Iterable[str]) -> str:
    return ", ".join(escape_literal(label) for label in labels)


def category_clause(selection: FilterSelection) -> str:
    level, labels = category_filter_labels(selection)
    if level is None:
        return ""
    return (
        "?product :hasCategory ?cat .\n"
        "?cat rdfs:label ?catName .\n"
        f"FILTER(?catName IN ({in_list(labels)}))\n"
    )


def store_clause(selection: FilterSelection) -> str:
    if not selection.stores:
        return ""
    return (
        "?product :soldBy ?storeNode .\n"
        "?storeNode rdfs:label ?storeName .\n"
        f"FILTER(?storeName IN ({in_list(selection.stores)}))\n"
    )


def numeric_clause(selection: FilterSelection) -> str:
    bounds = (
        ("?regularPrice", ">=", selection.min_price),
        ("?regularPrice", "<=", selection.max_price),
        ("?discountPercent", ">=", selection.min_discount),
        ("?discountPercent", "<=", selection.max_discount),
    )
    return "".join(
        f"FILTER(xsd:decimal({var}) {op} {format_number(bound)})\n"
        for var, op, bound in bounds
        if bound is not None
    )


def filter_clauses(selection: FilterSelection) -> str:
    return category_clause(selection) + store_clause(selection) + numeric_clause(
        selection
    )


def _check_window(limit: int, offset: int) -> None:
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")


def _products_select(selection: FilterSelection, limit: int, offset: int) -> str:
    return f"""SELECT ?product ?title ?store
       (GROUP_CONCAT(DISTINCT ?categoryLabel; SEPARATOR=" > ") AS ?fullCategory)
       ?regularPrice ?discountedPrice ?discountPercent ?url
WHERE {{
  ?product a :Product .
  OPTIONAL {{ ?product :hasTitle ?title . }}
  OPTIONAL {{ ?product :soldBy [ rdfs:label ?store ] . }}
  OPTIONAL {{ ?product :hasRegularPrice ?regularPrice . }}
  OPTIONAL {{ ?product :hasDiscountedPrice ?discountedPrice . }}
  OPTIONAL {{ ?product :hasDiscountPercent ?discountPercent . }}
  OPTIONAL {{ ?product :hasUrl ?url . }}
  OPTIONAL {{ ?product :hasCategory ?anyCat . ?anyCat rdfs:label ?categoryLabel . }}
{filter_clauses(selection)}}}
GROUP BY {PRODUCT_GROUP_VARS}
ORDER BY ?title
LIMIT {limit}
OFFSET {offset}
"""


def _count_select(selection: FilterSelection) -> str:
    return f"""SELECT (COUNT(DISTINCT ?product) AS ?totalCount)
WHERE {{
  ?product a :Product .
  OPTIONAL {{ ?product :hasRegularPrice ?regularPrice . }}
  OPTIONAL {{ ?product :hasDiscountPercent ?discountPercent . }}
{filter_clauses(selection)}}}
"""


def build_products_query(
    selection: FilterSelection,
    limit: int,
    offset: int,
    ontology_ns: Optional[str] = None,
) -> str:
    """One page of grouped products ordered by title."""
    _check_window(limit, offset)
    return prefixes(ontology_ns) + _products_select(selection, limit, offset)


def build_count_query(
    selection: FilterSelection, ontology_ns: Optional[str] = None
) -> str:
    """Number of distinct products matching ``selection``."""
    return prefixes(ontology_ns) + _count_select(selection)


def build_listing_query(
    selection: FilterSelection,
    limit: int,
    offset: int,
    ontology_ns: Optional[str] = None,
) -> str:
    """Page rows joined with the total count, so every row carries ?totalCount."""
    _check_window(limit, offset)
    return (
        prefixes(ontology_ns)
        + "SELECT ?product ?title ?store ?fullCategory ?regularPrice "
        "?discountedPrice ?discountPercent ?url ?totalCount\n"
        "WHERE {\n"
        "{\n"
        + _products_select(selection, limit, offset)
        + "}\n{\n"
        + _count_select(selection)
        + "}\n}\n"
    )


def build_categories_query(ontology_ns: Optional[str] = None) -> str:
    """Top categories: categories that are nobody's subcategory."""
    return prefixes(ontology_ns) + (
        "SELECT DISTINCT ?categoryLabel WHERE {\n"
        "  ?category a :Category ; rdfs:label ?categoryLabel .\n"
        "  FILTER NOT EXISTS { ?anyParent :hasSubCategory ?category . }\n"
        "} ORDER BY ?categoryLabel\n"
    )


def _children_query(
    parent_label: str, var: str, ontology_ns: Optional[str] = None
) -> str:
    return prefixes(ontology_ns) + (
        f"SELECT DISTINCT ?{var} WHERE {{\n"
        f"  ?parent rdfs:label {escape_literal(parent_label)} .\n"
        "  ?parent :hasSubCategory ?child .\n"
        f"  ?child rdfs:label ?{var} .\n"
        f"}} ORDER BY ?{var}\n"
    )


def build_subcategories_query(
    category: str, ontology_ns: Optional[str] = None
) -> str:
    return _children_query(category, "subCategoryLabel", ontology_ns)


def build_end_categories_query(
    sub_category: str, ontology_ns: Optional[str] = None
) -> str:
    # Same relation one level deeper; "end" exists only in the panel.
    return _children_query(sub_category, "endCategoryLabel", ontology_ns)


def build_stores_query(ontology_ns: Optional[str] = None) -> str:
    return prefixes(ontology_ns) + (
        "SELECT DISTINCT ?storeLabel WHERE {\n"
        "  ?store a :Store ; rdfs:label ?storeLabel .\n"
        "} ORDER BY ?storeLabel\n"
    )


def build_ask_query() -> str:
    return "ASK { ?s ?p ?o }"
