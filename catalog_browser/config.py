import os

from dotenv import load_dotenv

load_dotenv()


class SparqlConfig:
    ENDPOINT_URL: str = os.getenv(
        "graphdb_url", "http://localhost:7200/repositories/TechStoresDatav2"
    )
    ONTOLOGY_NS: str = os.getenv(
        "ontology_ns",
        "http://www.semanticweb.org/andrej/ontologies/2025/7/products-ontology/",
    )
    TIMEOUT: int | float = float(os.getenv("sparql_timeout", "20"))


class PaginationSettings:
    PAGE_SIZE: int = int(os.getenv("page_size", "30"))


class ExportDirectories:
    EXPORT_DIR: str = os.getenv("export_dir", "exports")


class BotConfig:
    TOKEN: str | None = os.getenv("token")


class Headers:
    HEADERS: dict[str, str] = {
        "Accept": "application/sparql-results+json",
        "Content-Type": "application/x-www-form-urlencoded",
    }


class Messages:
    CATEGORIES_FAILED: str = "Could not load categories."
    STORES_FAILED: str = "Could not load stores."
    DATA_FAILED: str = "Failed to fetch data from the triple store. Please try again."
    NO_RESULTS: str = "No products match the selected filters."
