from logging import Logger, getLogger
from typing import Any, Optional
import asyncio
import aiohttp

from .config import Headers, SparqlConfig

logger: Logger = getLogger(__name__)

Binding = dict[str, dict[str, str]]


class SparqlQueryError(Exception):
    """A SPARQL request failed: transport, status or payload."""


def check_bindings(bindings: Any) -> list[Binding]:
    """Rejects anything that is not a list of var -> {type, value} rows."""
    if not isinstance(bindings, list):
        raise SparqlQueryError("results.bindings is not a list")
    for row in bindings:
        if not isinstance(row, dict) or not all(
            isinstance(cell, dict) for cell in row.values()
        ):
            logger.error("Malformed SPARQL binding: %s", str(row)[:200])
            raise SparqlQueryError("Malformed binding in results")
    return bindings


class SparqlClient:
    """Posts SELECT queries to a SPARQL endpoint over one shared session.

    Use as ``async with SparqlClient(url) as client: ...``; a session passed
    in by the caller is left open on exit.
    """

    def __init__(
        self,
        endpoint_url: str = SparqlConfig.ENDPOINT_URL,
        timeout: int | float = SparqlConfig.TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.endpoint_url: str = endpoint_url
        self.timeout: aiohttp.ClientTimeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session: bool = session is None

    async def __aenter__(self) -> "SparqlClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def select(self, query: str) -> list[Binding]:
        """Runs a SELECT query and returns its result bindings."""
        payload = await self._post(query)
        try:
            bindings = payload["results"]["bindings"]
        except (KeyError, TypeError) as e:
            logger.error("Unexpected SPARQL response shape: %s", str(payload)[:200])
            raise SparqlQueryError("Response carries no results.bindings") from e
        return check_bindings(bindings)

    async def _post(self, query: str) -> Any:
        if self._session is None:
            raise RuntimeError("SparqlClient is not open; use 'async with'")
        try:
            async with self._session.post(
                url=self.endpoint_url,
                data={"query": query},
                headers=Headers.HEADERS,
                timeout=self.timeout,
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    logger.error(
                        "SPARQL endpoint returned status %d: %s",
                        response.status,
                        body[:200],
                    )
                    raise SparqlQueryError(
                        f"Endpoint returned status {response.status}"
                    )
                logger.debug("Status: %d for query of %d chars", response.status, len(query))
                return await response.json(content_type=None)

        except aiohttp.ClientError as e:
            logger.error("Connection error: %s", str(e))
            raise SparqlQueryError(f"Connection error: {e}") from e

        except asyncio.TimeoutError as e:
            logger.error("Timed out querying %s", self.endpoint_url)
            raise SparqlQueryError("Request timed out") from e

        except ValueError as e:
            logger.error("Could not decode JSON response: %s", e)
            raise SparqlQueryError("Response is not valid JSON") from e
