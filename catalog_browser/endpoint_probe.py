from logging import Logger, getLogger
import requests

from .config import Headers, SparqlConfig
from .query_builder import build_ask_query

logger: Logger = getLogger(__name__)


class EndpointProbe:
    def __init__(
        self,
        endpoint_url: str = SparqlConfig.ENDPOINT_URL,
        timeout: int | float = 10,
    ) -> None:
        self.endpoint_url: str = endpoint_url
        self.timeout: int | float = timeout

    def ping(self) -> bool:
        """Checks that the endpoint answers an ASK query; never raises."""
        try:
            response: requests.Response = requests.post(
                url=self.endpoint_url,
                data={"query": build_ask_query()},
                headers=Headers.HEADERS,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            reachable = isinstance(payload, dict) and "boolean" in payload
            logger.info("Endpoint %s answered ASK: %s", self.endpoint_url, reachable)
            return reachable
        except requests.exceptions.HTTPError as http_err:
            logger.error("HTTP error from endpoint: %s", http_err)
        except requests.exceptions.RequestException as req_err:
            logger.error("Request to endpoint failed: %s", req_err)
        except ValueError as json_err:
            logger.error("Endpoint answered with invalid JSON: %s", json_err)
        return False
