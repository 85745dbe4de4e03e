"""HTTP client for the EMQ monitoring and management API."""

import logging
from typing import Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..config.models import BrokerConfig
from ..utils.counters import ScrapeCounters
from .errors import DecodeError, HTTPStatusError, TransportError
from .responses import (
    BrokerStatsResponse,
    ClusterMembershipResponse,
    NodeStatusResponse,
    ProtocolCountersResponse,
)


NODES_PATH = "/api/v2/monitoring/nodes/{node}"
METRICS_PATH = "/api/v2/monitoring/metrics/{node}"
STATS_PATH = "/api/v2/monitoring/stats/{node}"
MANAGEMENT_NODES_PATH = "/api/v2/management/nodes"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class BrokerClient:
    """
    Fetch and decode the four payloads the exporter reads from a node.

    Each fetch is independent: it opens its own connection, sends one
    authenticated GET and either returns the decoded payload or raises a
    FetchError subclass. Nothing is retried. The only state shared between
    fetches is the process-wide parse failure counter.
    """

    def __init__(
        self,
        config: BrokerConfig,
        counters: ScrapeCounters,
        logger: logging.Logger,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize broker client.

        Args:
            config: Broker address, node name and credentials
            counters: Process-wide counters; parse failures are recorded here
            logger: Logger instance
            transport: Optional httpx transport, mainly for tests
        """
        self.config = config
        self.counters = counters
        self.logger = logger.getChild(self.__class__.__name__)
        self._transport = transport

    async def fetch_node_status(self) -> NodeStatusResponse:
        return await self._fetch(NODES_PATH, NodeStatusResponse, "nodes response")

    async def fetch_protocol_counters(self) -> ProtocolCountersResponse:
        return await self._fetch(METRICS_PATH, ProtocolCountersResponse, "metrics")

    async def fetch_broker_stats(self) -> BrokerStatsResponse:
        return await self._fetch(STATS_PATH, BrokerStatsResponse, "stats")

    async def fetch_cluster_membership(self) -> ClusterMembershipResponse:
        return await self._fetch(MANAGEMENT_NODES_PATH, ClusterMembershipResponse, "management info")

    def url_for(self, path: str) -> str:
        """Append an API path, with the percent-encoded node name filled in, to the base URI."""
        return self.config.uri.rstrip("/") + path.format(node=quote(self.config.node, safe="@"))

    async def _fetch(self, path: str, model: Type[ResponseT], what: str) -> ResponseT:
        """
        GET one endpoint and decode its body into ``model``.

        Args:
            path: API path template, may contain ``{node}``
            model: Response model to validate the body against
            what: Payload description used in error messages

        Returns:
            Decoded response model

        Raises:
            TransportError: Connection, send or timeout failure
            HTTPStatusError: Any status other than 200
            DecodeError: Body is not valid JSON of the expected shape
        """
        url = self.url_for(path)
        self.logger.debug(f"Fetching {what} from {url}")

        try:
            async with httpx.AsyncClient(
                auth=(self.config.username, self.config.password),
                timeout=self.config.timeout_seconds,
                transport=self._transport
            ) as client:
                response = await client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise TransportError(f"failed to get {what} from {url}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise HTTPStatusError(response.status_code, url)

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            self.counters.inc_json_parse_failures()
            raise DecodeError(
                f"failed to decode {what} from {url}: {e.error_count()} error(s), "
                f"first: {e.errors()[0]['msg']}"
            ) from e
