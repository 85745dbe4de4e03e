"""Collection cycle for a single EMQ node."""

import asyncio
import logging
from typing import Optional, Sequence, Tuple

from ..config.models import BrokerConfig
from ..utils.counters import ScrapeCounters
from ..utils.metrics import CollectionResult
from ..utils.status import HealthStatus
from .base import BaseCollector, safe_collect
from .client import BrokerClient
from .registry import MetricDefinition, Snapshot, build_registry
from .responses import (
    BrokerStatsResponse,
    ClusterMembershipResponse,
    NodeStatusResponse,
    ProtocolCountersResponse,
)


Responses = Tuple[
    NodeStatusResponse,
    ProtocolCountersResponse,
    BrokerStatsResponse,
    ClusterMembershipResponse,
]


class EMQCollector(BaseCollector):
    """
    Turn the EMQ HTTP API of one node into metric samples.

    Every call to collect() is an independent cycle: it fetches all four
    payloads, builds one Snapshot and evaluates every metric definition
    against it. A failed fetch ends the cycle with only the meta series.
    Cycles may run concurrently; they share nothing but the counters.
    """

    def __init__(
        self,
        config: BrokerConfig,
        counters: ScrapeCounters,
        logger: logging.Logger,
        client: Optional[BrokerClient] = None,
        registry: Optional[Sequence[MetricDefinition]] = None
    ):
        """
        Initialize EMQ collector.

        Args:
            config: Broker connection settings
            counters: Process-wide scrape counters
            logger: Logger instance
            client: Broker client, built from config when omitted
            registry: Metric definitions, build_registry() when omitted
        """
        super().__init__(config, counters, logger)
        self.client = client or BrokerClient(config, counters, logger)
        self.registry = tuple(registry) if registry is not None else build_registry()

    @property
    def target_name(self) -> str:
        return self.config.node

    @safe_collect
    async def collect(self) -> CollectionResult:
        """
        Run one collection cycle.

        Returns:
            CollectionResult: One sample per metric definition, or no samples
            and a DOWN status when any fetch failed
        """
        self.counters.inc_total_scrapes()

        responses = await self._fetch_all()
        snapshot = self._assemble(*responses)
        status = HealthStatus.from_code(snapshot.code)
        if status is HealthStatus.DOWN:
            self.logger.warning(f"Node {self.target_name} reported status code {snapshot.code}")

        samples = [definition.evaluate(snapshot) for definition in self.registry]
        self.logger.debug(f"Collected {len(samples)} samples from {self.target_name}")

        return self._result(status, samples)

    async def _fetch_all(self) -> Responses:
        """
        Fetch the four payloads of a cycle.

        Raises:
            FetchError: The first failure in the order node status, protocol
                counters, broker stats, cluster membership
        """
        fetches = (
            self.client.fetch_node_status,
            self.client.fetch_protocol_counters,
            self.client.fetch_broker_stats,
            self.client.fetch_cluster_membership,
        )

        if not self.config.concurrent_fetch:
            return tuple([await fetch() for fetch in fetches])

        results = await asyncio.gather(*(fetch() for fetch in fetches), return_exceptions=True)

        # gather keeps call order, so the first exception is the one with precedence
        for result in results:
            if isinstance(result, BaseException):
                raise result

        return tuple(results)

    def _assemble(
        self,
        nodes: NodeStatusResponse,
        metrics: ProtocolCountersResponse,
        stats: BrokerStatsResponse,
        management: ClusterMembershipResponse
    ) -> Snapshot:
        member = management.find_node(self.config.node)
        if not member.name:
            self.logger.debug(f"Node {self.config.node} not found in cluster membership")

        return Snapshot(
            nodes=nodes.result,
            metrics=metrics.result,
            stats=stats.result,
            cluster_size=len(management.result),
            version=member.version,
            code=nodes.code,
        )
