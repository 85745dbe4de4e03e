"""Bridge between the collection cycle and prometheus_client."""

import asyncio
import platform
from typing import Dict, Iterable, Iterator, List, Sequence

from prometheus_client import CollectorRegistry, Info
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .collectors.emq_collector import EMQCollector
from .utils.metrics import CollectionResult, MetricKind, Sample
from .utils.status import HealthStatus


def _family(name: str, kind: MetricKind, help: str, label_names: Sequence[str]) -> Metric:
    if kind is MetricKind.COUNTER:
        return CounterMetricFamily(name, help, labels=list(label_names))
    return GaugeMetricFamily(name, help, labels=list(label_names))


def to_metric_families(samples: Iterable[Sample]) -> List[Metric]:
    """
    Group samples into metric families, keeping first-seen order.

    Args:
        samples: Samples of one collection cycle

    Returns:
        List of prometheus_client metric families
    """
    families: Dict[str, Metric] = {}
    for sample in samples:
        family = families.get(sample.name)
        if family is None:
            family = _family(sample.name, sample.kind, sample.help, sample.labels.keys())
            families[sample.name] = family
        family.add_metric(list(sample.labels.values()), sample.value)
    return list(families.values())


class EMQPrometheusCollector:
    """
    Custom prometheus_client collector running one cycle per scrape.

    collect() is called from the HTTP server's request thread, so every
    scrape gets its own event loop and overlapping scrapes never share a
    Snapshot.
    """

    def __init__(self, collector: EMQCollector):
        self.collector = collector

    def describe(self) -> List[Metric]:
        """Metric families without samples; avoids a scrape at registration."""
        families = [
            _family(definition.fqname, definition.kind, definition.help, definition.labels)
            for definition in self.collector.registry
        ]
        placeholder = CollectionResult(HealthStatus.DOWN, [], 0, 0)
        families.extend(
            _family(sample.name, sample.kind, sample.help, [])
            for sample in placeholder.meta_samples
        )
        return families

    def collect(self) -> Iterator[Metric]:
        result = asyncio.run(self.collector.collect())
        yield from to_metric_families(result.all_samples())


def register_exporter(
    collector: EMQCollector,
    registry: CollectorRegistry,
    version: str
) -> EMQPrometheusCollector:
    """
    Register the EMQ collector and the exporter build info on ``registry``.

    Args:
        collector: Collection cycle to run on every scrape
        registry: Target registry
        version: Exporter version reported in the build info series

    Returns:
        EMQPrometheusCollector: The registered bridge
    """
    bridge = EMQPrometheusCollector(collector)
    registry.register(bridge)

    build_info = Info("emq_exporter_build", "Build information of the EMQ exporter.", registry=registry)
    build_info.info({
        "version": version,
        "python_version": platform.python_version(),
    })
    return bridge
