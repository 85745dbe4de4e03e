"""Declarative table of the metrics exported for an EMQ node."""

from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Optional, Tuple
import logging
import re

from ..utils.metrics import NAMESPACE, MetricKind, Sample, build_fqname
from .responses import BrokerStats, NodeStatus, ProtocolCounters


DEFAULT_LABELS = ("node", "otp_release", "version")

# First number in a human readable size, e.g. "128.5" in "128.5MB"
NUMBER_PATTERN = re.compile(r"\d+[.]\d+|\d+")

# Memory sizes are reported in megabytes
MEMORY_SCALE = 1000000

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Everything fetched for one collection cycle."""
    nodes: NodeStatus
    metrics: ProtocolCounters
    stats: BrokerStats
    cluster_size: int
    version: str = ""
    code: int = 0

    def label_values(self) -> Tuple[str, str, str]:
        """Values for DEFAULT_LABELS, in order."""
        return (self.nodes.name, self.nodes.otp_release, self.version)


@dataclass(frozen=True)
class MetricDefinition:
    """A single exported series and how to compute it from a Snapshot."""
    subsystem: str
    name: str
    help: str
    extract: Callable[[Snapshot], float]
    kind: MetricKind = MetricKind.GAUGE
    labels: Tuple[str, ...] = DEFAULT_LABELS

    @property
    def fqname(self) -> str:
        return build_fqname(NAMESPACE, self.subsystem, self.name)

    def evaluate(self, snapshot: Snapshot) -> Sample:
        """Compute this definition's sample for ``snapshot``."""
        return Sample(
            name=self.fqname,
            kind=self.kind,
            help=self.help,
            value=float(self.extract(snapshot)),
            labels=dict(zip(self.labels, snapshot.label_values())),
        )


def parse_number(text: str) -> Optional[float]:
    """
    Return the first decimal number embedded in ``text``.

    Args:
        text: Free form string such as "128.5MB"

    Returns:
        The parsed number, or None when ``text`` contains no digits
    """
    match = NUMBER_PATTERN.search(text or "")
    if match is None:
        return None
    return float(match.group())


def memory_extractor(field: str) -> Callable[[Snapshot], float]:
    """
    Build an extractor for a human readable memory field of NodeStatus.

    Values without a number are logged and exported as 0.
    """
    get = attrgetter(f"nodes.{field}")

    def extract(snapshot: Snapshot) -> float:
        raw = get(snapshot)
        value = parse_number(raw)
        if value is None:
            logger.error(f"error converting {field} {raw!r} into number")
            return 0.0
        return value * MEMORY_SCALE

    return extract


def _gauge(subsystem: str, name: str, help: str, source: str) -> MetricDefinition:
    return MetricDefinition(subsystem, name, help, attrgetter(source))


def build_registry() -> Tuple[MetricDefinition, ...]:
    """
    Build the ordered, immutable list of exported metric definitions.

    Both ``emq_stats_subscribers`` and ``emq_stats_subscriptions`` read the
    subscribers count; dashboards query both names.
    """
    return (
        _gauge("cluster", "size", "The total number of EMQ nodes in your cluster.", "cluster_size"),

        _gauge("node", "process_used", "The amount of processes used by the EMQ node.",
               "nodes.process_used"),
        _gauge("node", "process_available", "The amount of processes available to the EMQ node.",
               "nodes.process_available"),
        _gauge("node", "max_fds", "The amount of file descriptors available to the EMQ node.",
               "nodes.max_fds"),
        MetricDefinition("node", "memory_total", "The max amount of memory used to the EMQ node.",
                         memory_extractor("memory_total")),
        MetricDefinition("node", "memory_used", "The amount of memory being used to the EMQ node.",
                         memory_extractor("memory_used")),

        _gauge("metric", "packets_disconnected", "The amount of packets disconnected",
               "metrics.packets_disconnect"),
        _gauge("metric", "messages_qos2_received", "The amount of packets QOS2 messages received",
               "metrics.messages_qos2_received"),
        _gauge("metric", "packets_suback", "The amount of packets suback", "metrics.packets_suback"),
        _gauge("metric", "packets_pubcomp_received", "The amount of packets pubcomp received",
               "metrics.packets_pubcomp_received"),
        _gauge("metric", "packets_unsuback", "The amount of packets unsuback", "metrics.packets_unsuback"),
        _gauge("metric", "packets_pingresp", "The amount of packets pingresp", "metrics.packets_pingresp"),
        _gauge("metric", "packets_pingreq", "The amount of packets pingreq", "metrics.packets_pingreq"),
        _gauge("metric", "packets_pubrel_missed", "The amount of packets pubrel missed",
               "metrics.packets_pubrel_missed"),
        _gauge("metric", "packets_sent", "The amount of packets sent", "metrics.packets_sent"),
        _gauge("metric", "messages_qos2_sent", "The amount of QOS2 messages sent", "metrics.messages_qos2_sent"),
        _gauge("metric", "packets_pubrec_missed", "The amount of packets pubrec missed",
               "metrics.packets_pubrec_missed"),
        _gauge("metric", "packets_unsubscribe", "The amount of packets unsubscribe",
               "metrics.packets_unsubscribe"),
        _gauge("metric", "bytes_received", "The amount of bytes received", "metrics.bytes_received"),
        _gauge("metric", "packets_connack", "The amount of packets connack", "metrics.packets_connack"),
        _gauge("metric", "messages_received", "The amount of messages received", "metrics.messages_received"),
        _gauge("metric", "messages_dropped", "The amount of messages dropped", "metrics.messages_dropped"),
        _gauge("metric", "packets_pubrec_sent", "The amount of packets pubrec sent", "metrics.packets_pubrec_sent"),
        _gauge("metric", "messages_retained", "The amount of messages retained", "metrics.messages_retained"),
        _gauge("metric", "packets_publish_received", "The amount of packets publish received",
               "metrics.packets_publish_received"),
        _gauge("metric", "packets_pubcomp_sent", "The amount of packets pubcomp sent",
               "metrics.packets_pubcomp_sent"),
        _gauge("metric", "packets_connect", "The amount of packets connect", "metrics.packets_connect"),
        _gauge("metric", "packets_puback_received", "The amount of packets puback received",
               "metrics.packets_puback_received"),
        _gauge("metric", "messages_sent", "The amount of messages sent", "metrics.messages_sent"),
        _gauge("metric", "packets_publish_sent", "The amount of packets publish sent",
               "metrics.packets_publish_sent"),
        _gauge("metric", "bytes_sent", "The amount of bytes sent", "metrics.bytes_sent"),
        _gauge("metric", "packets_puback_sent", "The amount of packets puback sent", "metrics.packets_puback_sent"),
        _gauge("metric", "messages_qos2_dropped", "The amount of QOS2 messages dropped",
               "metrics.messages_qos2_dropped"),
        _gauge("metric", "packets_pubrel_sent", "The amount of packets pubrel sent", "metrics.packets_pubrel_sent"),
        _gauge("metric", "messages_qos1_sent", "The amount of QOS1 messages sent", "metrics.messages_qos1_sent"),
        _gauge("metric", "packets_pubrel_received", "The amount of packets pubrel received",
               "metrics.packets_pubrel_received"),
        _gauge("metric", "messages_qos1_received", "The amount of QOS1 messages received",
               "metrics.messages_qos1_received"),
        _gauge("metric", "messages_qos0_sent", "The amount of QOS0 messages sent", "metrics.messages_qos0_sent"),
        _gauge("metric", "packets_received", "The amount of packets received", "metrics.packets_received"),
        _gauge("metric", "packets_pubrec_received", "The amount of packets pubrec received",
               "metrics.packets_pubrec_received"),
        _gauge("metric", "packets_pubcomp_missed", "The amount of packets pubcomp missed",
               "metrics.packets_pubcomp_missed"),
        _gauge("metric", "packets_puback_missed", "The amount of packets puback missed",
               "metrics.packets_puback_missed"),

        _gauge("stats", "clients", "The amount of clients using in the EMQ node.", "stats.clients_count"),
        _gauge("stats", "retained", "The amount of retained messages in the EMQ node.", "stats.retained_count"),
        _gauge("stats", "routes", "The amount of routes in use by the EMQ node.", "stats.routes_count"),
        _gauge("stats", "sessions", "The amount of sessions in use by the EMQ node.", "stats.sessions_count"),
        _gauge("stats", "subscribers", "The amount of subscribers using the EMQ node.",
               "stats.subscribers_count"),
        _gauge("stats", "subscriptions", "The amount of subscriptions in use by the EMQ node.",
               "stats.subscribers_count"),
        _gauge("stats", "topics", "The amount of topics being used in the EMQ node.", "stats.topics_count"),
    )
