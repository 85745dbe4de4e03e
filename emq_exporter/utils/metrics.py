"""Metric sample and collection result data structures."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .status import HealthStatus


NAMESPACE = "emq"


class MetricKind(Enum):
    """Prometheus value type of an exposed series."""

    GAUGE = "gauge"
    COUNTER = "counter"


def build_fqname(namespace: str, subsystem: str, name: str) -> str:
    """Join non-empty name parts with underscores."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class Sample:
    """One exposed value together with the metadata of its series."""

    name: str
    kind: MetricKind
    help: str
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass
class CollectionResult:
    """Outcome of one collection cycle."""

    status: HealthStatus
    samples: List[Sample]  # Per-definition samples, empty when the cycle failed
    total_scrapes: int
    json_parse_failures: int
    error: Optional[str] = None

    @property
    def meta_samples(self) -> List[Sample]:
        """Health and scrape bookkeeping series, emitted on every cycle."""
        return [
            Sample(
                name=build_fqname(NAMESPACE, "node", "up"),
                kind=MetricKind.GAUGE,
                help="Was the last scrape of the EMQ node successful.",
                value=self.status.to_gauge(),
            ),
            Sample(
                name=build_fqname(NAMESPACE, "node", "total_scrapes"),
                kind=MetricKind.COUNTER,
                help="Current total scrapes.",
                value=float(self.total_scrapes),
            ),
            Sample(
                name=build_fqname(NAMESPACE, "node", "json_parse_failures"),
                kind=MetricKind.COUNTER,
                help="Number of errors while parsing JSON.",
                value=float(self.json_parse_failures),
            ),
        ]

    def all_samples(self) -> List[Sample]:
        return self.samples + self.meta_samples
