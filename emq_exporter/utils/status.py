"""Broker node health status."""

from enum import Enum


class HealthStatus(Enum):
    """Health of the scraped node as reported by the up gauge."""

    UP = 1
    DOWN = 0

    @classmethod
    def from_code(cls, code: int) -> "HealthStatus":
        """
        Map the status code embedded in a node status payload.

        The broker reports a logical success as code 0, even when the
        HTTP layer already answered 200.

        Args:
            code: ``code`` field of the node status response

        Returns:
            HealthStatus: UP for code 0, DOWN otherwise
        """
        return cls.UP if code == 0 else cls.DOWN

    def to_gauge(self) -> float:
        """Return the numeric value exposed by the up gauge."""
        return float(self.value)
