"""Base collector abstract class for broker collectors."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import logging
from functools import wraps

from ..utils.counters import ScrapeCounters
from ..utils.metrics import CollectionResult, Sample
from ..utils.status import HealthStatus
from .errors import FetchError


class BaseCollector(ABC):
    """Abstract base class for collectors that run one cycle per scrape."""

    def __init__(self, config: Any, counters: ScrapeCounters, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            config: Collector-specific configuration
            counters: Process-wide scrape counters
            logger: Logger instance
        """
        self.config = config
        self.counters = counters
        self.logger = logger.getChild(self.__class__.__name__)

    @property
    @abstractmethod
    def target_name(self) -> str:
        """Name of the scraped target, used in results and log messages."""

    @abstractmethod
    async def collect(self) -> CollectionResult:
        """
        Run one collection cycle.

        Returns:
            CollectionResult: Samples and health of this cycle

        Raises:
            Exception: Any collection errors (will be caught by safe_collect)

        Note:
            Implementations should use @safe_collect decorator for error handling.
        """
        pass

    def _result(
        self,
        status: HealthStatus,
        samples: List[Sample],
        error: Optional[str] = None
    ) -> CollectionResult:
        """Package a cycle outcome with the current counter values."""
        return CollectionResult(
            status=status,
            samples=samples,
            total_scrapes=self.counters.total_scrapes,
            json_parse_failures=self.counters.json_parse_failures,
            error=error
        )


def safe_collect(func):
    """
    Decorator that turns a failed cycle into a DOWN result.

    Fetch failures are expected and logged without a traceback; anything
    else is logged with one. Either way only the meta series are exported
    for the cycle.

    Args:
        func: Collector method to wrap

    Returns:
        Wrapped function that catches exceptions
    """
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except FetchError as e:
            self.logger.error(f"Scrape of {self.target_name} failed: {e}")
            return self._result(HealthStatus.DOWN, [], error=str(e))
        except Exception as e:
            self.logger.error(f"Collection failed: {e}", exc_info=True)
            return self._result(HealthStatus.DOWN, [], error=f"Collection error: {e}")
    return wrapper
