"""Tests for BaseCollector and the safe_collect decorator."""

import logging

import pytest

from emq_exporter.collectors.base import BaseCollector, safe_collect
from emq_exporter.collectors.errors import HTTPStatusError
from emq_exporter.utils.counters import ScrapeCounters
from emq_exporter.utils.metrics import MetricKind, Sample
from emq_exporter.utils.status import HealthStatus


class MockCollector(BaseCollector):
    """Mock collector for testing BaseCollector functionality."""

    def __init__(self, outcome=None, counters=None):
        super().__init__({}, counters or ScrapeCounters(), logging.getLogger(__name__))
        self.outcome = outcome

    @property
    def target_name(self):
        return "mock@node"

    @safe_collect
    async def collect(self):
        """Mock collect method."""
        self.counters.inc_total_scrapes()
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self._result(HealthStatus.UP, self.outcome or [])


class TestSafeCollect:
    """Test suite for cycle error handling."""

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        sample = Sample("emq_x", MetricKind.GAUGE, "x", 1.0, {"node": "mock@node"})
        collector = MockCollector([sample])

        result = await collector.collect()

        assert result.status == HealthStatus.UP
        assert result.samples == [sample]
        assert result.total_scrapes == 1

    @pytest.mark.asyncio
    async def test_fetch_error_becomes_down_result(self, caplog):
        collector = MockCollector(HTTPStatusError(500, "http://emq/api"))

        with caplog.at_level(logging.ERROR):
            result = await collector.collect()

        assert result.status == HealthStatus.DOWN
        assert result.samples == []
        assert "500" in result.error
        assert "mock@node" in caplog.text
        # fetch failures are expected: no traceback
        assert all(record.exc_info is None for record in caplog.records)

    @pytest.mark.asyncio
    async def test_unexpected_error_logged_with_traceback(self, caplog):
        collector = MockCollector(KeyError("boom"))

        with caplog.at_level(logging.ERROR):
            result = await collector.collect()

        assert result.status == HealthStatus.DOWN
        assert result.error.startswith("Collection error")
        assert any(record.exc_info is not None for record in caplog.records)

    @pytest.mark.asyncio
    async def test_result_reads_current_counters(self):
        counters = ScrapeCounters()
        counters.inc_json_parse_failures()
        collector = MockCollector(counters=counters)

        result = await collector.collect()

        assert result.json_parse_failures == 1
        assert result.total_scrapes == 1


def test_base_collector_is_abstract():
    with pytest.raises(TypeError):
        BaseCollector({}, ScrapeCounters(), logging.getLogger(__name__))
