"""Shared pytest configuration and fixtures."""

import json

import httpx
import pytest

from emq_exporter.collectors.client import BrokerClient
from emq_exporter.collectors.responses import ProtocolCounters
from emq_exporter.config.models import BrokerConfig
from emq_exporter.utils.counters import ScrapeCounters
from emq_exporter.utils.logger import setup_logger


NODE = "emq@10.0.0.1"

ENDPOINTS = ("nodes", "metrics", "stats", "management")


def endpoint_of(path: str) -> str:
    """Map a request path to the short endpoint name used by FakeBroker."""
    if path == "/api/v2/management/nodes":
        return "management"
    for name in ("nodes", "metrics", "stats"):
        if path.startswith(f"/api/v2/monitoring/{name}/"):
            return name
    raise AssertionError(f"Unexpected request path: {path}")


class FakeBroker:
    """
    In-memory EMQ HTTP API served through httpx.MockTransport.

    Each endpoint answers with a JSON body, raw content, a status code or
    raises an exception, and every request is recorded.
    """

    def __init__(self, payloads):
        self.responses = {
            name: {"status": 200, "content": json.dumps(body).encode("utf-8"), "exc": None}
            for name, body in payloads.items()
        }
        self.requests = []

    def set(self, endpoint, status=200, body=None, content=None, exc=None):
        if body is not None:
            content = json.dumps(body).encode("utf-8")
        self.responses[endpoint] = {"status": status, "content": content or b"", "exc": exc}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[endpoint_of(request.url.path)]
        if response["exc"] is not None:
            raise response["exc"](f"simulated failure for {request.url}", request=request)
        return httpx.Response(
            response["status"],
            content=response["content"],
            headers={"content-type": "application/json"}
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self):
        return [request.url.path for request in self.requests]


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test")


@pytest.fixture
def broker_config():
    return BrokerConfig(uri="http://emq.test:8080", node=NODE, username="admin", password="public")


@pytest.fixture
def counters():
    return ScrapeCounters()


@pytest.fixture
def node_status_payload():
    return {
        "code": 0,
        "result": {
            "name": NODE,
            "otp_release": "R19/8.3",
            "node_status": "Running",
            "memory_total": "128.5MB",
            "memory_used": "64.25MB",
            "process_available": 262144,
            "process_used": 345,
            "max_fds": 7000,
            "clients": 12,
            "load1": "0.06",
            "load5": "0.10",
            "load15": "0.12",
        },
    }


@pytest.fixture
def protocol_counters_payload():
    """Every counter set to a distinct value, 1..38 in field order."""
    fields = ProtocolCounters.model_fields.values()
    return {
        "code": 0,
        "result": {field.alias: i for i, field in enumerate(fields, start=1)},
    }


@pytest.fixture
def broker_stats_payload():
    return {
        "code": 0,
        "result": {
            "clients/count": 12,
            "clients/max": 40,
            "retained/count": 3,
            "retained/max": 5,
            "routes/count": 8,
            "routes/max": 10,
            "sessions/count": 11,
            "sessions/max": 30,
            "subscribers/count": 7,
            "subscribers/max": 20,
            "subscriptions/count": 9,
            "subscriptions/max": 25,
            "topics/count": 6,
            "topics/max": 15,
        },
    }


@pytest.fixture
def cluster_payload():
    return {
        "code": 0,
        "result": [
            {
                "name": NODE,
                "version": "2.3.11",
                "sysdescr": "EMQ Broker",
                "uptime": "3 days, 2 hours",
                "datetime": "2026-10-18 09:00:00",
                "otp_release": "R19/8.3",
                "node_status": "Running",
            },
            {"name": "emq@10.0.0.2", "version": "2.3.10", "node_status": "Running"},
            {"name": "emq@10.0.0.3", "version": "2.3.10", "node_status": "Running"},
        ],
    }


@pytest.fixture
def fake_broker(node_status_payload, protocol_counters_payload, broker_stats_payload, cluster_payload):
    return FakeBroker({
        "nodes": node_status_payload,
        "metrics": protocol_counters_payload,
        "stats": broker_stats_payload,
        "management": cluster_payload,
    })


@pytest.fixture
def broker_client(broker_config, counters, logger, fake_broker):
    return BrokerClient(broker_config, counters, logger, transport=fake_broker.transport)
