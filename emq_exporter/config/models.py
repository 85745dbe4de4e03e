"""Pydantic configuration models for the exporter."""

from pydantic import BaseModel, Field, field_validator
from typing import Tuple


class BrokerConfig(BaseModel):
    """Connection settings for the EMQ node HTTP API."""
    uri: str = "http://127.0.0.1:8080"
    node: str = "emq@127.0.0.1"
    username: str = "admin"
    password: str = "public"
    timeout_seconds: float = Field(default=10.0, gt=0)
    concurrent_fetch: bool = True  # Issue the four API calls of a cycle in parallel

    @field_validator('uri')
    @classmethod
    def validate_uri(cls, v: str) -> str:
        """Validate URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URI must start with http:// or https://')
        return v

    @field_validator('node')
    @classmethod
    def validate_node(cls, v: str) -> str:
        if not v or '/' in v:
            raise ValueError('Node name must be non-empty and must not contain "/"')
        return v


class WebConfig(BaseModel):
    """Metrics HTTP server configuration."""
    listen_address: str = ":9444"
    telemetry_path: str = "/metrics"

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Validate host:port syntax."""
        host, sep, port = v.rpartition(':')
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError('Listen address must be host:port, e.g. ":9444"')
        return v

    @field_validator('telemetry_path')
    @classmethod
    def validate_telemetry_path(cls, v: str) -> str:
        if not v.startswith('/') or v == '/':
            raise ValueError('Telemetry path must start with "/" and must not be "/"')
        return v

    def bind_address(self) -> Tuple[str, int]:
        """
        Split listen_address into a (host, port) pair.

        An empty host binds every interface.
        """
        host, _, port = self.listen_address.rpartition(':')
        return host.strip('[]') or "0.0.0.0", int(port)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Unknown log level: {v}')
        return level


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter."""
    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
