"""Main application entry point for the EMQ Prometheus exporter."""

import argparse
import logging
import signal
import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from typing import Optional

from prometheus_client import CollectorRegistry

from .collectors.emq_collector import EMQCollector
from .config.loader import ConfigLoader
from .config.models import ExporterConfig
from .config.settings import Settings
from .exposition import register_exporter
from .server import create_app, create_server
from .utils.counters import ScrapeCounters
from .utils.logger import setup_logger


def exporter_version() -> str:
    try:
        return package_version("emq-exporter")
    except PackageNotFoundError:
        return "unknown"


class ExporterApp:
    """
    EMQ exporter application.

    Wires configuration, the collection cycle and the metrics HTTP server
    together and handles graceful shutdown.
    """

    def __init__(self, config: ExporterConfig, logger: logging.Logger):
        """
        Initialize exporter application.

        Args:
            config: Validated exporter configuration
            logger: Root application logger
        """
        self.config = config
        self.logger = logger
        self.version = exporter_version()
        self.server = None

        self.counters = ScrapeCounters()
        self.registry = CollectorRegistry()
        self.collector = EMQCollector(config.broker, self.counters, self.logger)
        register_exporter(self.collector, self.registry, self.version)

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        if self.server is not None:
            self.server.server_close()
        sys.exit(0)

    def serve(self):
        """Serve metrics until interrupted (SIGTERM/SIGINT)."""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        web = self.config.web
        host, port = web.bind_address()
        app = create_app(self.registry, web.telemetry_path)
        self.server = create_server(host, port, app, self.logger)

        self.logger.info(f"Starting emq_exporter {self.version}")
        self.logger.info(
            f"Scraping node {self.config.broker.node} at {self.config.broker.uri}",
            extra={"node": self.config.broker.node, "uri": self.config.broker.uri}
        )
        self.logger.info(f"Listening on {web.listen_address}, metrics at {web.telemetry_path}")

        self.server.serve_forever()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='emq-exporter',
        description='Prometheus exporter for the EMQ HTTP management API',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape the local node with default credentials
  emq-exporter

  # Scrape a remote node
  emq-exporter --emq.uri http://emq-1:8080 --emq.node emq@10.0.0.1

  # Use a configuration file, overriding the listen address
  emq-exporter --config config/config.yaml --web.listen-address :9540
        """
    )

    parser.add_argument('--config', help='Path to YAML configuration file (optional)')
    parser.add_argument('--web.listen-address', dest='listen_address',
                        help='Address on which to expose metrics and web interface (default: :9444)')
    parser.add_argument('--web.telemetry-path', dest='telemetry_path',
                        help='Path under which to expose Prometheus metrics (default: /metrics)')
    parser.add_argument('--emq.uri', dest='uri',
                        help='HTTP API address of the EMQ node (default: http://127.0.0.1:8080)')
    parser.add_argument('--emq.username', dest='username', help='EMQ username (default: admin)')
    parser.add_argument('--emq.password', dest='password', help='EMQ password (default: public)')
    parser.add_argument('--emq.node', dest='node',
                        help='Node name of the EMQ node to scrape (default: emq@127.0.0.1)')
    parser.add_argument('--emq.timeout', dest='timeout_seconds', type=float,
                        help='Timeout in seconds for each API request (default: 10)')
    parser.add_argument('--log-level', dest='level', type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO or LOG_LEVEL env var)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {exporter_version()}')
    return parser


def load_config(args: argparse.Namespace) -> ExporterConfig:
    """
    Merge configuration sources.

    Precedence, lowest first: built-in defaults, the YAML file,
    LOG_LEVEL / EMQ_USERNAME / EMQ_PASSWORD, command-line flags.
    """
    broker_flags = {
        "uri": args.uri,
        "node": args.node,
        "username": args.username,
        "password": args.password,
        "timeout_seconds": args.timeout_seconds,
    }
    broker = Settings.broker_credentials()
    broker.update({k: v for k, v in broker_flags.items() if v is not None})

    return ConfigLoader.load(
        args.config,
        overrides={
            "broker": broker,
            "web": {
                "listen_address": args.listen_address,
                "telemetry_path": args.telemetry_path,
            },
            "logging": {
                "level": args.level or Settings.get("LOG_LEVEL") or None,
            },
        }
    )


def main(argv: Optional[list] = None):
    """
    CLI entry point.

    Parses command-line arguments and serves metrics.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except FileNotFoundError as e:
        logging.basicConfig()
        logging.error(str(e))
        sys.exit(1)
    except Exception as e:
        logging.basicConfig()
        logging.error(f"Failed to load configuration: {e}", exc_info=True)
        sys.exit(1)

    logger = setup_logger("emq_exporter", config.logging.level)

    try:
        ExporterApp(config, logger).serve()
    except OSError as e:
        logger.error(f"Failed to start HTTP server on {config.web.listen_address}: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
