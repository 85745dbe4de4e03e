"""WSGI application and threaded HTTP server for the metrics endpoint."""

import html
import logging
import socket
from socketserver import ThreadingMixIn
from typing import Callable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app


LANDING_PAGE = """<html>
<head><title>EMQ Exporter</title></head>
<body>
<h1>EMQ Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Serve every request on its own thread; scrapes may overlap."""
    daemon_threads = True


class ThreadingWSGIServerV6(ThreadingWSGIServer):
    address_family = socket.AF_INET6


def _request_handler(logger: logging.Logger):
    class LoggingRequestHandler(WSGIRequestHandler):
        def log_message(self, format, *args):
            logger.debug(f"{self.address_string()} {format % args}")

    return LoggingRequestHandler


def create_app(registry: CollectorRegistry, telemetry_path: str) -> Callable:
    """
    Build the exporter WSGI application.

    Args:
        registry: Registry rendered on the telemetry path
        telemetry_path: Path serving the metrics, e.g. "/metrics"

    Returns:
        WSGI callable serving metrics, a landing page on "/" and 404 elsewhere
    """
    metrics_app = make_wsgi_app(registry)
    landing_page = LANDING_PAGE.format(path=html.escape(telemetry_path, quote=True)).encode("utf-8")

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"
        if path == telemetry_path:
            return metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [landing_page]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"Not Found\n"]

    return app


def create_server(host: str, port: int, app: Callable, logger: logging.Logger) -> WSGIServer:
    """Bind a threaded WSGI server; call serve_forever() on the result."""
    return make_server(
        host,
        port,
        app,
        server_class=ThreadingWSGIServerV6 if ":" in host else ThreadingWSGIServer,
        handler_class=_request_handler(logger.getChild("http"))
    )
