"""
HTTP endpoint serving the exposition text.

Every GET on the metrics path is one full scrape of the registry. The
root path returns a small landing page linking to it.
"""

from __future__ import annotations

import logging
import socket
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = ":9150"
DEFAULT_METRICS_PATH = "/metrics"

LANDING_PAGE = """<html>
<head><title>Tencent cloud info Exporter</title></head>
<body>
<h1>Tencent cloud info exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split host:port. An empty host (":9150") listens on all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"listen address must look like host:port, got {address!r}")
    host = host.strip("[]")
    return host, int(port)


def make_handler(registry: CollectorRegistry, metrics_path: str = DEFAULT_METRICS_PATH):

    landing = LANDING_PAGE.format(metrics_path=metrics_path).encode()

    class _ScrapeHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            path = self.path.split("?", 1)[0]
            if path == metrics_path:
                self._serve_metrics()
            elif path == "/":
                self._send(200, "text/html; charset=utf-8", landing)
            else:
                self._send(404, "text/plain; charset=utf-8", b"404 page not found\n")

        def _serve_metrics(self):
            try:
                body = generate_latest(registry)
            except Exception as e:
                log.exception("Error encoding metrics")
                self._send(500, "text/plain; charset=utf-8",
                           f"error encoding metrics: {e}\n".encode())
                return
            self._send(200, CONTENT_TYPE_LATEST, body)

        def _send(self, status: int, content_type: str, body: bytes):
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            log.debug("%s - %s", self.address_string(), format % args)

    return _ScrapeHandler


class _IPv6Server(ThreadingHTTPServer):
    address_family = socket.AF_INET6


class ExporterServer:
    """Threaded HTTP server; each request scrapes independently."""

    def __init__(self, registry: CollectorRegistry,
                 listen_address: str = DEFAULT_LISTEN_ADDRESS,
                 metrics_path: str = DEFAULT_METRICS_PATH):
        host, port = parse_listen_address(listen_address)
        server_class = _IPv6Server if ":" in host else ThreadingHTTPServer
        self._httpd = server_class((host, port), make_handler(registry, metrics_path))
        self._httpd.daemon_threads = True
        self.metrics_path = metrics_path

    @property
    def port(self) -> int:
        return self._httpd.server_address[1]

    def serve_forever(self):
        log.info("Listening on address %s", self._httpd.server_address)
        self._httpd.serve_forever()

    def shutdown(self):
        self._httpd.shutdown()
        self._httpd.server_close()
