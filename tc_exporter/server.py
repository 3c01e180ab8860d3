from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CONTENT_TYPE_LATEST
from prometheus_client.exposition import ThreadingWSGIServer

from tc_exporter.collector import CollectionError
from tc_exporter.metrics import PARAMS, STATS, TcMetrics

logger = logging.getLogger(__name__)

StartResponse = Callable[..., Any]

ENDPOINTS = {
    "/metrics": STATS,
    "/params": PARAMS,
}

INDEX_PAGE = b"""<html>
<head><title>tc exporter</title></head>
<body>
<h1>tc exporter</h1>
<p><a href="/metrics">Statistics</a></p>
<p><a href="/params">Parameters</a></p>
</body>
</html>
"""

NO_CACHE = ("Cache-Control", "no-cache, no-store, must-revalidate")


def _plain(start_response: StartResponse, status: str, body: str) -> list[bytes]:
    start_response(status, [("Content-Type", "text/plain; charset=utf-8"), NO_CACHE])
    return [body.encode("utf-8")]


def create_app(metrics: TcMetrics) -> Callable[[dict[str, Any], StartResponse], Iterable[bytes]]:
    """Build the WSGI application serving both metric groups."""

    def route(environ: dict[str, Any], start_response: StartResponse) -> list[bytes]:
        path = environ.get("PATH_INFO", "") or "/"
        if path != "/":
            path = path.rstrip("/")
        method = environ.get("REQUEST_METHOD", "GET")

        if method not in ("GET", "HEAD"):
            start_response(
                "405 Method Not Allowed",
                [("Content-Type", "text/plain; charset=utf-8"), ("Allow", "GET, HEAD")],
            )
            return [b"Method Not Allowed\n"]

        if path == "/":
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [INDEX_PAGE]

        if path == "/health":
            return _plain(start_response, "200 OK", "ok\n")

        group = ENDPOINTS.get(path)
        if group is None:
            return _plain(start_response, "404 Not Found", "Not Found\n")

        try:
            body = metrics.scrape(group)
        except CollectionError as exc:
            logger.error("Scrape of %s failed: %s", path, exc)
            return _plain(start_response, "500 Internal Server Error", f"{exc}\n")

        start_response("200 OK", [("Content-Type", CONTENT_TYPE_LATEST), NO_CACHE])
        return [body]

    def app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        body = route(environ, start_response)
        if environ.get("REQUEST_METHOD") == "HEAD":
            return []
        return body

    return app


class LoggingRequestHandler(WSGIRequestHandler):
    """Send access lines to the logger instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def create_server(address: str, port: int, metrics: TcMetrics) -> WSGIServer:
    """Bind the threaded HTTP server. Raises OSError if the port is unavailable."""
    return make_server(
        address,
        port,
        create_app(metrics),
        server_class=ThreadingWSGIServer,
        handler_class=LoggingRequestHandler,
    )
