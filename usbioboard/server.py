"""HTTP server exposing the metrics registry in the Prometheus text format."""

from __future__ import annotations

import logging
import socketserver
import threading
import time
from typing import Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import REGISTRY, CollectorRegistry, make_wsgi_app

from usbioboard.core.outcome import OutcomeAggregator
from usbioboard.utils.consts import ConstUtils

logger = logging.getLogger(__name__)


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args) -> None:  # noqa: A002 - signature from BaseHTTPRequestHandler
        logger.debug("%s - %s", self.address_string(), format % args)


class _ThreadingWSGIServer(socketserver.ThreadingMixIn, WSGIServer):
    allow_reuse_address = True
    daemon_threads = True


class MetricsServer:
    """Serves ``/metrics`` on a background thread.

    A failure of the serving loop is reported to the outcome aggregator.
    """

    def __init__(self, host: str, port: int, registry: Optional[CollectorRegistry] = None):
        self._host = host
        self._port = port
        self._registry = registry if registry is not None else REGISTRY
        self._httpd: Optional[_ThreadingWSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); the port is resolved when 0 was requested."""
        if self._httpd is None:
            return self._host, self._port
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def start(self, outcome: OutcomeAggregator) -> None:
        """Bind the socket and start serving.

        Raises:
            OSError: if the address cannot be bound
        """
        self._httpd = make_server(
            self._host,
            self._port,
            make_wsgi_app(self._registry),
            server_class=_ThreadingWSGIServer,
            handler_class=_QuietHandler,
        )
        self._thread = threading.Thread(
            target=self._serve, args=(self._httpd, outcome), name="metrics-http", daemon=True
        )
        self._thread.start()

    def _serve(self, httpd: _ThreadingWSGIServer, outcome: OutcomeAggregator) -> None:
        host, port = self.address
        logger.info(f"http serve started on {host or '*'}:{port}")
        try:
            httpd.serve_forever()
        except Exception as exc:
            logger.error(f"http serve failed: {exc}")
            outcome.report_error(exc)
        finally:
            logger.info("http serve stopped")

    def shutdown(self, timeout: float = ConstUtils.STOP_TIMEOUT) -> bool:
        """Stop serving and close the socket.

        Returns:
            True if the serving thread finished within ``timeout`` seconds.
        """
        if self._httpd is None or self._thread is None:
            return True

        # shutdown() blocks until serve_forever returns, so bound it from outside
        deadline = time.monotonic() + timeout
        stopper = threading.Thread(target=self._httpd.shutdown, name="metrics-http-shutdown", daemon=True)
        stopper.start()
        stopper.join(timeout)
        self._thread.join(max(0.0, deadline - time.monotonic()))
        stopped = not self._thread.is_alive()
        if stopped:
            self._httpd.server_close()
        else:
            logger.warning("timeout on http server shutdown")
        return stopped
