"""Daemon entry point for the USB I/O board exporter.

Starts one exporter thread per configured board and the metrics HTTP
server, then waits for the first outcome: a board failing, the server
failing, or a termination signal. Everything is then stopped within a
single shutdown budget.
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading
import time
from typing import Iterable, Optional

from prometheus_client import REGISTRY, CollectorRegistry

from usbioboard.core.exceptions import ConfigurationError
from usbioboard.core.exporter import BoardExporter
from usbioboard.core.metrics import GaugeFactory
from usbioboard.core.outcome import OutcomeAggregator
from usbioboard.interfaces.transport import DeviceLocator
from usbioboard.server import MetricsServer
from usbioboard.utils.config_loader import DEFAULT_CONFIG_PATH, ExporterConfig, load_config
from usbioboard.utils.consts import ConstUtils

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for the daemon."""
    parser = argparse.ArgumentParser(description="USB I/O board Prometheus exporter")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to YAML config file")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Poll simulated boards instead of USB devices",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    """Set up basic logging for the daemon."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _run_exporter(exporter: BoardExporter, outcome: OutcomeAggregator) -> None:
    try:
        exporter.run()
    except Exception as exc:
        outcome.report_error(exc)


def create_locator(config: ExporterConfig, simulate: bool) -> DeviceLocator:
    """Return the device locator for real or simulated boards."""
    if simulate:
        from usbioboard.sim import SimulatedBoard, SimulatedLocator

        # one simulated board per configured selector; "any" maps to 1
        return SimulatedLocator(SimulatedBoard(bus=d.bus or 1, device=d.device or 1) for d in config.devices)

    from usbioboard.usb import HidLocator

    return HidLocator()


class ExporterProcess:
    """Owns all exporters and the metrics server for one process run."""

    def __init__(
        self,
        config: ExporterConfig,
        locator: DeviceLocator,
        registry: Optional[CollectorRegistry] = None,
        shutdown_timeout: float = ConstUtils.STOP_TIMEOUT,
    ):
        self.config = config
        self.outcome = OutcomeAggregator()
        self.shutdown_timeout = shutdown_timeout
        registry = registry if registry is not None else REGISTRY
        gauges = GaugeFactory(registry)
        self.exporters = [BoardExporter(board, locator, gauges) for board in config.devices]
        host, port = config.listen_address
        self.server = MetricsServer(host, port, registry)
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        """Launch every exporter and the metrics server."""
        logger.info("starting")
        for index, exporter in enumerate(self.exporters):
            thread = threading.Thread(
                target=_run_exporter,
                args=(exporter, self.outcome),
                name=f"ioboard-{index}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

        try:
            self.server.start(self.outcome)
        except OSError as exc:
            logger.error(f"cannot listen on {self.config.listen}: {exc}")
            self.outcome.report_error(exc)

    def request_stop(self, _signum=None, _frame=None) -> None:
        self.outcome.report_success()

    def wait(self) -> Optional[BaseException]:
        """Block until the first outcome and return its error, if any."""
        error = self.outcome.wait()
        if error is not None:
            logger.error(f"error while running: {error}")
        return error

    def shutdown(self) -> None:
        """Stop the server and every exporter within the shutdown budget."""
        deadline = time.monotonic() + self.shutdown_timeout
        self.server.shutdown(self.shutdown_timeout)
        for exporter in self.exporters:
            exporter.stop(max(0.0, deadline - time.monotonic()))
        logger.info("stopped")


def install_signal_handlers(handler, signals: Iterable[signal.Signals] = STOP_SIGNALS) -> None:
    for signum in signals:
        signal.signal(signum, handler)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for running the daemon."""
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        logger.error(f"error loading config file: {exc}")
        return 1

    process = ExporterProcess(config, create_locator(config, args.simulate))
    install_signal_handlers(process.request_stop)

    process.start()
    error = process.wait()
    process.shutdown()
    return 0 if error is None else 1


if __name__ == "__main__":
    raise SystemExit(main())
