"""Exporter lifecycle for one board.

``run()`` owns the board from discovery to close: find the device, open it,
initialize the pins, then poll until ``stop()`` is called. It returns
normally only through the stop path; every other exit raises.

State transitions::

    CREATED --run()--> RUNNING --stop()--> STOP_REQUESTED --> STOPPED
                          \\--(failure)---------------------> STOPPED

THREAD SAFETY: ``run()`` is meant to execute on its own thread; ``stop()``
may be called from any other thread.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING, Optional

from usbioboard.core.exceptions import ConfigurationError, DeviceNotFoundError, TransportError
from usbioboard.core.initializer import BoardInitializer, PinState
from usbioboard.core.metrics import GaugeFactory, MetricSink
from usbioboard.core.poller import Poller
from usbioboard.core.protocol import RegisterProtocol
from usbioboard.interfaces.transport import DeviceLocator, Transport
from usbioboard.utils.consts import ConstUtils

if TYPE_CHECKING:
    from usbioboard.utils.config_loader import BoardConfig, PinConfig

logger = logging.getLogger(__name__)


class RunState(Enum):
    CREATED = "created"
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    STOPPED = "stopped"


class BoardExporter:
    """Polls one board and publishes its pins as gauges."""

    def __init__(self, config: BoardConfig, locator: DeviceLocator, gauges: Optional[GaugeFactory] = None):
        self._config = config
        self._locator = locator
        self._gauges = gauges if gauges is not None else GaugeFactory()

        self._lock = threading.Lock()
        self._state = RunState.CREATED
        self._stop = threading.Event()
        self._stopped = threading.Event()
        self._pins: list[PinState] = []
        self._context = self._selector_context()

    @property
    def config(self) -> BoardConfig:
        return self._config

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def pins(self) -> list[PinState]:
        return list(self._pins)

    def _selector_context(self) -> str:
        fields = []
        if self._config.bus != 0:
            fields.append(f"bus={self._config.bus}")
        if self._config.device != 0:
            fields.append(f"device={self._config.device}")
        return f"[{' '.join(fields)}] " if fields else ""

    def run(self) -> None:
        """Run the board until stopped.

        Raises:
            ConfigurationError: if the device is missing, cannot be opened, or
                any pin fails validation or initialization
            RuntimeError: if the exporter was already started
        """
        with self._lock:
            if self._state is RunState.STOPPED and self._stop.is_set():
                logger.debug(f"{self._context}stop requested before start")
                return
            if self._state is not RunState.CREATED:
                raise RuntimeError("exporter already started")
            self._state = RunState.RUNNING

        try:
            self._run()
        finally:
            with self._lock:
                self._state = RunState.STOPPED
            self._stopped.set()

    def _run(self) -> None:
        cfg = self._config
        transport = self._locator.find(cfg.bus, cfg.device)
        if transport is None:
            logger.error(f"{self._context}ioboard device not found")
            raise DeviceNotFoundError(cfg.bus, cfg.device)

        try:
            transport.open()
        except TransportError as exc:
            logger.error(f"{self._context}device open error: {exc}")
            raise ConfigurationError(
                "device", f"device open error: {exc}", details={"bus": cfg.bus, "device": cfg.device}
            ) from exc

        try:
            self._serve(transport)
        finally:
            transport.close()

    def _serve(self, transport: Transport) -> None:
        info = transport.info
        self._context = f"[bus={info.bus} device={info.device}] "
        protocol = RegisterProtocol(transport)

        initializer = BoardInitializer(protocol, self._create_sink, self._context)
        self._pins = initializer.initialize(self._config.pins)
        logger.info(f"{self._context}initialized {len(self._pins)} pins, polling every {self._config.read_delay_ms} ms")

        Poller(protocol, self._pins, self._config.read_delay, self._stop, self._context).run()
        logger.info(f"{self._context}polling stopped")

    def _create_sink(self, pin: PinConfig) -> MetricSink:
        return self._gauges.create(f"{self._config.prefix}_{pin.name}", pin.help, pin.labels)

    def stop(self, timeout: float = ConstUtils.STOP_TIMEOUT) -> bool:
        """Ask the poll loop to stop and wait for it to finish.

        Returns:
            True if the exporter stopped within ``timeout`` seconds.
        """
        with self._lock:
            self._stop.set()
            if self._state is RunState.CREATED:
                self._state = RunState.STOPPED
                self._stopped.set()
            elif self._state is RunState.RUNNING:
                self._state = RunState.STOP_REQUESTED

        if not self._stopped.wait(timeout):
            logger.warning(f"{self._context}timeout on stop")
            return False
        return True
