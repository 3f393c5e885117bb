"""Poll loop: sample every pin, publish, sleep, repeat until stopped."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Sequence

from usbioboard.core.exceptions import TransportError
from usbioboard.core.initializer import PinState
from usbioboard.core.protocol import RegisterProtocol
from usbioboard.utils.consts import RegisterBase, register_address

logger = logging.getLogger(__name__)


class WaitResult(Enum):
    """How an interruptible wait ended."""

    ELAPSED = "elapsed"
    STOPPED = "stopped"


def wait_for_stop(stop: threading.Event, timeout: float) -> WaitResult:
    """Sleep up to ``timeout`` seconds, returning early if ``stop`` is set."""
    if stop.wait(timeout):
        return WaitResult.STOPPED
    return WaitResult.ELAPSED


def normalize(raw: int, revert: bool) -> int:
    """Collapse a raw register byte to 0/1 and apply inversion."""
    value = 1 if raw else 0
    if revert:
        value ^= 1
    return value


class Poller:
    """Samples a board's pins on a fixed interval."""

    def __init__(
        self,
        protocol: RegisterProtocol,
        pins: Sequence[PinState],
        interval: float,
        stop: threading.Event,
        context: str = "",
    ):
        self._protocol = protocol
        self._pins = list(pins)
        self._interval = interval
        self._stop = stop
        self._context = context

    def sweep(self) -> int:
        """Read and publish every pin once. Returns the number of failed reads.

        A failed read keeps the pin's previous value and does not stop the sweep.
        """
        failures = 0
        for pin in self._pins:
            try:
                raw = self._protocol.get_reg_bit(register_address(RegisterBase.PORT, pin.port), pin.pin)
            except TransportError as exc:
                failures += 1
                logger.error(f"{self._context}{pin.describe()}: read error: {exc}")
                continue

            value = normalize(raw, pin.revert)
            logger.debug(f"{self._context}{pin.describe()}: read ok, value={value}")
            pin.sink.set(float(value))
            pin.value = value
        return failures

    def run(self) -> None:
        """Sweep until the stop event is set. Stop is only observed between sweeps."""
        while True:
            self.sweep()
            if wait_for_stop(self._stop, self._interval) is WaitResult.STOPPED:
                return
