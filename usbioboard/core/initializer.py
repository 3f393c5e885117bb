"""Board initializer.

Programs every configured pin as a digital input, in declared order:

1. resolve and validate the port letter and pin number
2. for pull-up pins, enable port B pull-ups once per board, then the pin's
   WPU_B bit
3. clear the ANSEL bit (digital mode), then set the TRIS bit (input)

Initialization is not transactional: on the first failure the board is
abandoned and nothing already written is reverted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from usbioboard.core.exceptions import ConfigurationError, TransportError
from usbioboard.core.metrics import MetricSink
from usbioboard.core.protocol import RegisterProtocol
from usbioboard.core.topology import is_pin_allowed, is_pin_wired, is_valid_port, port_index
from usbioboard.utils.consts import (
    INT_CON2_RBPU_BIT,
    PULL_UP_PORT,
    RegisterBase,
    register_address,
)

if TYPE_CHECKING:
    from usbioboard.utils.config_loader import PinConfig

logger = logging.getLogger(__name__)

SinkFactory = Callable[["PinConfig"], MetricSink]


@dataclass
class PinState:
    """Runtime record of one initialized pin, owned by its exporter."""

    name: str
    port: int
    pin: int
    revert: bool
    sink: MetricSink
    value: Optional[int] = None

    def describe(self) -> str:
        return f"pin {self.name!r} (port={self.port}, pin={self.pin})"


def _describe(cfg: PinConfig) -> str:
    return f"pin {cfg.name!r} (port={cfg.port!r}, pin={cfg.pin})"


def _pin_details(cfg: PinConfig) -> dict:
    return {"name": cfg.name, "port": cfg.port, "pin": cfg.pin}


class BoardInitializer:
    """Validates pin configs and programs the board registers for them."""

    def __init__(self, protocol: RegisterProtocol, sink_factory: SinkFactory, context: str = ""):
        self._protocol = protocol
        self._sink_factory = sink_factory
        self._context = context
        self._pull_up_enabled = False

    def initialize(self, pins: Iterable[PinConfig]) -> list[PinState]:
        """Program all pins and return their runtime state in declared order.

        Raises:
            ConfigurationError: on any invalid pin or failed register write
        """
        return [self._initialize_pin(cfg) for cfg in pins]

    def _initialize_pin(self, cfg: PinConfig) -> PinState:
        port = port_index(cfg.port)
        if not is_valid_port(port):
            logger.error(f"{self._context}{_describe(cfg)}: invalid port")
            raise ConfigurationError("port", f"invalid port {cfg.port!r} for {_describe(cfg)}", _pin_details(cfg))

        if not is_pin_allowed(port, cfg.pin):
            logger.error(f"{self._context}{_describe(cfg)}: invalid pin")
            raise ConfigurationError("pin", f"{_describe(cfg)} does not exist", _pin_details(cfg))

        if not is_pin_wired(port, cfg.pin):
            logger.warning(f"{self._context}{_describe(cfg)}: pin is not wired")

        if cfg.pull_up:
            if port != PULL_UP_PORT:
                logger.error(f"{self._context}{_describe(cfg)}: pull-up is not allowed")
                raise ConfigurationError(
                    "pull_up", f"pull-up is only available on port B, not for {_describe(cfg)}", _pin_details(cfg)
                )
            self._enable_pull_up(cfg, port)

        self._write(register_address(RegisterBase.ANSEL, port), cfg.pin, 0, cfg, "setting port to digital")
        self._write(register_address(RegisterBase.TRIS, port), cfg.pin, 1, cfg, "setting port to input")

        return PinState(
            name=cfg.name,
            port=port,
            pin=cfg.pin,
            revert=cfg.revert,
            sink=self._sink_factory(cfg),
        )

    def _enable_pull_up(self, cfg: PinConfig, port: int) -> None:
        if not self._pull_up_enabled:
            self._pull_up_enabled = True
            self._write(RegisterBase.INT_CON2, INT_CON2_RBPU_BIT, 0, cfg, "allowing pull-up on port b")

        # WPU_B is a single register; the bit written is the port index
        self._write(RegisterBase.WPU_B, port, 1, cfg, "enabling pull-up")

    def _write(self, register: int, bit: int, value: int, cfg: PinConfig, action: str) -> None:
        try:
            self._protocol.set_reg_bit(register, bit, value)
        except TransportError as exc:
            logger.error(f"{self._context}{_describe(cfg)}: error {action}: {exc}")
            details = dict(_pin_details(cfg), register=f"0x{int(register):02X}", bit=bit)
            raise ConfigurationError("pins", f"error {action} for {_describe(cfg)}: {exc}", details) from exc
