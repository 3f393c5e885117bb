"""USB I/O board Prometheus exporter.

Polls digital input pins of USB-attached I/O boards through the board's
bit-level register protocol and publishes every configured pin as a gauge.

Architecture:
- Register protocol driver: get/set one register bit per request frame
- Pin topology rules: which port/pin combinations exist and are wired
- Board initializer: programs pins as digital inputs, enables pull-ups
- Poll loop: samples pins on an interval, interruptible by stop
- Exporter lifecycle: open, initialize, poll, close for one board
- Outcome aggregator: first failure (or explicit stop) wins

Getting started:
    from usbioboard import BoardExporter, load_config
    from usbioboard.usb import HidLocator

    config = load_config("/etc/lls-exporter/lls.yml")
    exporter = BoardExporter(config.devices[0], HidLocator())
    exporter.run()
"""

from usbioboard.core import (
    BoardExporter,
    BoardInitializer,
    ConfigurationError,
    GaugeFactory,
    IoBoardError,
    OutcomeAggregator,
    Poller,
    RegisterProtocol,
    RunState,
    TransportError,
)
from usbioboard.interfaces import DeviceInfo, DeviceLocator, Transport
from usbioboard.utils.config_loader import BoardConfig, ExporterConfig, PinConfig, load_config

__all__ = [
    # Lifecycle
    "BoardExporter",
    "RunState",
    "OutcomeAggregator",
    # Building blocks
    "BoardInitializer",
    "Poller",
    "RegisterProtocol",
    "GaugeFactory",
    # Transport contracts
    "DeviceInfo",
    "DeviceLocator",
    "Transport",
    # Configuration
    "BoardConfig",
    "ExporterConfig",
    "PinConfig",
    "load_config",
    # Errors
    "IoBoardError",
    "ConfigurationError",
    "TransportError",
]
