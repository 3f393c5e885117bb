"""Core modules for usbioboard.

Board-agnostic infrastructure:
- protocol: get/set register bit framing over a transport
- topology: port letter and pin legality rules
- initializer: one-time programming of pins as digital inputs
- poller: interruptible sampling loop
- exporter: per-board lifecycle (open, initialize, poll, close)
- outcome: first-arrival result shared by all running units
"""

from usbioboard.core.exceptions import (
    ConfigurationError,
    DeviceNotFoundError,
    IoBoardError,
    ProtocolError,
    TransportError,
    TransportTimeoutError,
)
from usbioboard.core.exporter import BoardExporter, RunState
from usbioboard.core.initializer import BoardInitializer, PinState
from usbioboard.core.metrics import GaugeFactory, MetricSink
from usbioboard.core.outcome import OutcomeAggregator
from usbioboard.core.poller import Poller, WaitResult, normalize, wait_for_stop
from usbioboard.core.protocol import RegisterProtocol, decode_response, encode_frame
from usbioboard.core.topology import is_pin_allowed, is_pin_wired, is_valid_port, port_index

__all__ = [
    # Errors
    "IoBoardError",
    "ConfigurationError",
    "DeviceNotFoundError",
    "TransportError",
    "TransportTimeoutError",
    "ProtocolError",
    # Protocol
    "RegisterProtocol",
    "encode_frame",
    "decode_response",
    # Topology
    "port_index",
    "is_valid_port",
    "is_pin_allowed",
    "is_pin_wired",
    # Initialization / polling
    "BoardInitializer",
    "PinState",
    "Poller",
    "WaitResult",
    "normalize",
    "wait_for_stop",
    # Metrics
    "GaugeFactory",
    "MetricSink",
    # Lifecycle
    "BoardExporter",
    "RunState",
    "OutcomeAggregator",
]
