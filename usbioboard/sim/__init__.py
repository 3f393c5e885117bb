"""Simulated I/O board for tests and hardware-free runs."""

from usbioboard.sim.board import HandledCommand, SimulatedBoard
from usbioboard.sim.transport import SimulatedLocator, SimulatedTransport

__all__ = [
    "HandledCommand",
    "SimulatedBoard",
    "SimulatedLocator",
    "SimulatedTransport",
]
