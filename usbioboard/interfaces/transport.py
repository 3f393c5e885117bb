"""Transport abstraction - behavioral contract for talking to a board.

The register protocol only needs a byte pipe with bounded read/write. The
concrete pipe may be a USB HID device or a simulated board; everything above
this layer is written against these contracts only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DeviceInfo:
    """Where an attached board lives on the USB bus."""

    bus: int
    device: int
    path: bytes = b""
    serial: str = ""

    def matches(self, bus: int, device: int) -> bool:
        """Return True if this device satisfies a bus/device selector (0 = any)."""
        return (bus == 0 or bus == self.bus) and (device == 0 or device == self.device)


class Transport(ABC):
    """Raw frame pipe to one board.

    A transport is owned by exactly one exporter: opened, used and closed by
    it alone. Implementations raise TransportError on failure.
    """

    @property
    @abstractmethod
    def info(self) -> DeviceInfo:
        """Bus location of the device behind this transport."""
        ...

    @abstractmethod
    def open(self) -> None:
        """Open the device for exclusive use."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the device. Safe to call on a transport that failed to open."""
        ...

    @abstractmethod
    def write(self, data: bytes, timeout: float) -> int:
        """Write one frame and return the number of bytes written.

        Args:
            data: Frame bytes
            timeout: Seconds to wait before giving up
        """
        ...

    @abstractmethod
    def read(self, max_bytes: int, timeout: float) -> bytes:
        """Read one response of up to ``max_bytes`` bytes.

        Raises:
            TransportTimeoutError: if nothing arrives within ``timeout`` seconds
        """
        ...


class DeviceLocator(ABC):
    """Finds attached boards."""

    @abstractmethod
    def find(self, bus: int = 0, device: int = 0) -> Optional[Transport]:
        """Return an unopened transport for a matching board, or None.

        A selector value of 0 matches any bus or device number.
        """
        ...
