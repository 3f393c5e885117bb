"""Interface abstractions for usbioboard.

Defines behavioral contracts that all implementations must satisfy:
- Transport: raw frame pipe to one board (USB HID or simulated)
- DeviceLocator: discovery of attached boards by bus/device selector
"""

from usbioboard.interfaces.transport import DeviceInfo, DeviceLocator, Transport

__all__ = [
    "DeviceInfo",
    "DeviceLocator",
    "Transport",
]
