"""USB HID access to physical I/O boards."""

from usbioboard.usb.hid_transport import HidLocator, HidTransport, usb_location

__all__ = ["HidLocator", "HidTransport", "usb_location"]
