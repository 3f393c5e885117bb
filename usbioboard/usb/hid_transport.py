"""USB HID transport for the I/O board, built on hidapi.

hidapi does not report USB bus/device numbers directly. They are recovered
from the device path:

- libusb backend: ``bbbb:dddd:ii`` (hex bus, device address, interface)
- hidraw backend: ``/dev/hidrawN``, resolved through sysfs ``busnum`` and
  ``devnum`` of the owning USB device

Paths that match neither form report bus/device 0 and only satisfy the
"any" selector.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional

import hid
from overrides import override  # type: ignore

from usbioboard.core.exceptions import TransportError, TransportTimeoutError
from usbioboard.interfaces.transport import DeviceInfo, DeviceLocator, Transport
from usbioboard.utils.consts import IOBOARD_PRODUCT_ID, IOBOARD_VENDOR_ID

logger = logging.getLogger(__name__)

SYSFS_HIDRAW = Path("/sys/class/hidraw")
_LIBUSB_PATH = re.compile(r"^([0-9a-fA-F]{4}):([0-9a-fA-F]{4}):[0-9a-fA-F]{2}$")
# HID reports of this board are unnumbered
_REPORT_ID = b"\x00"


def _read_sysfs_int(path: Path) -> int:
    return int(path.read_text(encoding="ascii").strip())


def usb_location(path: bytes, sysfs_root: Path = SYSFS_HIDRAW) -> tuple[int, int]:
    """Return (bus, device) for a hidapi device path, or (0, 0) if unknown."""
    text = path.decode("utf-8", errors="replace")

    match = _LIBUSB_PATH.match(text)
    if match:
        return int(match.group(1), 16), int(match.group(2), 16)

    if text.startswith("/dev/hidraw"):
        name = text.rsplit("/", 1)[-1]
        try:
            # hidrawN/device -> HID device; its grandparent is the USB device
            usb_dir = (sysfs_root / name / "device").resolve().parent.parent
            return _read_sysfs_int(usb_dir / "busnum"), _read_sysfs_int(usb_dir / "devnum")
        except (OSError, ValueError) as exc:
            logger.debug(f"cannot resolve USB location of {text}: {exc}")

    return 0, 0


def device_info_from_entry(entry: dict[str, Any]) -> DeviceInfo:
    """Build DeviceInfo from one hid.enumerate() entry."""
    path = entry.get("path") or b""
    bus, device = usb_location(path)
    return DeviceInfo(bus=bus, device=device, path=path, serial=entry.get("serial_number") or "")


class HidTransport(Transport):
    """Frame pipe over a hidapi device handle."""

    def __init__(self, info: DeviceInfo):
        self._info = info
        self._device: Optional[Any] = None

    @property
    @override
    def info(self) -> DeviceInfo:
        return self._info

    @override
    def open(self) -> None:
        device = hid.device()
        try:
            device.open_path(self._info.path)
        except (OSError, ValueError) as exc:
            raise TransportError(
                f"cannot open {self._info.path!r}: {exc}",
                details={"bus": self._info.bus, "device": self._info.device},
            ) from exc
        self._device = device

    @override
    def close(self) -> None:
        if self._device is not None:
            self._device.close()
            self._device = None

    def _require_open(self) -> Any:
        if self._device is None:
            raise TransportError("device not open")
        return self._device

    @override
    def write(self, data: bytes, timeout: float) -> int:
        # hidapi writes to the interrupt endpoint have no timeout parameter
        device = self._require_open()
        try:
            written = device.write(_REPORT_ID + bytes(data))
        except (OSError, ValueError) as exc:
            raise TransportError(f"write error: {exc}") from exc
        if written < 0:
            raise TransportError(f"write error: {device.error()}")
        return written

    @override
    def read(self, max_bytes: int, timeout: float) -> bytes:
        device = self._require_open()
        try:
            data = device.read(max_bytes, timeout_ms=max(1, int(timeout * 1000)))
        except (OSError, ValueError) as exc:
            raise TransportError(f"read error: {exc}") from exc
        if not data:
            raise TransportTimeoutError(timeout)
        return bytes(data)


class HidLocator(DeviceLocator):
    """Finds I/O boards among the attached HID devices."""

    def __init__(self, vendor_id: int = IOBOARD_VENDOR_ID, product_id: int = IOBOARD_PRODUCT_ID):
        self._vendor_id = vendor_id
        self._product_id = product_id

    @override
    def find(self, bus: int = 0, device: int = 0) -> Optional[Transport]:
        found: Optional[DeviceInfo] = None
        for entry in hid.enumerate(self._vendor_id, self._product_id):
            info = device_info_from_entry(entry)
            if info.matches(bus, device):
                found = info
        if found is None:
            return None
        return HidTransport(found)
