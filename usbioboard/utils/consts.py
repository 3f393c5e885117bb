"""Constants for the USB I/O board register protocol."""

from enum import IntEnum


class ConstUtils:
    """Bitwise masks and protocol framing constants."""

    MASK_8_BITS = 0xFF
    """8-bit mask: 0xFF"""

    FRAME_SIZE = 14
    """Length of every request frame sent to the board."""

    FRAME_REGISTER_OFFSET = 10
    """Offset of the register byte; bytes 1..9 are reserved and stay zero."""

    RESPONSE_MAX_SIZE = 64
    """Maximum bytes requested per response read (one HID report)."""

    TRANSPORT_TIMEOUT = 0.1
    """Write and read timeout in seconds."""

    STOP_TIMEOUT = 30.0
    """Bound on waiting for an exporter (or the whole process) to stop."""


# USB identifiers of the board (Microchip generic HID)
IOBOARD_VENDOR_ID = 0x04D8
IOBOARD_PRODUCT_ID = 0x003F


class Command(IntEnum):
    """Opcodes carried in the first byte of a request frame."""

    SET_REG_BIT = 0x9A
    GET_REG_BIT = 0x9B


class RegisterBase(IntEnum):
    """Base addresses of per-port register blocks.

    The effective address is ``base + port index`` for the per-port kinds.
    INT_CON2 and WPU_B are single registers.
    """

    ANSEL = 0x5B
    TRIS = 0x92
    PORT = 0x80
    WPU_B = 0x85
    INT_CON2 = 0xF1


INT_CON2_RBPU_BIT = 7
"""RBPU bit in INTCON2; writing 0 enables port B weak pull-ups."""

PULL_UP_PORT = 1
"""Only port B (index 1) has weak pull-ups."""

PORT_COUNT = 5
PINS_PER_PORT = 8
INVALID_PORT = 0xFF


def register_address(kind: RegisterBase, port: int) -> int:
    """Return the register address of ``kind`` for the given port index."""
    return (int(kind) + port) & ConstUtils.MASK_8_BITS
