"""Register protocol driver.

The board exposes its microcontroller registers one bit at a time through
two commands. Every request is a fixed 14-byte frame::

    byte 0      opcode (SET_REG_BIT / GET_REG_BIT)
    bytes 1-9   reserved, zero
    byte 10     register address
    byte 11     bit index
    byte 12     value to write (set only, zero otherwise)
    byte 13     zero

The board answers with one HID report; byte 1 carries the result. The
driver keeps no state and performs no retries.
"""

from __future__ import annotations

from usbioboard.core.exceptions import ProtocolError
from usbioboard.interfaces.transport import Transport
from usbioboard.utils.consts import Command, ConstUtils


def encode_frame(command: Command, register: int, bit: int, value: int = 0) -> bytes:
    """Build a request frame for ``command``."""
    frame = bytearray(ConstUtils.FRAME_SIZE)
    frame[0] = int(command)
    offset = ConstUtils.FRAME_REGISTER_OFFSET
    frame[offset] = register & ConstUtils.MASK_8_BITS
    frame[offset + 1] = bit & ConstUtils.MASK_8_BITS
    frame[offset + 2] = value & ConstUtils.MASK_8_BITS
    return bytes(frame)


def decode_response(response: bytes) -> int:
    """Return the result byte of a response frame."""
    if len(response) < 2:
        raise ProtocolError("invalid data", details={"length": len(response)})
    return response[1]


class RegisterProtocol:
    """Bit-level register access over an already open transport."""

    def __init__(self, transport: Transport, timeout: float = ConstUtils.TRANSPORT_TIMEOUT):
        self._transport = transport
        self._timeout = timeout

    @property
    def transport(self) -> Transport:
        return self._transport

    def set_reg_bit(self, register: int, bit: int, value: int) -> int:
        """Write one register bit and return the byte echoed by the board."""
        return self._exchange(encode_frame(Command.SET_REG_BIT, register, bit, value))

    def get_reg_bit(self, register: int, bit: int) -> int:
        """Read one register bit. The raw byte is returned unnormalized."""
        return self._exchange(encode_frame(Command.GET_REG_BIT, register, bit))

    def _exchange(self, frame: bytes) -> int:
        self._transport.write(frame, self._timeout)
        response = self._transport.read(ConstUtils.RESPONSE_MAX_SIZE, self._timeout)
        return decode_response(response)
