import pytest

from usbioboard.core.exceptions import ProtocolError, TransportError, TransportTimeoutError
from usbioboard.core.protocol import RegisterProtocol, decode_response, encode_frame
from usbioboard.interfaces.transport import DeviceInfo, Transport
from usbioboard.utils.consts import Command, RegisterBase


class RecordingTransport(Transport):
    """Records written frames and answers with canned responses."""

    def __init__(self, responses=None, write_error=None):
        self.frames = []
        self.timeouts = []
        self.read_sizes = []
        self.responses = list(responses or [])
        self.write_error = write_error

    @property
    def info(self):
        return DeviceInfo(bus=1, device=1)

    def open(self):
        pass

    def close(self):
        pass

    def write(self, data, timeout):
        if self.write_error is not None:
            raise self.write_error
        self.frames.append(bytes(data))
        self.timeouts.append(timeout)
        return len(data)

    def read(self, max_bytes, timeout):
        self.read_sizes.append(max_bytes)
        self.timeouts.append(timeout)
        if not self.responses:
            raise TransportTimeoutError(timeout)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_set_frame_layout():
    frame = encode_frame(Command.SET_REG_BIT, 0x93, 5, 1)
    assert frame == bytes([0x9A, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0x93, 5, 1, 0])


def test_get_frame_layout():
    frame = encode_frame(Command.GET_REG_BIT, 0x81, 3)
    assert frame == bytes([0x9B, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0x81, 3, 0, 0])


def test_decode_response_uses_second_byte():
    assert decode_response(bytes([0x9B, 0x01, 0xFF])) == 1
    assert decode_response(bytes([0x9B, 0x40])) == 0x40


@pytest.mark.parametrize("response", [b"", b"\x9b"])
def test_decode_short_response_is_invalid(response):
    with pytest.raises(ProtocolError, match="invalid data"):
        decode_response(response)


def test_set_reg_bit_exchange():
    transport = RecordingTransport(responses=[bytes([0x9A, 0x01])])
    protocol = RegisterProtocol(transport)

    assert protocol.set_reg_bit(RegisterBase.INT_CON2, 7, 0) == 1
    assert transport.frames == [encode_frame(Command.SET_REG_BIT, 0xF1, 7, 0)]
    assert transport.read_sizes == [64]
    assert transport.timeouts == [0.1, 0.1]


def test_get_reg_bit_returns_raw_byte():
    transport = RecordingTransport(responses=[bytes([0x9B, 0x20, 0x00])])
    protocol = RegisterProtocol(transport)

    assert protocol.get_reg_bit(0x80, 5) == 0x20


def test_timeout_is_surfaced_without_retry():
    transport = RecordingTransport(responses=[])
    protocol = RegisterProtocol(transport)

    with pytest.raises(TransportTimeoutError):
        protocol.get_reg_bit(0x80, 0)
    assert len(transport.frames) == 1


def test_write_error_skips_read():
    transport = RecordingTransport(write_error=TransportError("pipe broken"))
    protocol = RegisterProtocol(transport)

    with pytest.raises(TransportError, match="pipe broken"):
        protocol.set_reg_bit(0x5B, 0, 0)
    assert transport.read_sizes == []


def test_short_response_is_protocol_error():
    transport = RecordingTransport(responses=[b"\x9a"])
    protocol = RegisterProtocol(transport)

    with pytest.raises(ProtocolError):
        protocol.set_reg_bit(0x5B, 0, 0)


@pytest.mark.parametrize("value", [0, 1])
def test_set_then_get_round_trip_on_simulated_board(sim_transport, value):
    protocol = RegisterProtocol(sim_transport)

    assert protocol.set_reg_bit(0x92, 6, value) == value
    assert protocol.get_reg_bit(0x92, 6) == value
