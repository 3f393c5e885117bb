import logging

import pytest

from usbioboard.core.exceptions import ConfigurationError
from usbioboard.core.initializer import BoardInitializer
from usbioboard.core.protocol import RegisterProtocol
from usbioboard.sim import SimulatedTransport
from usbioboard.utils.config_loader import PinConfig
from usbioboard.utils.consts import Command, RegisterBase


class SinkRecorder:
    def __init__(self):
        self.created = []

    def __call__(self, cfg):
        self.created.append(cfg.name)
        return FakeSink()


class FakeSink:
    def __init__(self):
        self.values = []

    def set(self, value):
        self.values.append(value)


@pytest.fixture
def sinks():
    return SinkRecorder()


@pytest.fixture
def initializer(sim_transport, sinks):
    return BoardInitializer(RegisterProtocol(sim_transport), sinks)


def _writes(board):
    return [(c.register, c.bit, c.value) for c in board.writes()]


def test_digital_input_programming_order(initializer, sim_board):
    pins = initializer.initialize([PinConfig(name="in", port="d", pin=4)])

    assert _writes(sim_board) == [(0x5B + 3, 4, 0), (0x92 + 3, 4, 1)]
    assert sim_board.bit(0x5B + 3, 4) == 0
    assert sim_board.bit(0x92 + 3, 4) == 1
    assert pins[0].port == 3
    assert pins[0].pin == 4
    assert pins[0].value is None


def test_runtime_state_follows_declared_order(initializer, sinks):
    cfgs = [
        PinConfig(name="c", port="E", pin=0, revert=True),
        PinConfig(name="a", port="A", pin=7),
        PinConfig(name="b", port="b", pin=1),
    ]
    pins = initializer.initialize(cfgs)

    assert [p.name for p in pins] == ["c", "a", "b"]
    assert [p.port for p in pins] == [4, 0, 1]
    assert [p.revert for p in pins] == [True, False, False]
    assert sinks.created == ["c", "a", "b"]


def test_pull_up_enabled_once_before_pin_bits(initializer, sim_board):
    initializer.initialize(
        [
            PinConfig(name="p0", port="B", pin=0, pull_up=True),
            PinConfig(name="p5", port="B", pin=5, pull_up=True),
        ]
    )
    writes = _writes(sim_board)

    int_con2 = [i for i, w in enumerate(writes) if w[0] == RegisterBase.INT_CON2]
    wpu_b = [i for i, w in enumerate(writes) if w[0] == RegisterBase.WPU_B]
    assert len(int_con2) == 1
    assert writes[int_con2[0]] == (0xF1, 7, 0)
    assert len(wpu_b) == 2
    assert int_con2[0] < min(wpu_b)
    assert int_con2[0] == 0


def test_pull_up_written_before_ansel_and_tris(initializer, sim_board):
    initializer.initialize([PinConfig(name="p", port="B", pin=3, pull_up=True)])

    assert _writes(sim_board) == [
        (0xF1, 7, 0),
        (0x85, 1, 1),
        (0x5B + 1, 3, 0),
        (0x92 + 1, 3, 1),
    ]


def test_no_pull_up_means_no_global_enable(initializer, sim_board):
    initializer.initialize([PinConfig(name="p", port="B", pin=3)])

    assert all(c.register != RegisterBase.INT_CON2 for c in sim_board.commands)


@pytest.mark.parametrize("port", ["A", "C", "D", "E"])
def test_pull_up_on_other_port_fails_without_writes(initializer, sim_board, port):
    with pytest.raises(ConfigurationError) as excinfo:
        initializer.initialize([PinConfig(name="bad", port=port, pin=0, pull_up=True)])

    assert excinfo.value.config_key == "pull_up"
    assert excinfo.value.details["name"] == "bad"
    assert sim_board.commands == []


def test_pull_up_failure_keeps_earlier_pins_programmed(initializer, sim_board):
    with pytest.raises(ConfigurationError):
        initializer.initialize(
            [
                PinConfig(name="ok", port="A", pin=1),
                PinConfig(name="bad", port="C", pin=0, pull_up=True),
            ]
        )

    assert _writes(sim_board) == [(0x5B, 1, 0), (0x92, 1, 1)]


@pytest.mark.parametrize("port", ["F", "", "AB", "1"])
def test_invalid_port_letter(initializer, sim_board, port):
    with pytest.raises(ConfigurationError) as excinfo:
        initializer.initialize([PinConfig(name="x", port=port, pin=0)])

    assert excinfo.value.config_key == "port"
    assert sim_board.commands == []


@pytest.mark.parametrize("port, pin", [("C", 4), ("E", 5), ("A", 8), ("B", -1)])
def test_disallowed_pin(initializer, sim_board, port, pin):
    with pytest.raises(ConfigurationError) as excinfo:
        initializer.initialize([PinConfig(name="x", port=port, pin=pin)])

    assert excinfo.value.config_key == "pin"
    assert excinfo.value.details == {"name": "x", "port": port, "pin": pin}
    assert sim_board.commands == []


def test_unwired_pin_only_warns(initializer, sim_board, caplog):
    with caplog.at_level(logging.WARNING, logger="usbioboard.core.initializer"):
        pins = initializer.initialize([PinConfig(name="floating", port="C", pin=2)])

    assert len(pins) == 1
    assert "not wired" in caplog.text
    assert len(sim_board.writes()) == 2


def test_write_failure_is_configuration_error(initializer, sim_board):
    sim_board.short_response = True

    with pytest.raises(ConfigurationError) as excinfo:
        initializer.initialize([PinConfig(name="in", port="A", pin=0)])

    assert "setting port to digital" in str(excinfo.value)
    assert excinfo.value.details["register"] == "0x5B"
    # aborted after the first failed write
    assert len(sim_board.commands) == 1


def test_global_pull_up_failure_aborts(sim_board, sinks):
    sim_board.short_response = True
    initializer = BoardInitializer(RegisterProtocol(_open(sim_board)), sinks)

    with pytest.raises(ConfigurationError, match="allowing pull-up on port b"):
        initializer.initialize([PinConfig(name="p", port="B", pin=0, pull_up=True)])
    assert [c.command for c in sim_board.commands] == [Command.SET_REG_BIT]
    assert sinks.created == []


def _open(board):
    transport = SimulatedTransport(board)
    transport.open()
    return transport
