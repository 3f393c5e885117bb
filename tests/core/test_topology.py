import pytest

from usbioboard.core.topology import is_pin_allowed, is_pin_wired, is_valid_port, port_index
from usbioboard.utils.consts import INVALID_PORT


@pytest.mark.parametrize(
    "letter, expected",
    [("A", 0), ("B", 1), ("C", 2), ("D", 3), ("E", 4), ("a", 0), ("b", 1), ("c", 2), ("d", 3), ("e", 4)],
)
def test_port_index_of_valid_letters(letter, expected):
    assert port_index(letter) == expected
    assert is_valid_port(port_index(letter))


@pytest.mark.parametrize("name", ["", "F", "f", "Z", "AB", "a ", "1", "@", "`", "é"])
def test_port_index_rejects_everything_else(name):
    assert port_index(name) == INVALID_PORT
    assert not is_valid_port(port_index(name))


@pytest.mark.parametrize("port", [0, 1, 2, 3, 4, INVALID_PORT])
@pytest.mark.parametrize("pin", [-1, 8, 9, 255])
def test_pins_outside_byte_never_allowed(port, pin):
    assert not is_pin_allowed(port, pin)
    assert not is_pin_wired(port, pin)


def test_port_c_gap():
    assert not is_pin_allowed(2, 3)
    assert not is_pin_allowed(2, 4)
    assert not is_pin_allowed(2, 5)
    assert is_pin_allowed(2, 2)
    assert is_pin_allowed(2, 6)


def test_port_e_has_four_pins():
    for pin in range(4, 8):
        assert not is_pin_allowed(4, pin)
    assert is_pin_allowed(4, 3)


def test_allowed_but_unwired_pins():
    assert is_pin_allowed(2, 2)
    assert not is_pin_wired(2, 2)

    assert not is_pin_wired(3, 1)
    assert not is_pin_wired(3, 2)
    assert not is_pin_wired(3, 3)
    assert is_pin_wired(3, 0)
    assert is_pin_wired(3, 4)

    assert is_pin_allowed(4, 3)
    assert not is_pin_wired(4, 3)


def test_ports_a_and_b_fully_wired():
    for port in (0, 1):
        for pin in range(8):
            assert is_pin_allowed(port, pin)
            assert is_pin_wired(port, pin)


def test_wired_implies_allowed():
    for port in list(range(6)) + [INVALID_PORT]:
        for pin in range(-2, 10):
            if is_pin_wired(port, pin):
                assert is_pin_allowed(port, pin)
