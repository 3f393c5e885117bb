"""Pin topology rules for the board's five ports.

Pure functions, no device access. ``is_pin_allowed`` reflects what the
silicon accepts; ``is_pin_wired`` additionally excludes pins that exist on
the chip but are not broken out on the board.
"""

from __future__ import annotations

from usbioboard.utils.consts import INVALID_PORT, PINS_PER_PORT

# port index -> pins missing from the package
_DISALLOWED_PINS: dict[int, frozenset[int]] = {
    2: frozenset({3, 4, 5}),
    4: frozenset({4, 5, 6, 7}),
}

# port index -> pins present on the chip but not connected on the board
_UNWIRED_PINS: dict[int, frozenset[int]] = {
    2: frozenset({2}),
    3: frozenset({1, 2, 3}),
    4: frozenset({3}),
}


def port_index(name: str) -> int:
    """Map a port letter (A-E, any case) to its index, or INVALID_PORT."""
    if not isinstance(name, str) or len(name) != 1:
        return INVALID_PORT
    if "a" <= name <= "e":
        return ord(name) - ord("a")
    if "A" <= name <= "E":
        return ord(name) - ord("A")
    return INVALID_PORT


def is_valid_port(index: int) -> bool:
    return index != INVALID_PORT


def is_pin_allowed(port: int, pin: int) -> bool:
    """Return True if the chip has ``pin`` on ``port``."""
    if pin < 0 or pin >= PINS_PER_PORT:
        return False
    return pin not in _DISALLOWED_PINS.get(port, frozenset())


def is_pin_wired(port: int, pin: int) -> bool:
    """Return True if ``pin`` on ``port`` is allowed and broken out on the board."""
    if not is_pin_allowed(port, pin):
        return False
    return pin not in _UNWIRED_PINS.get(port, frozenset())
