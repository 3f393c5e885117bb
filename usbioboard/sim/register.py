"""Byte-wide register model for the simulated board.

The board's microcontroller exposes 8-bit special function registers. The
protocol only ever touches them one bit at a time, so every register here
offers bit-level access on top of plain byte storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from usbioboard.utils.consts import ConstUtils


class Register(ABC):
    """Base class for an 8-bit register with custom read/write behavior.

    For plain storage use SimpleRegister. Subclass and override read()/write()
    for registers whose value is driven from outside (like port inputs).
    """

    def __init__(self, address: int, reset_value: int = 0):
        """Initialize a register.

        Args:
            address: Register address as used on the wire
            reset_value: Value to return to on reset()
        """
        self.address = address
        self.reset_value = reset_value & ConstUtils.MASK_8_BITS
        self.value = self.reset_value

    @abstractmethod
    def read(self) -> int:
        """Return the byte value seen by the protocol."""
        ...

    @abstractmethod
    def write(self, val: int) -> None:
        """Store a byte written through the protocol."""
        ...

    def reset(self) -> None:
        self.value = self.reset_value

    def read_bit(self, bit: int) -> int:
        return (self.read() >> bit) & 1

    def write_bit(self, bit: int, level: int) -> None:
        mask = 1 << bit
        current = self.read()
        self.write((current | mask) if level else (current & ~mask))


class SimpleRegister(Register):
    """A register that is just storage (no side effects)."""

    def read(self) -> int:
        return self.value

    def write(self, val: int) -> None:
        self.value = val & ConstUtils.MASK_8_BITS


class InputPortRegister(Register):
    """PORTx register: reads reflect the levels driven onto the pins.

    Protocol writes are ignored; only drive() changes the value.
    """

    def read(self) -> int:
        return self.value

    def write(self, val: int) -> None:
        pass  # Input levels are set externally

    def drive(self, pin: int, level: int) -> None:
        mask = 1 << pin
        self.value = (self.value | mask) if level else (self.value & ~mask)


class RegisterFile:
    """Storage and dispatch for the board's registers, keyed by address."""

    def __init__(self):
        self._registers: dict[int, Register] = {}

    def add(self, reg: Register) -> None:
        """Add a register to this file.

        Raises:
            ValueError: If a register already exists at this address
        """
        if reg.address in self._registers:
            raise ValueError(f"Register at address 0x{reg.address:02X} already exists")
        self._registers[reg.address] = reg

    def read_bit(self, address: int, bit: int) -> int:
        """Read one bit. Unknown addresses read as zero."""
        reg = self._registers.get(address)
        if reg is None:
            return 0
        return reg.read_bit(bit)

    def write_bit(self, address: int, bit: int, level: int) -> None:
        """Write one bit. Writes to unknown addresses have no effect."""
        reg = self._registers.get(address)
        if reg is not None:
            reg.write_bit(bit, level)

    def reset(self) -> None:
        """Reset all registers."""
        for reg in self._registers.values():
            reg.reset()

    def get_register(self, address: int) -> Optional[Register]:
        """Return the register at address, or None."""
        return self._registers.get(address)
