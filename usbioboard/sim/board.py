"""Simulated I/O board.

Decodes request frames exactly as the firmware does and answers with
``[opcode, result]`` padded to one report. A set answers with the written
bit, a get with the current bit value.

Fault injection hooks let tests and demos exercise the error paths:
``fail_reads`` makes a register bit time out, ``short_response`` truncates
every answer to one byte, ``open_error`` makes the device refuse to open.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from usbioboard.interfaces.transport import DeviceInfo
from usbioboard.sim.register import InputPortRegister, RegisterFile, SimpleRegister
from usbioboard.utils.consts import (
    PORT_COUNT,
    Command,
    ConstUtils,
    RegisterBase,
    register_address,
)


@dataclass(frozen=True)
class HandledCommand:
    """One decoded request, in arrival order."""

    command: Command
    register: int
    bit: int
    value: int


class SimulatedBoard:
    """Register-level model of the USB I/O board."""

    def __init__(self, bus: int = 1, device: int = 1, serial: str = "SIM"):
        self.info = DeviceInfo(bus=bus, device=device, path=f"sim:{bus}:{device}".encode(), serial=serial)
        self.commands: list[HandledCommand] = []
        self.short_response = False
        self.open_error: Optional[str] = None

        self._lock = threading.Lock()
        self._failing_reads: set[tuple[int, int]] = set()
        self._registers = RegisterFile()
        self._ports: list[InputPortRegister] = []
        self._build_registers()

    def _build_registers(self) -> None:
        # Reset state of the chip: all pins analog inputs, port B pull-ups off
        for port in range(PORT_COUNT):
            self._registers.add(SimpleRegister(register_address(RegisterBase.ANSEL, port), reset_value=0xFF))
            self._registers.add(SimpleRegister(register_address(RegisterBase.TRIS, port), reset_value=0xFF))
            port_reg = InputPortRegister(register_address(RegisterBase.PORT, port))
            self._registers.add(port_reg)
            self._ports.append(port_reg)
        self._registers.add(SimpleRegister(int(RegisterBase.WPU_B), reset_value=0x00))
        self._registers.add(SimpleRegister(int(RegisterBase.INT_CON2), reset_value=0xFF))

    # Test/demo controls ---------------------------------------------------

    def set_input(self, port: int, pin: int, level: int) -> None:
        """Drive an input pin high (1) or low (0)."""
        with self._lock:
            self._ports[port].drive(pin, level)

    def fail_reads(self, register: int, bit: int) -> None:
        """Make every get of ``register``/``bit`` go unanswered."""
        with self._lock:
            self._failing_reads.add((register, bit))

    def clear_faults(self) -> None:
        with self._lock:
            self._failing_reads.clear()
            self.short_response = False

    def bit(self, register: int, bit: int) -> int:
        """Current value of a register bit."""
        with self._lock:
            return self._registers.read_bit(register, bit)

    def writes(self) -> list[HandledCommand]:
        """All handled set commands, in order."""
        with self._lock:
            return [c for c in self.commands if c.command is Command.SET_REG_BIT]

    def reset(self) -> None:
        with self._lock:
            self._registers.reset()
            self.commands.clear()

    # Frame handling -------------------------------------------------------

    def handle(self, frame: bytes) -> Optional[bytes]:
        """Process one request frame.

        Returns:
            The response report, or None when the board stays silent.
        """
        if len(frame) != ConstUtils.FRAME_SIZE:
            return None
        try:
            command = Command(frame[0])
        except ValueError:
            return None

        offset = ConstUtils.FRAME_REGISTER_OFFSET
        register, bit, value = frame[offset], frame[offset + 1], frame[offset + 2]

        with self._lock:
            self.commands.append(HandledCommand(command, register, bit, value))
            if command is Command.SET_REG_BIT:
                self._registers.write_bit(register, bit, value)
                result = 1 if value else 0
            else:
                if (register, bit) in self._failing_reads:
                    return None
                result = self._registers.read_bit(register, bit)
            short = self.short_response

        if short:
            return bytes([int(command)])
        response = bytearray(ConstUtils.RESPONSE_MAX_SIZE)
        response[0] = int(command)
        response[1] = result
        return bytes(response)
