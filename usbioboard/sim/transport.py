"""Transport and locator backed by SimulatedBoard instances."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

from overrides import override  # type: ignore

from usbioboard.core.exceptions import TransportError, TransportTimeoutError
from usbioboard.interfaces.transport import DeviceInfo, DeviceLocator, Transport
from usbioboard.sim.board import SimulatedBoard


class SimulatedTransport(Transport):
    """Delivers frames to a SimulatedBoard and queues its answers."""

    def __init__(self, board: SimulatedBoard):
        self._board = board
        self._responses: deque[Optional[bytes]] = deque()
        self.is_open = False
        self.close_count = 0

    @property
    def board(self) -> SimulatedBoard:
        return self._board

    @property
    @override
    def info(self) -> DeviceInfo:
        return self._board.info

    @override
    def open(self) -> None:
        if self._board.open_error is not None:
            raise TransportError(self._board.open_error)
        self.is_open = True

    @override
    def close(self) -> None:
        self.is_open = False
        self._responses.clear()
        self.close_count += 1

    @override
    def write(self, data: bytes, timeout: float) -> int:
        if not self.is_open:
            raise TransportError("device not open")
        self._responses.append(self._board.handle(bytes(data)))
        return len(data)

    @override
    def read(self, max_bytes: int, timeout: float) -> bytes:
        if not self.is_open:
            raise TransportError("device not open")
        response = self._responses.popleft() if self._responses else None
        if response is None:
            raise TransportTimeoutError(timeout)
        return response[:max_bytes]


class SimulatedLocator(DeviceLocator):
    """Finds simulated boards by bus/device selector."""

    def __init__(self, boards: Iterable[SimulatedBoard] = ()):
        self._boards = list(boards)
        self.transports: list[SimulatedTransport] = []

    def add(self, board: SimulatedBoard) -> None:
        self._boards.append(board)

    @override
    def find(self, bus: int = 0, device: int = 0) -> Optional[Transport]:
        found: Optional[SimulatedBoard] = None
        # the last matching board wins, like USB enumeration order
        for board in self._boards:
            if board.info.matches(bus, device):
                found = board
        if found is None:
            return None
        transport = SimulatedTransport(found)
        self.transports.append(transport)
        return transport
