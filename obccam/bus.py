"""Raw SocketCAN access."""

from __future__ import annotations

import socket

from .protocol import FRAME_SIZE, CanFrame

_AF_CAN = getattr(socket, "AF_CAN", 29)
_CAN_RAW = getattr(socket, "CAN_RAW", 1)


class CanBusError(OSError):
    """Raised when the CAN socket cannot be opened, written or read."""


class CanBus:
    """A raw CAN socket bound to one interface."""

    def __init__(self, ifname: str) -> None:
        self.ifname = ifname
        try:
            self._sock = socket.socket(_AF_CAN, socket.SOCK_RAW, _CAN_RAW)
        except OSError as exc:
            raise CanBusError(f"socket: {exc}") from exc
        try:
            self._sock.bind((ifname,))
        except OSError as exc:
            self._sock.close()
            raise CanBusError(f"bind {ifname}: {exc}") from exc
        self._closed = False

    def send(self, frame: CanFrame) -> None:
        """Write one frame to the bus."""
        raw = frame.pack()
        try:
            written = self._sock.send(raw)
        except OSError as exc:
            raise CanBusError(f"write: {exc}") from exc
        if written != len(raw):
            raise CanBusError(f"short write: {written} of {len(raw)} bytes")

    def recv(self, timeout: float | None = None) -> CanFrame | None:
        """Read one frame; None if nothing arrives within the timeout."""
        self._sock.settimeout(timeout)
        try:
            raw = self._sock.recv(FRAME_SIZE)
        except socket.timeout:
            return None
        except OSError as exc:
            raise CanBusError(f"read: {exc}") from exc
        try:
            return CanFrame.unpack(raw)
        except ValueError as exc:
            raise CanBusError(str(exc)) from exc

    def close(self) -> None:
        if not self._closed:
            self._sock.close()
            self._closed = True

    def __enter__(self) -> "CanBus":
        return self

    def __exit__(self, *args) -> None:
        self.close()