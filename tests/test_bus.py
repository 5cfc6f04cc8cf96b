import socket
from unittest import mock

import pytest

from obccam.bus import CanBus, CanBusError
from obccam.protocol import CanFrame


class FakeSocket:
    def __init__(self, *args, bind_error=None, incoming=(), short_by=0):
        self.bound = None
        self.sent = []
        self.incoming = list(incoming)
        self.timeout = "unset"
        self.closed = 0
        self.bind_error = bind_error
        self.short_by = short_by

    def bind(self, addr):
        if self.bind_error:
            raise self.bind_error
        self.bound = addr

    def send(self, data):
        self.sent.append(data)
        return len(data) - self.short_by

    def settimeout(self, value):
        self.timeout = value

    def recv(self, size):
        if not self.incoming:
            raise socket.timeout()
        item = self.incoming.pop(0)
        if isinstance(item, Exception):
            raise item
        return item[:size]

    def close(self):
        self.closed += 1


def make_bus(fake):
    with mock.patch("socket.socket", return_value=fake):
        return CanBus("vcan0")


def test_binds_to_interface():
    fake = FakeSocket()
    make_bus(fake)
    assert fake.bound == ("vcan0",)


def test_send_writes_packed_frame():
    fake = FakeSocket()
    bus = make_bus(fake)
    frame = CanFrame(0x031, bytes(range(8)))
    bus.send(frame)
    assert fake.sent == [frame.pack()]


def test_short_write_raises():
    bus = make_bus(FakeSocket(short_by=1))
    with pytest.raises(CanBusError):
        bus.send(CanFrame(0x036, b"\x08"))


def test_recv_returns_frame_and_sets_timeout():
    frame = CanFrame(0x100, b"\x31\x01")
    fake = FakeSocket(incoming=[frame.pack()])
    bus = make_bus(fake)
    assert bus.recv(0.5) == frame
    assert fake.timeout == 0.5


def test_recv_timeout_gives_none():
    bus = make_bus(FakeSocket())
    assert bus.recv(0.1) is None


def test_recv_error_raises():
    bus = make_bus(FakeSocket(incoming=[OSError("down")]))
    with pytest.raises(CanBusError):
        bus.recv(None)


def test_recv_short_frame_raises():
    bus = make_bus(FakeSocket(incoming=[b"\x00\x01"]))
    with pytest.raises(CanBusError):
        bus.recv(None)


def test_bind_failure_closes_socket():
    fake = FakeSocket(bind_error=OSError("no such device"))
    with pytest.raises(CanBusError):
        make_bus(fake)
    assert fake.closed == 1


def test_socket_creation_failure():
    with mock.patch("socket.socket", side_effect=OSError("unsupported")):
        with pytest.raises(CanBusError):
            CanBus("vcan0")


def test_context_manager_closes_once():
    fake = FakeSocket()
    with make_bus(fake) as bus:
        assert bus.ifname == "vcan0"
    bus.close()
    assert fake.closed == 1


def test_error_is_oserror():
    with mock.patch("socket.socket", side_effect=OSError("x")):
        with pytest.raises(OSError):
            CanBus("vcan0")