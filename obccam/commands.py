"""Commands sent from the on-board computer to the camera, and their acknowledgements."""

from __future__ import annotations

from .protocol import (
    CMD_TMLIGNT_ID,
    CMD_TMTEMP_ID,
    CMDECHO_ID,
    CMDLEDPWR_ID,
    CMDPIC_ID,
    CMDRESET_ID,
    CMDRSV_ID,
    CMDTMLR_ID,
    CMDTMSR_ID,
    CMDVID_ID,
    AckResult,
    CanFrame,
    decode_ack,
    describe_ack,
)

ECHO_REQUEST = 0x08
REBOOT_REQUEST = 0x01


def _payload(data: bytes, length: int) -> bytes:
    data = bytes(data)
    if len(data) < length:
        raise ValueError(f"payload needs {length} bytes, got {len(data)}")
    return data[:length]


def _send(bus, can_id: int, data: bytes, label: str) -> CanFrame:
    frame = CanFrame(can_id, data)
    bus.send(frame)
    print(f"{label} 전송 완료 (ID=0x{can_id:03X})")
    return frame


def send_echo(bus) -> CanFrame:
    """Ask the camera for an echo reply."""
    frame = CanFrame(CMDECHO_ID, bytes([ECHO_REQUEST]))
    bus.send(frame)
    return frame


def send_camera_command(bus, data: bytes) -> CanFrame:
    """Send an eight-byte still-photo command."""
    return _send(bus, CMDPIC_ID, _payload(data, 8), "카메라 명령")


def send_video_command(bus, data: bytes) -> CanFrame:
    """Send an eight-byte video recording command."""
    return _send(bus, CMDVID_ID, _payload(data, 8), "영상 촬영 명령")


def send_reboot_command(bus) -> CanFrame:
    """Ask the camera computer to reboot."""
    frame = CanFrame(CMDRESET_ID, bytes([REBOOT_REQUEST]))
    bus.send(frame)
    print("명령 전송: 0x001")
    return frame


def send_rsv_utc(bus, data: bytes) -> CanFrame:
    """Schedule a capture at an absolute UTC time (seven payload bytes)."""
    return _send(bus, CMDRSV_ID, _payload(data, 7), "UTC 예약명령")


def send_rsv_rel(bus, data: bytes) -> CanFrame:
    """Schedule a capture after a relative delay (four payload bytes)."""
    return _send(bus, CMDRSV_ID, _payload(data, 4), "상대시간 예약명령")


def send_led_pwr(bus, data: bytes) -> CanFrame:
    """Set the LED power level (one payload byte)."""
    return _send(bus, CMDLEDPWR_ID, _payload(data, 1), "LEDPWR")


def send_tmlight(bus) -> CanFrame:
    """Request light telemetry."""
    return _send(bus, CMD_TMLIGNT_ID, b"\x00", "TMLIGHT")


def send_tmlr(bus) -> CanFrame:
    """Request the long telemetry report."""
    return _send(bus, CMDTMLR_ID, b"\x00", "TMLR")


def send_tmsr(bus) -> CanFrame:
    """Request the short telemetry report."""
    return _send(bus, CMDTMSR_ID, b"\x00", "TMSR")


def send_tmtemp(bus) -> CanFrame:
    """Request temperature telemetry."""
    return _send(bus, CMD_TMTEMP_ID, b"\x00", "TMLIGHT")


def receive_ack(bus) -> AckResult:
    """Block until an acknowledgement from the camera arrives and decode it."""
    while True:
        frame = bus.recv(None)
        if frame is None:
            continue
        result = decode_ack(frame)
        if result is not None:
            return result


def check_ack(bus) -> AckResult:
    """Wait for an acknowledgement and report it on standard output."""
    result = receive_ack(bus)
    print(describe_ack(result))
    return result