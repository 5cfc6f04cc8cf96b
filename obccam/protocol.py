"""CAN identifiers, frame layout and command payloads for the camera link."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

FROM_CAM_ID = 0x100

CMDPIC_ID = 0x031
CMDVID_ID = 0x033
CMDRESET_ID = 0x034
CMDECHO_ID = 0x036
CMDTMSR_ID = 0x037
CMDTMLR_ID = 0x038
CMDRSV_ID = 0x039
CMDLEDPWR_ID = 0x050
CMD_TMLIGNT_ID = 0x051
CMD_TMTEMP_ID = 0x052

STANDARD_ID_MASK = 0x7FF
END_OF_TRANSFER = 0xFF

PIC_DIR = "/home/doteam/Desktop/Camera_team/received_pics"
VID_DIR = "/home/doteam/Desktop/Camera_team/received_vids"

MAX_DLC = 8

# struct can_frame: u32 can_id, u8 can_dlc, 3 bytes padding, u8 data[8]
_FRAME_FORMAT = struct.Struct("=IB3x8s")
FRAME_SIZE = _FRAME_FORMAT.size


@dataclass(frozen=True)
class CanFrame:
    """A classic CAN frame: an identifier and up to eight data bytes."""

    can_id: int
    data: bytes = b""

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) > MAX_DLC:
            raise ValueError(f"CAN frame carries at most {MAX_DLC} bytes, got {len(data)}")
        if not 0 <= self.can_id <= 0xFFFFFFFF:
            raise ValueError(f"CAN id out of range: {self.can_id:#x}")
        object.__setattr__(self, "data", data)

    @property
    def dlc(self) -> int:
        return len(self.data)

    def pack(self) -> bytes:
        """Encode the frame in the kernel's raw socket layout."""
        return _FRAME_FORMAT.pack(self.can_id, self.dlc, self.data.ljust(MAX_DLC, b"\x00"))

    @classmethod
    def unpack(cls, raw: bytes) -> "CanFrame":
        """Decode a frame read from a raw CAN socket."""
        if len(raw) < FRAME_SIZE:
            raise ValueError(f"short CAN frame: {len(raw)} of {FRAME_SIZE} bytes")
        can_id, dlc, payload = _FRAME_FORMAT.unpack(bytes(raw[:FRAME_SIZE]))
        if dlc > MAX_DLC:
            raise ValueError(f"invalid CAN dlc: {dlc}")
        return cls(can_id, payload[:dlc])

    @property
    def is_end_of_transfer(self) -> bool:
        return self.data == bytes([END_OF_TRANSFER])


class AckResult(enum.IntEnum):
    """Outcome reported by the camera for a command."""

    UNKNOWN = 0
    ACK = 1
    NACK_BAD_COMMAND = 2
    NACK_CAPTURE_FAILED = 3
    NACK_FILE_OPEN = 4
    ECHO = 0x87


_ALLOWED_STATUSES = {
    CMDPIC_ID: {1, 2, 3, 4},
    CMDVID_ID: {1, 2},
    CMDRESET_ID: {1, 2},
    CMDECHO_ID: {1, 2},
}


def decode_ack(frame: CanFrame) -> AckResult | None:
    """Interpret a frame as an acknowledgement.

    Returns None for frames that are not acknowledgements from the camera
    and should be skipped.
    """
    if (frame.can_id & STANDARD_ID_MASK) != FROM_CAM_ID:
        return None
    if frame.dlc != 2:
        return None
    command, status = frame.data
    if status in _ALLOWED_STATUSES.get(command, ()):
        return AckResult(status)
    return AckResult.UNKNOWN


_RECOVERY = "Recovery Mode로 진입합니다..."

_DESCRIPTIONS = {
    AckResult.ACK: ["ACK(0x01) 수신됨. 정상입니다."],
    AckResult.NACK_BAD_COMMAND: ["NACK(0x02) 수신됨: 잘못된 명령이 전달되었습니다.", _RECOVERY],
    AckResult.NACK_CAPTURE_FAILED: ["NACK(0x03) 수신됨: 사진 촬영에 실패하였습니다.", _RECOVERY],
    AckResult.NACK_FILE_OPEN: ["NACK(0x04) 수신됨: 파일 열기에 실패하였습니다.", _RECOVERY],
    AckResult.ECHO: ["에코 응답 수신됨 (0x87)."],
}


def describe_ack(result: int) -> str:
    """Human-readable report for an acknowledgement code."""
    code = int(result)
    try:
        lines = _DESCRIPTIONS[AckResult(code)]
    except (ValueError, KeyError):
        lines = [f"알 수 없는 응답 수신됨: 0x{code:02X}"]
    return "\n".join(lines)


_CAMERA_COMMAND = struct.Struct(">BIBBb")
_VIDEO_COMMAND = struct.Struct(">IB3x")


def build_camera_command(
    delay_sec: int,
    shutter_us: int,
    resolution: int,
    exposure_mode: int,
    exposure_value: int,
) -> bytes:
    """Eight-byte payload for a still-photo command."""
    try:
        return _CAMERA_COMMAND.pack(delay_sec, shutter_us, resolution, exposure_mode, exposure_value)
    except struct.error as exc:
        raise ValueError(f"camera command parameter out of range: {exc}") from exc


def build_video_command(delay_ms: int, fps: int) -> bytes:
    """Eight-byte payload for a video recording command."""
    try:
        return _VIDEO_COMMAND.pack(delay_ms, fps)
    except struct.error as exc:
        raise ValueError(f"video command parameter out of range: {exc}") from exc