"""Receiving photo and video streams sent by the camera in CAN frames."""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .protocol import FROM_CAM_ID, PIC_DIR, STANDARD_ID_MASK, VID_DIR


@dataclass(frozen=True)
class Transfer:
    """A completed stream: the received bytes, how long it took and where it went."""

    data: bytes
    elapsed: float
    path: Path | None = None

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000.0


def collect_stream(bus, masked: bool = False) -> Transfer:
    """Gather camera data frames until the end-of-transfer frame.

    With ``masked`` the identifier is compared on its standard 11 bits only.
    """
    chunks: list[bytes] = []
    started: float | None = None
    while True:
        frame = bus.recv(None)
        if frame is None:
            continue
        can_id = frame.can_id & STANDARD_ID_MASK if masked else frame.can_id
        if can_id != FROM_CAM_ID:
            continue
        if started is None:
            started = time.monotonic()
        if frame.is_end_of_transfer:
            print("전송 종료 프레임 수신")
            break
        chunks.append(frame.data)
    return Transfer(b"".join(chunks), time.monotonic() - started)


def timestamped_name(prefix: str, suffix: str, when: datetime | None = None) -> str:
    """File name of the form ``<prefix>_YYYYmmdd_HHMMSS<suffix>``."""
    when = when or datetime.now()
    return f"{prefix}_{when:%Y%m%d_%H%M%S}{suffix}"


def _save(transfer: Transfer, path: Path, label: str) -> Transfer:
    path.write_bytes(transfer.data)
    print(f"{label} 저장 완료: {path} ({len(transfer.data)} bytes)")
    ms = transfer.elapsed_ms
    print(f"총 수신 시간: {ms:.2f} ms ({ms / 1000.0:.2f} 초)")
    return Transfer(transfer.data, transfer.elapsed, path)


def receive_image(bus, directory: str | Path = PIC_DIR) -> Transfer:
    """Receive a JPEG from the camera and store it under ``directory``."""
    print(f"이미지 수신 대기 중 (CAN ID 0x{FROM_CAM_ID:03X})...")
    path = Path(directory) / timestamped_name("received_photo", ".jpg")
    transfer = collect_stream(bus, masked=False)
    return _save(transfer, path, "이미지")


def receive_video(bus, fps: int, directory: str | Path = VID_DIR) -> Transfer:
    """Receive an H.264 stream, store it and wrap it into MP4.

    The returned path is the MP4 file when conversion succeeds, otherwise
    the raw H.264 file.
    """
    print(f"영상 수신 대기 중 (CAN ID 0x{FROM_CAM_ID:03X})...")
    path = Path(directory) / timestamped_name("received_video", ".h264")
    transfer = _save(collect_stream(bus, masked=True), path, "영상")
    mp4 = convert_to_mp4(path, fps)
    if mp4 is None:
        return transfer
    return Transfer(transfer.data, transfer.elapsed, mp4)


def convert_to_mp4(path: str | Path, fps: int) -> Path | None:
    """Remux a raw H.264 file into MP4 with ffmpeg; the source is removed on success."""
    source = Path(path)
    target = Path(f"{source}.mp4")
    print("MP4 변환 중...")
    command = ["ffmpeg", "-y", "-framerate", str(fps), "-i", str(source), "-c", "copy", str(target)]
    try:
        completed = subprocess.run(
            command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False
        )
        ok = completed.returncode == 0
    except OSError:
        ok = False
    if not ok:
        print("MP4 변환 실패 (ffmpeg 에러)")
        return None
    print(f"MP4 저장 완료: {target}")
    source.unlink(missing_ok=True)
    return target