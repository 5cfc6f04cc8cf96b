"""Simple controller for a camera node: reboot, photo download and echo test."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from .bus import CanBus, CanBusError
from .protocol import END_OF_TRANSFER, CanFrame
from .transfer import Transfer

CMD_ID = 0x100
DATA_ID_BASE = 0x200
DATA_ID_END = 0x2FF
END_FRAME_ID = 0x2FF
ECHO_ID = 0x07
STATUS_ID = 0x300
OUTPUT_FILE = "received.jpg"

REBOOT_CODE = 0x05
PHOTO_CODE = 0x06
ECHO_CODE = 0x07

_STATUS_TEXT = {
    0x09: "사진 촬영 시작",
    0x10: "사진 촬영 완료",
    0x11: "이미지 전송 시작",
}


def send_command(bus, code: int) -> CanFrame:
    """Send a one-byte command to the camera node."""
    frame = CanFrame(CMD_ID, bytes([code]))
    bus.send(frame)
    print(f"명령 전송 완료 (0x{code:02X})")
    return frame


def format_status(frame: CanFrame) -> str | None:
    """Describe a status frame; None when it is too short to carry one."""
    if frame.dlc < 5:
        return None
    code = frame.data[0]
    timestamp = int.from_bytes(frame.data[1:5], "big")
    when = datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
    text = _STATUS_TEXT.get(code)
    if text is None:
        return f"[STATUS] 알 수 없는 상태 코드 (0x{code:02X}) ({when})"
    return f"[STATUS] {text} ({when})"


def _report_status(frame: CanFrame) -> None:
    status = format_status(frame)
    if status is not None:
        print(status)


def _is_data(frame: CanFrame) -> bool:
    return DATA_ID_BASE <= frame.can_id <= DATA_ID_END


def _is_end(frame: CanFrame) -> bool:
    return frame.can_id == END_FRAME_ID and frame.data == bytes([END_OF_TRANSFER])


def _is_echo(frame: CanFrame) -> bool:
    return frame.can_id == ECHO_ID and frame.data[:1] == bytes([ECHO_CODE])


def receive_image(bus, output: str | Path = OUTPUT_FILE) -> Transfer:
    """Collect image data frames until the end frame and write them to ``output``."""
    print("이미지 수신 대기 중...")
    chunks: list[bytes] = []
    started: float | None = None
    while True:
        frame = bus.recv(None)
        if frame is None:
            continue
        if frame.can_id == STATUS_ID:
            _report_status(frame)
            continue
        if started is None and _is_data(frame):
            started = time.monotonic()
        if _is_end(frame):
            print("전송 종료 프레임 수신")
            break
        if _is_data(frame):
            chunks.append(frame.data)

    elapsed = time.monotonic() - started if started is not None else 0.0
    data = b"".join(chunks)
    path = Path(output)
    path.write_bytes(data)
    print(f"이미지 저장 완료: {path} ({len(data)} bytes)")
    ms = elapsed * 1000.0
    print(f"총 수신 시간: {ms:.2f} ms ({ms / 1000.0:.2f} 초)")
    return Transfer(data, elapsed, path)


def echo_test(bus, timeout: float = 1.0) -> bool:
    """Ping the camera node; True when the expected echo comes back in time."""
    send_command(bus, ECHO_CODE)
    print("에코 응답 대기 중...")
    frame = bus.recv(timeout)
    if frame is None:
        print("에코 응답 없음 (타임아웃)")
        return False
    if _is_echo(frame):
        print(f"에코 응답 수신됨! (0x{frame.data[0]:02X})")
        return True
    print("에코 응답이 예상과 다름")
    return False


def reboot_with_echo_wait(bus, total_wait: int = 300) -> bool:
    """Request a reboot and wait, one second per step, for the echo that follows it."""
    send_command(bus, REBOOT_CODE)
    print(f"재부팅 명령 전송 완료. Echo 응답 대기 중 (최대 {total_wait}초)...")
    waited = 0
    while waited < total_wait:
        frame = bus.recv(1.0)
        if frame is not None:
            if _is_echo(frame):
                print("\n재부팅 후 Echo 응답 수신됨!\n 재부팅 성공")
                return True
            if frame.can_id == STATUS_ID:
                _report_status(frame)
                continue
        waited += 1
        if waited % 60 == 0:
            print(f"{waited // 60}분 경과")
        if waited % 5 == 0:
            print(".", end="", flush=True)
    print("\nEcho 응답 없음. 재부팅 실패 또는 통신 문제일 수 있음.")
    return False


def print_menu() -> None:
    """Show the controller's commands and the input prompt."""
    print("\n명령을 선택하세요:")
    print("5: Raspberry Pi Zero 재부팅 요청")
    print("6: 사진 촬영 및 수신")
    print("7: 에코 테스트 (ping)")
    print("0: 종료")
    print("입력 > ", end="", flush=True)


def _session(bus, read: Callable[[str], str] = input, *, output: str | Path = OUTPUT_FILE) -> int:
    """Run the controller menu until the user quits or input ends."""
    while True:
        print_menu()
        try:
            line = read("")
        except EOFError:
            return 0
        try:
            choice = int(line.strip())
        except ValueError:
            choice = None

        try:
            if choice == 0:
                print("종료합니다.")
                return 0
            if choice == 5:
                reboot_with_echo_wait(bus)
            elif choice == 6:
                send_command(bus, PHOTO_CODE)
                receive_image(bus, output)
            elif choice == 7:
                echo_test(bus)
            else:
                print("유효하지 않은 선택입니다.")
        except CanBusError as exc:
            print(f"CAN 통신 오류: {exc}", file=sys.stderr)
        except OSError as exc:
            print(f"fopen: {exc}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Open the CAN interface and run the controller menu."""
    parser = argparse.ArgumentParser(prog="obccam-controller", description="Camera node controller")
    parser.add_argument("-i", "--interface", default="can0", help="CAN interface name")
    parser.add_argument("-o", "--output", default=OUTPUT_FILE, help="file for the received image")
    args = parser.parse_args(argv)

    try:
        bus = CanBus(args.interface)
    except CanBusError as exc:
        print(exc, file=sys.stderr)
        return 1
    with bus:
        return _session(bus, output=args.output)


if __name__ == "__main__":
    sys.exit(main())