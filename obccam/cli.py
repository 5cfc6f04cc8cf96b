"""Interactive console for sending camera commands from the on-board computer."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable

from .bus import CanBus, CanBusError
from .commands import check_ack, receive_ack, send_camera_command, send_echo, send_video_command
from .protocol import PIC_DIR, VID_DIR, build_camera_command, build_video_command
from .transfer import receive_image, receive_video

Reader = Callable[[str], str]


def print_menu() -> None:
    """Show the list of commands and the input prompt."""
    print("\n명령을 선택하세요:")
    print("1: CMDHEL(카메라 설정 명령)")
    print("2: CMDPIC(카메라 사진 촬영 및 전송 명령)")
    print("3: CMDVID(카메라 비디오 촬영 및 전송 명령)")
    print("4: CMDRESET(제로 재부팅 명령)")
    print("5: CMDECHO(카메라 에코)")
    print("입력 > ", end="", flush=True)


def _read_int(read: Reader, prompt: str) -> int:
    return int(read(prompt).strip())


def _take_photo(bus, read: Reader, pic_dir: str | Path) -> None:
    print("사진 촬영 파라미터를 입력하세요.")
    delay = _read_int(read, "딜레이 시간 [s]: ")
    shutter = _read_int(read, "셔터 속도 [ms] (recommended: 5000): ")
    resolution = _read_int(read, "해상도 (0:1080p, 1:XGA, 2:WXGA, 3:720p, 4:초저화질): ")
    mode = _read_int(read, "노출 모드 (0:normal, 1:sport, 2:long): ")
    ev = _read_int(read, "노출 보정값 (-8 ~ +8): ")

    payload = build_camera_command(delay, shutter, resolution, mode, ev)
    send_camera_command(bus, payload)
    check_ack(bus)
    receive_image(bus, pic_dir)
    check_ack(bus)


def _record_video(bus, read: Reader, vid_dir: str | Path) -> None:
    print("영상 촬영 파라미터를 입력하세요.")
    delay_ms = _read_int(read, "촬영 시간 [ms] (recommended: 5000): ")
    fps = _read_int(read, "Frames Per Second(FPS) (recommended: 30): ")

    payload = build_video_command(delay_ms, fps)
    send_video_command(bus, payload)
    receive_video(bus, fps, vid_dir)


def _echo(bus) -> None:
    send_echo(bus)
    receive_ack(bus)
    check_ack(bus)


def _session(
    bus,
    read: Reader = input,
    *,
    pic_dir: str | Path = PIC_DIR,
    vid_dir: str | Path = VID_DIR,
) -> int:
    """Run the menu loop until the user quits or input ends."""
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
            if choice == 2:
                _take_photo(bus, read, pic_dir)
            elif choice == 3:
                _record_video(bus, read, vid_dir)
            elif choice == 5:
                _echo(bus)
            elif choice == 6:
                pass
            else:
                print("유효하지 않은 선택입니다.")
        except EOFError:
            return 0
        except ValueError as exc:
            print(f"잘못된 입력입니다: {exc}")
        except CanBusError as exc:
            print(f"CAN 통신 오류: {exc}", file=sys.stderr)
        except OSError as exc:
            print(f"파일 저장 실패: {exc}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Open the CAN interface and run the command console."""
    parser = argparse.ArgumentParser(prog="obccam", description="Camera command console")
    parser.add_argument("-i", "--interface", default="can0", help="CAN interface name")
    parser.add_argument("--pic-dir", default=PIC_DIR, help="directory for received photos")
    parser.add_argument("--vid-dir", default=VID_DIR, help="directory for received videos")
    args = parser.parse_args(argv)

    try:
        bus = CanBus(args.interface)
    except CanBusError as exc:
        print(exc, file=sys.stderr)
        return 1
    with bus:
        return _session(bus, pic_dir=args.pic_dir, vid_dir=args.vid_dir)


if __name__ == "__main__":
    sys.exit(main())