from datetime import datetime
from pathlib import Path
from unittest import mock

import pytest

from obccam.protocol import FROM_CAM_ID, CanFrame
from obccam.transfer import (
    Transfer,
    collect_stream,
    convert_to_mp4,
    receive_image,
    receive_video,
    timestamped_name,
)


class _Exhausted(Exception):
    pass


class FakeBus:
    def __init__(self, incoming=()):
        self.incoming = list(incoming)

    def send(self, frame):
        pass

    def recv(self, timeout=None):
        if not self.incoming:
            raise _Exhausted()
        return self.incoming.pop(0)


END = CanFrame(FROM_CAM_ID, b"\xff")


def _stream(chunks, can_id=FROM_CAM_ID):
    return [CanFrame(can_id, c) for c in chunks] + [CanFrame(can_id, b"\xff")]


def test_collect_stream_concatenates():
    chunks = [bytes(range(8)), b"\xaa\xbb", b"\x01\x02\x03"]
    transfer = collect_stream(FakeBus(_stream(chunks)))
    assert transfer.data == b"".join(chunks)
    assert transfer.elapsed >= 0


def test_collect_stream_ignores_other_ids():
    frames = [CanFrame(0x200, b"\x11"), None, CanFrame(FROM_CAM_ID, b"\x22"), END]
    assert collect_stream(FakeBus(frames)).data == b"\x22"


def test_ff_in_longer_frame_is_data():
    frames = [CanFrame(FROM_CAM_ID, b"\xff\xff"), END]
    assert collect_stream(FakeBus(frames)).data == b"\xff\xff"


def test_masked_accepts_high_bits():
    extended = FROM_CAM_ID | 0x800
    frames = _stream([b"\x05\x06"], can_id=extended)
    assert collect_stream(FakeBus(frames), masked=True).data == b"\x05\x06"


def test_unmasked_requires_exact_id():
    extended = FROM_CAM_ID | 0x800
    frames = _stream([b"\x05"], can_id=extended)
    with pytest.raises(_Exhausted):
        collect_stream(FakeBus(frames), masked=False)


def test_empty_stream():
    transfer = collect_stream(FakeBus([END]))
    assert transfer.data == b""


def test_transfer_elapsed_ms():
    assert Transfer(b"", 1.5).elapsed_ms == pytest.approx(1500.0)


def test_timestamped_name_format():
    when = datetime(2024, 1, 2, 3, 4, 5)
    assert timestamped_name("received_photo", ".jpg", when) == "received_photo_20240102_030405.jpg"


def test_timestamped_name_defaults_to_now():
    name = timestamped_name("received_video", ".h264")
    assert name.startswith("received_video_")
    assert name.endswith(".h264")


def test_receive_image_writes_file(tmp_path, capsys):
    chunks = [bytes(range(8)), b"\x10\x20"]
    transfer = receive_image(FakeBus(_stream(chunks)), tmp_path)
    assert transfer.path.parent == tmp_path
    assert transfer.path.suffix == ".jpg"
    assert transfer.path.read_bytes() == b"".join(chunks)
    assert str(transfer.path) in capsys.readouterr().out


def test_receive_image_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        receive_image(FakeBus(_stream([b"\x01"])), tmp_path / "absent")


def test_convert_to_mp4_success(tmp_path):
    source = tmp_path / "clip.h264"
    source.write_bytes(b"\x00\x01")
    with mock.patch("subprocess.run") as run:
        run.return_value.returncode = 0
        target = convert_to_mp4(source, 30)
    assert target == Path(f"{source}.mp4")
    assert not source.exists()
    args = run.call_args[0][0]
    assert args[0] == "ffmpeg"
    assert args[args.index("-framerate") + 1] == "30"
    assert args[args.index("-i") + 1] == str(source)
    assert args[-1] == str(target)


def test_convert_to_mp4_failure_keeps_source(tmp_path, capsys):
    source = tmp_path / "clip.h264"
    source.write_bytes(b"\x00")
    with mock.patch("subprocess.run") as run:
        run.return_value.returncode = 1
        assert convert_to_mp4(source, 25) is None
    assert source.exists()
    assert "MP4 변환 실패" in capsys.readouterr().out


def test_convert_to_mp4_without_ffmpeg(tmp_path):
    source = tmp_path / "clip.h264"
    source.write_bytes(b"\x00")
    with mock.patch("subprocess.run", side_effect=FileNotFoundError):
        assert convert_to_mp4(source, 25) is None
    assert source.exists()


def test_receive_video_converts(tmp_path):
    chunks = [b"\x00\x00\x00\x01", b"\x67"]
    frames = _stream(chunks, can_id=FROM_CAM_ID | 0x800)
    with mock.patch("subprocess.run") as run:
        run.return_value.returncode = 0
        transfer = receive_video(FakeBus(frames), 30, tmp_path)
    assert transfer.data == b"".join(chunks)
    assert transfer.path.name.endswith(".h264.mp4")
    assert not list(tmp_path.glob("*.h264"))


def test_receive_video_keeps_raw_on_failure(tmp_path):
    chunks = [b"\x00\x00\x00\x01"]
    with mock.patch("subprocess.run") as run:
        run.return_value.returncode = 1
        transfer = receive_video(FakeBus(_stream(chunks)), 30, tmp_path)
    assert transfer.path.suffix == ".h264"
    assert transfer.path.read_bytes() == b"".join(chunks)