# obccam

obccam runs on the on-board computer and talks to a camera unit over a
Linux SocketCAN interface. It sends camera and telemetry commands, reads
the acknowledgements that come back, and rebuilds the photos and videos
that the camera streams back one frame at a time.

## Requirements

- Linux with SocketCAN, and a CAN interface that is configured and up
- Python 3.10 or later
- `ffmpeg` on `PATH` if you want recorded video remuxed into MP4

## Installation

```
pip install .
```

## Commands

### `obccam`

This is the interactive on-board console. It opens a raw CAN socket on the
interface given by `-i/--interface` (default `can0`) and shows a menu. The
menu accepts these choices:

- `2`: take a photo. The console asks for the delay in seconds, the shutter
  speed, the resolution, the exposure mode and the exposure compensation.
  It sends the command and reports the acknowledgement. It then receives the
  image and writes it as `received_photo_YYYYMMDD_HHMMSS.jpg` into
  `--pic-dir`. Finally it reports a second acknowledgement.
- `3`: record a video. The console asks for the duration in milliseconds and
  the frame rate. It writes the H.264 stream as
  `received_video_YYYYMMDD_HHMMSS.h264` into `--vid-dir`, then runs ffmpeg
  to produce `<file>.h264.mp4`. If that succeeds, the raw file is deleted.
- `5`: send an echo request and report the acknowledgement.
- `0`: quit. End of input also quits.

The menu also lists entries 1 and 4. Choosing either one, or any other
number, prints "유효하지 않은 선택입니다." Choosing 6 does nothing.

The default picture and video directories are the fixed paths `PIC_DIR` and
`VID_DIR` in `obccam.protocol`. Pass `--pic-dir` and `--vid-dir` to use other
directories. The directories must already exist. If a file cannot be written,
the console reports the error and shows the menu again.

### `obccam-controller`

This is a standalone controller for a camera node that uses a different
numbering: commands go out on ID `0x100`, data arrives on `0x200`–`0x2FF`,
and status reports arrive on `0x300`.

- `5`: ask the node to reboot, then wait up to 300 seconds for its echo.
  Status frames that arrive while waiting are printed.
- `6`: take a photo and write it to `-o/--output` (default `received.jpg`).
- `7`: send an echo ping and wait one second for the answer.
- `0`: quit.

Both commands take `-i/--interface` to choose the CAN interface.

## Library use

```python
from obccam.bus import CanBus
from obccam.protocol import build_camera_command
from obccam.commands import send_camera_command, check_ack
from obccam.transfer import receive_image

with CanBus("can0") as bus:
    payload = build_camera_command(0, 5000, 0, 0, 0)
    send_camera_command(bus, payload)
    check_ack(bus)
    receive_image(bus, "pics")
```

- `obccam.protocol` defines the CAN identifiers, `CanFrame` (with
  `pack`/`unpack` in the kernel's raw frame layout), the acknowledgement
  helpers `decode_ack`, `AckResult` and `describe_ack`, and the payload
  builders `build_camera_command` and `build_video_command`. It does not need
  a CAN interface.
- `obccam.bus.CanBus` is a raw SocketCAN socket with `send`, `recv(timeout)`
  and `close`. It can be used as a context manager. If the socket cannot be
  opened, read or written, it raises `CanBusError`.
- `obccam.commands` sends the individual commands: `send_echo`,
  `send_camera_command`, `send_video_command`, `send_reboot_command`,
  `send_rsv_utc`, `send_rsv_rel`, `send_led_pwr`, `send_tmlight`, `send_tmlr`,
  `send_tmsr` and `send_tmtemp`. It also has `receive_ack` and `check_ack`.
- `obccam.transfer` contains `collect_stream`, `receive_image`,
  `receive_video`, `convert_to_mp4` and `timestamped_name`. The receive
  functions return a `Transfer` that holds the data, the elapsed time and
  the path written.
- `obccam.controller` exposes the controller's functions: `send_command`,
  `format_status`, `receive_image`, `echo_test` and `reboot_with_echo_wait`.

## What it does not do

- The console has no menu entries for reboot, scheduled capture, LED power or
  telemetry requests. You can reach these only through `obccam.commands`.
- The package only sends telemetry requests. It does not decode any
  telemetry replies.
- `receive_ack`, `check_ack`, `collect_stream` and the receive functions have
  no timeout. They block until the expected frame arrives.

## Running the tests

```
pip install .[test]
pytest
```