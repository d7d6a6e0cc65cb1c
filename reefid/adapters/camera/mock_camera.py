"""Mock camera: serves synthetic frames, optionally refusing some facing modes."""
import os
import numpy as np
from reefid.adapters.camera.base import CaptureDevice, Stream, Track
from reefid.orchestrator.contracts import FacingMode
from reefid.orchestrator.errors import CapturePermissionError

# Small frames keep mock inference cheap; the ideal size is only a hint
_FRAME_SHAPE = (192, 108, 3)


class MockTrack(Track):
    def __init__(self):
        self.stopped = False
        self.stop_calls = 0

    def stop(self) -> None:
        self.stop_calls += 1
        self.stopped = True

    @property
    def live(self) -> bool:
        return not self.stopped


class MockStream(Stream):
    def __init__(self, facing_mode: FacingMode):
        self.facing_mode = facing_mode
        self.track = MockTrack()
        self._frames = 0

    def get_tracks(self) -> list[Track]:
        return [self.track]

    def read_frame(self):
        if not self.track.live:
            return None
        self._frames += 1
        # Rear camera frames are brighter so the two modes are easy to tell apart
        base = 160 if self.facing_mode is FacingMode.ENVIRONMENT else 80
        return np.full(_FRAME_SHAPE, (base + self._frames) % 256, dtype=np.uint8)


class MockCamera(CaptureDevice):
    def __init__(self, status_store, deny: set | None = None):
        self.status = status_store
        if deny is None:
            deny = {
                FacingMode(v.strip()) for v in os.getenv("MOCK_CAMERA_DENY", "").split(",") if v.strip()
            }
        self.deny = set(deny)
        self.streams: list[MockStream] = []

    @property
    def open_streams(self) -> list[MockStream]:
        return [s for s in self.streams if s.active]

    def open_stream(self, facing_mode, ideal_width: int, ideal_height: int) -> Stream:
        if facing_mode in self.deny:
            self.status.log(f"mock_camera: refusing {facing_mode.value}")
            raise CapturePermissionError(facing_mode, "denied by mock")
        stream = MockStream(facing_mode)
        self.streams.append(stream)
        self.status.log(f"mock_camera: serving {facing_mode.value} (hint {ideal_width}x{ideal_height})")
        return stream
